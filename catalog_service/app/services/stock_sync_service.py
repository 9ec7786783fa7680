import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.config import settings
from ..clients.tiendanube_client import TiendanubeClient
from ..crud.catalog import items_crud
from ..enum.catalog_enum import ItemType
from ..schemas.catalog.tiendanube_schemas import StockSyncSummary
from .pricing_service import to_number
from .remote_catalog_service import iter_remote_pages

logger = logging.getLogger(__name__)


def remote_stock_from(variant: Dict[str, Any]) -> Optional[float]:
    """Direct stock if numeric, else the sum of numeric per-location levels."""
    stock = to_number(variant.get("stock"))
    if stock is not None:
        return stock

    levels = variant.get("inventory_levels")
    if isinstance(levels, list):
        total = 0.0
        found = False
        for level in levels:
            level_stock = to_number((level or {}).get("stock"))
            if level_stock is not None:
                total += level_stock
                found = True
        return total if found else None
    return None


async def sync_stock(
    db: Session,
    owner_id: str,
    client=None,
    chunk_size: Optional[int] = None,
) -> StockSyncSummary:
    """
    Copy Tiendanube stock onto the owner's existing local variants, matched by SKU.

    Only updates rows, never inserts or deletes. Writes go out in chunks of
    ``chunk_size`` rows, one transaction each; the first failing chunk aborts
    the run.
    """
    chunk_size = chunk_size or settings.STOCK_SYNC_CHUNK_SIZE
    client = client or TiendanubeClient.from_settings()

    local_variants = items_crud.get_items(db, owner_id, item_type=ItemType.variant)
    sku_to_local_id: Dict[str, int] = {}
    for item in local_variants:
        sku = str(item.sku or "").strip()
        if sku:
            sku_to_local_id[sku] = item.id

    seen = 0
    updates: List[Tuple[int, Dict[str, Any]]] = []
    async for products in iter_remote_pages(client):
        for product in products:
            for variant in product.get("variants") or []:
                seen += 1
                sku = str(variant.get("sku") or "").strip()
                local_id = sku_to_local_id.get(sku) if sku else None
                if local_id is None:
                    continue
                remote_id = to_number(variant.get("id"))
                updates.append((local_id, {
                    "remote_variant_id": int(remote_id) if remote_id is not None else None,
                    "remote_stock": remote_stock_from(variant),
                    "remote_stock_synced_at": datetime.now(timezone.utc),
                }))

    # One transaction per chunk, chunks already committed stay written
    written = 0
    try:
        for start in range(0, len(updates), chunk_size):
            written += items_crud.update_items_batch(db, owner_id, updates[start:start + chunk_size])
    except (SQLAlchemyError, LookupError):
        db.rollback()
        logger.exception("Stock sync aborted for owner %s after %s rows", owner_id, written)
        raise

    logger.info("Stock sync for owner %s: %s remote variants, %s matched, %s written",
                owner_id, seen, len(updates), written)
    return StockSyncSummary(
        remote_variants_seen=seen,
        local_with_sku=len(sku_to_local_id),
        matched_by_sku=len(updates),
        rows_written=written,
    )
