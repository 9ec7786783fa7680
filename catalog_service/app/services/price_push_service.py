"""
Push locally computed variant prices to the Tiendanube catalog.

Each local variant goes through the same gates: identification (SKU or stored
remote variant id) -> parent product -> unit cost -> published price ->
remote match. Variants that fail a gate are reported, not raised. Matched
updates are batched per remote product and patched one product at a time,
with a pause between calls to stay under the API rate limit. A failed patch
only fails that product.
"""
import asyncio
import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.config import settings
from ..clients.tiendanube_client import RemoteCatalogError, TiendanubeClient
from ..core.exceptions import ItemNotFoundError, ReconciliationInputError
from ..crud.catalog import items_crud, parameters_crud
from ..enum.catalog_enum import ItemType, PushScope, SkipReason
from ..schemas.catalog.tiendanube_schemas import (
    FailedProduct,
    ProductPatchResult,
    ReconciliationReport,
    VariantSkip,
)
from .pricing_service import compute_prices, price_for_kind, to_number, unit_cost_from, valid_margin
from .remote_catalog_service import RemoteCatalogIndex, build_remote_index, normalize_sku

logger = logging.getLogger(__name__)


def _pick(variant_value: Any, parent_value: Any) -> Any:
    if variant_value is None or variant_value == "":
        return parent_value
    return variant_value


def resolve_margin(variant_margin: Any, parent_margin: Any) -> Optional[float]:
    margin = valid_margin(variant_margin)
    if margin is None:
        margin = valid_margin(parent_margin)
    return margin


def pick_positive(variant_value: Any, parent_value: Any) -> Optional[float]:
    for value in (variant_value, parent_value):
        number = to_number(value)
        if number is not None and number > 0:
            return number
    return None


def parent_unit_cost_source(parent) -> Any:
    """A composite parent costs from its recipe cache, falling back to the manual cost."""
    if parent.is_composite and to_number(parent.composite_cost_cache) is not None:
        return parent.composite_cost_cache
    return parent.manual_unit_cost


def variant_unit_cost(variant, parent) -> Optional[float]:
    """Variant cost inputs win over the parent's."""
    return unit_cost_from(
        _pick(variant.manual_unit_cost, parent_unit_cost_source(parent)),
        _pick(variant.bulk_price, parent.bulk_price),
        _pick(variant.units_per_bulk, parent.units_per_bulk),
    )


def variant_pricing_fields(variant, parent) -> dict:
    """
    Pricing inputs of a variant, completed from its parent product.

    Used both for the prices pushed to Tiendanube and for the product views,
    so the two always agree. The pack size and the published price kind are
    always the parent's.
    """
    return {
        "manual_unit_cost": variant_unit_cost(variant, parent),
        "bulk_price": None,
        "units_per_bulk": None,
        "is_composite": False,
        "retail_margin": resolve_margin(variant.retail_margin, parent.retail_margin),
        "wholesale_margin": resolve_margin(variant.wholesale_margin, parent.wholesale_margin),
        "wholesale_pack_size": parent.wholesale_pack_size,
        # the column is never null, so a False variant flag reads as "not set"
        "is_sold_by_weight": bool(variant.is_sold_by_weight or parent.is_sold_by_weight),
        "weight_per_unit_g": pick_positive(variant.weight_per_unit_g, parent.weight_per_unit_g),
        "manual_cost_per_100g": pick_positive(variant.manual_cost_per_100g, parent.manual_cost_per_100g),
        "margin_per_100g": resolve_margin(variant.margin_per_100g, parent.margin_per_100g),
    }


def remote_price(price: float) -> str:
    """Tiendanube expects the price as a stringified integer (half up)."""
    return str(int(math.floor(price + 0.5)))


@dataclass
class PricePlan:
    by_product: Dict[int, List[Dict[str, Any]]] = field(default_factory=lambda: defaultdict(list))
    missing_local_id: List[VariantSkip] = field(default_factory=list)
    missing_in_remote: List[VariantSkip] = field(default_factory=list)
    skipped_no_price: List[VariantSkip] = field(default_factory=list)

    def add(self, remote_product_id: int, remote_variant_id: int, price: float) -> None:
        self.by_product[remote_product_id].append(
            {"id": remote_variant_id, "price": remote_price(price)})


def plan_price_updates(
    products: List,
    variants: List,
    index: RemoteCatalogIndex,
    rounding_step: Any,
) -> PricePlan:
    plan = PricePlan()
    products_by_id = {p.id: p for p in products}

    for variant in variants:
        sku = normalize_sku(variant.sku)
        stored_remote_id = to_number(variant.remote_variant_id)
        if not sku and stored_remote_id is None:
            plan.missing_local_id.append(VariantSkip(
                sku=sku, local_variant_id=variant.id, reason=SkipReason.missing_local_id.value))
            continue

        parent = products_by_id.get(int(variant.parent_id)) if variant.parent_id is not None else None
        if parent is None:
            plan.skipped_no_price.append(VariantSkip(
                sku=sku, local_variant_id=variant.id, reason=SkipReason.no_parent.value))
            continue

        prices = compute_prices(variant_pricing_fields(variant, parent), rounding_step)
        if prices.unit_cost is None:
            plan.skipped_no_price.append(VariantSkip(
                sku=sku, local_variant_id=variant.id, reason=SkipReason.no_unit_cost.value))
            continue

        price = price_for_kind(prices, parent.publish_price_kind)
        if price is None:
            plan.skipped_no_price.append(VariantSkip(
                sku=sku, local_variant_id=variant.id, reason=SkipReason.no_computed_price.value))
            continue

        ref = index.match(sku, stored_remote_id)
        if ref is None:
            plan.missing_in_remote.append(VariantSkip(
                sku=sku,
                local_variant_id=variant.id,
                reason=SkipReason.missing_in_remote.value,
                remote_variant_id=int(stored_remote_id) if stored_remote_id is not None else None,
            ))
            continue

        plan.add(ref.remote_product_id, ref.remote_variant_id, price)

    return plan


async def apply_price_updates(
    client,
    plan: PricePlan,
    pacing_delay: float,
) -> Tuple[List[ProductPatchResult], List[FailedProduct]]:
    results: List[ProductPatchResult] = []
    failed: List[FailedProduct] = []

    for product_id, payload in plan.by_product.items():
        if not payload:
            continue
        try:
            await asyncio.to_thread(client.patch_variants, product_id, payload)
            results.append(ProductPatchResult(remote_product_id=product_id, updated=len(payload)))
        except (RemoteCatalogError, requests.RequestException) as e:
            failed.append(FailedProduct(
                remote_product_id=product_id, attempted=len(payload), error=str(e)))
            logger.error("PATCH failed for remote product %s (%s variants): %s",
                         product_id, len(payload), e)
        await asyncio.sleep(pacing_delay)

    return results, failed


def load_rounding_step(db: Session) -> float:
    try:
        return parameters_crud.get_rounding_step(db)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Could not load rounding_step parameter, using 1: %s", e)
        return 1


def load_local_variants(db: Session, owner_id: str, scope: PushScope, item_id: Optional[int]):
    if scope == PushScope.single_item:
        product = items_crud.get_item_by_id(db, item_id, owner_id, ItemType.product)
        if not product:
            raise ItemNotFoundError(item_id)
        variants = items_crud.get_items(db, owner_id, item_type=ItemType.variant, parent_id=item_id)
        return [product], variants

    products = items_crud.get_items(db, owner_id, item_type=ItemType.product)
    variants = items_crud.get_items(db, owner_id, item_type=ItemType.variant)
    return products, variants


async def reconcile_prices(
    db: Session,
    owner_id: str,
    scope: Any = PushScope.all,
    item_id: Optional[int] = None,
    client=None,
    pacing_delay: Optional[float] = None,
) -> ReconciliationReport:
    """Compute and push prices for one product's variants or the whole catalog of ``owner_id``."""
    try:
        scope = PushScope(scope)
    except ValueError:
        raise ReconciliationInputError(f"Unknown scope {scope!r}")
    if scope == PushScope.single_item and item_id is None:
        raise ReconciliationInputError("scope=single-item requires item_id")

    if pacing_delay is None:
        pacing_delay = settings.PUSH_PACING_SECONDS
    client = client or TiendanubeClient.from_settings()

    logger.info("Price push accepted: owner=%s scope=%s item_id=%s", owner_id, scope.value, item_id)

    rounding_step = load_rounding_step(db)
    products, variants = load_local_variants(db, owner_id, scope, item_id)

    index = await build_remote_index(client)
    plan = plan_price_updates(products, variants, index, rounding_step)
    results, failed = await apply_price_updates(client, plan, pacing_delay)

    report = ReconciliationReport(
        ok=not failed,
        partial=bool(failed) and bool(results),
        scope=scope,
        requested_item_id=item_id,
        products_touched=len(results),
        variants_updated=sum(r.updated for r in results),
        per_product=results,
        failed_products=failed,
        missing_local_id=plan.missing_local_id,
        missing_in_remote=plan.missing_in_remote,
        skipped_no_price=plan.skipped_no_price,
    )

    logger.info(
        "Price push completed: owner=%s products=%s variants=%s failed=%s "
        "missing_local_id=%s missing_in_remote=%s skipped_no_price=%s",
        owner_id, report.products_touched, report.variants_updated, len(failed),
        len(plan.missing_local_id), len(plan.missing_in_remote), len(plan.skipped_no_price),
    )
    return report
