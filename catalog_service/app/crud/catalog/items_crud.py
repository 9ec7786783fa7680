# app/crud/catalog/items_crud.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ...models.catalog.items import Item
from ...enum.catalog_enum import ItemType
from ...schemas.catalog.items_schemas import ItemCreate, ItemUpdate, VariantCreate

logger = logging.getLogger(__name__)

# Soft caps, a hit is logged and the truncated result is still returned
ITEMS_ROW_CAP = 5000
CATALOG_LOOKUP_ROW_CAP = 800

# Fields a variant takes from its parent product when left empty
VARIANT_INHERITED_FIELDS = ("retail_margin", "wholesale_margin", "wholesale_pack_size")


def _warn_if_capped(rows: list, cap: int, what: str, owner_id: str) -> None:
    if cap and len(rows) >= cap:
        logger.warning("%s query for owner %s hit the %s row cap", what, owner_id, cap)


def get_items(
    db: Session,
    owner_id: str,
    item_type: Optional[ItemType] = None,
    parent_id: Optional[int] = None,
    limit: int = ITEMS_ROW_CAP,
) -> List[Item]:
    query = db.query(Item).filter(Item.owner_id == owner_id)
    if item_type is not None:
        query = query.filter(Item.type == ItemType(item_type).value)
    if parent_id is not None:
        query = query.filter(Item.parent_id == parent_id)

    rows = query.order_by(Item.id.asc()).limit(limit).all()
    _warn_if_capped(rows, limit, "Items", owner_id)
    return rows


def get_catalog_lookup(db: Session, owner_id: str, limit: int = CATALOG_LOOKUP_ROW_CAP) -> List[Item]:
    rows = (
        db.query(Item)
        .filter(Item.owner_id == owner_id)
        .order_by(Item.name.asc())
        .limit(limit)
        .all()
    )
    _warn_if_capped(rows, limit, "Catalog lookup", owner_id)
    return rows


def get_item_by_id(
    db: Session,
    item_id: int,
    owner_id: str,
    item_type: Optional[ItemType] = None,
) -> Optional[Item]:
    query = db.query(Item).filter(
        Item.id == item_id,
        Item.owner_id == owner_id,
    )
    if item_type is not None:
        query = query.filter(Item.type == ItemType(item_type).value)
    return query.first()


def create_item(db: Session, item: ItemCreate, owner_id: str) -> Item:
    item_data = item.model_dump()
    item_data["owner_id"] = owner_id  # owner comes from the token, never the body
    item_data["type"] = ItemType(item_data["type"]).value
    item_data["publish_price_kind"] = item_data["publish_price_kind"].value
    if item_data.get("wholesale_pack_size") is None:
        item_data["wholesale_pack_size"] = 1

    if item_data.get("parent_id") is not None and not get_item_by_id(db, item_data["parent_id"], owner_id):
        raise ValueError(f"Parent item {item_data['parent_id']} does not exist")

    db_item = Item(**item_data)
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item


def create_variant(db: Session, parent: Item, variant: VariantCreate, owner_id: str) -> Item:
    variant_data = variant.model_dump()
    for name in VARIANT_INHERITED_FIELDS:
        if variant_data.get(name) is None:
            variant_data[name] = getattr(parent, name)

    db_item = Item(
        owner_id=owner_id,
        type=ItemType.variant.value,
        parent_id=parent.id,
        **variant_data,
    )
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item


def update_item(db: Session, item_id: int, owner_id: str, patch: dict, commit: bool = True) -> Optional[Item]:
    db_item = get_item_by_id(db, item_id, owner_id)
    if not db_item:
        return None

    for k, v in patch.items():
        setattr(db_item, k, v)

    if commit:
        db.commit()
        db.refresh(db_item)
    else:
        db.flush()
    return db_item


def apply_item_update(db: Session, item_id: int, owner_id: str, item: ItemUpdate) -> Optional[Item]:
    # Update only the fields that are provided
    patch = item.model_dump(exclude_unset=True)
    if "publish_price_kind" in patch and patch["publish_price_kind"] is not None:
        patch["publish_price_kind"] = patch["publish_price_kind"].value
    return update_item(db, item_id, owner_id, patch)


def update_items_batch(db: Session, owner_id: str, patches: List[Tuple[int, dict]]) -> int:
    """
    Apply one patch per item id and commit them together.

    Rows are updated one statement at a time inside a single transaction; an
    id that is not the owner's rolls the whole batch back.
    """
    for item_id, patch in patches:
        matched = db.query(Item).filter(
            Item.id == item_id,
            Item.owner_id == owner_id,
        ).update(patch, synchronize_session=False)
        if not matched:
            db.rollback()
            raise LookupError(f"Item {item_id} not found for owner {owner_id}")

    db.commit()
    return len(patches)
