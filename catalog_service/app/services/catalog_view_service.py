from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ItemNotFoundError
from ..crud.catalog import items_crud, parameters_crud, recipes_crud
from ..enum.catalog_enum import ItemType
from ..schemas.catalog.items_schemas import ItemDetailOut, ItemOut, ItemWithPrices
from ..schemas.catalog.recipe_schemas import RecipeLineOut
from .price_push_service import variant_pricing_fields
from .pricing_service import compute_prices, pricing_fields, to_number


def effective_pricing_fields(item, parent=None) -> dict:
    if parent is not None:
        return variant_pricing_fields(item, parent)

    fields = pricing_fields(item)
    # Until the first recalculation a composite prices from its manual cost
    if item.is_composite and to_number(item.composite_cost_cache) is not None:
        fields["manual_unit_cost"] = item.composite_cost_cache
    return fields


def priced_item(item, rounding_step, parent=None) -> ItemWithPrices:
    base = parent if parent is not None else item
    return ItemWithPrices(
        item=ItemOut.model_validate(item),
        prices=compute_prices(effective_pricing_fields(item, parent), rounding_step),
        pending_recalculation=bool(base.is_composite) and to_number(base.composite_cost_cache) is None,
    )


def list_products(db: Session, owner_id: str, skip: int = 0, limit: Optional[int] = None) -> List[ItemWithPrices]:
    rounding_step = parameters_crud.get_rounding_step(db)
    products = items_crud.get_items(db, owner_id, item_type=ItemType.product)
    products = products[skip:skip + limit] if limit else products[skip:]
    return [priced_item(p, rounding_step) for p in products]


def get_product_detail(db: Session, owner_id: str, item_id: int) -> ItemDetailOut:
    item = items_crud.get_item_by_id(db, item_id, owner_id)
    if not item:
        raise ItemNotFoundError(item_id)

    rounding_step = parameters_crud.get_rounding_step(db)
    variants = items_crud.get_items(db, owner_id, item_type=ItemType.variant, parent_id=item_id)
    recipe = recipes_crud.get_recipe_lines(db, owner_id, parent_item_id=item_id)

    return ItemDetailOut(
        product=priced_item(item, rounding_step),
        variants=[priced_item(v, rounding_step, parent=item) for v in variants],
        recipe=[RecipeLineOut.model_validate(line) for line in recipe],
        rounding_step=rounding_step,
    )
