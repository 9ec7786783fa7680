from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.catalog_enum import ItemType, PublishPriceKind
from .pricing_schemas import ItemPricingFields, PriceBreakdown
from .recipe_schemas import RecipeLineOut


class ItemCreate(ItemPricingFields):
    name: str
    type: ItemType = ItemType.product
    parent_id: Optional[int] = None
    publish_price_kind: PublishPriceKind = PublishPriceKind.retail
    sku: Optional[str] = None
    remote_variant_id: Optional[int] = None


class VariantCreate(EmptyStringModel):
    name: str
    sku: Optional[str] = None
    remote_variant_id: Optional[int] = None
    manual_unit_cost: Optional[float] = None
    bulk_price: Optional[float] = None
    units_per_bulk: Optional[float] = None
    # Missing values are inherited from the parent product
    retail_margin: Optional[float] = None
    wholesale_margin: Optional[float] = None
    wholesale_pack_size: Optional[int] = None


class ItemUpdate(EmptyStringModel):
    name: Optional[str] = None
    manual_unit_cost: Optional[float] = None
    bulk_price: Optional[float] = None
    units_per_bulk: Optional[float] = None
    is_composite: Optional[bool] = None
    retail_margin: Optional[float] = None
    wholesale_margin: Optional[float] = None
    wholesale_pack_size: Optional[int] = Field(default=None, ge=1)
    is_sold_by_weight: Optional[bool] = None
    weight_per_unit_g: Optional[float] = None
    manual_cost_per_100g: Optional[float] = None
    margin_per_100g: Optional[float] = None
    publish_price_kind: Optional[PublishPriceKind] = None
    sku: Optional[str] = None
    remote_variant_id: Optional[int] = None


class ItemOut(BaseModel):
    id: int
    owner_id: str
    name: str
    type: str
    parent_id: Optional[int] = None
    manual_unit_cost: Optional[float] = None
    bulk_price: Optional[float] = None
    units_per_bulk: Optional[float] = None
    is_composite: bool = False
    retail_margin: Optional[float] = None
    wholesale_margin: Optional[float] = None
    wholesale_pack_size: Optional[int] = None
    is_sold_by_weight: bool = False
    weight_per_unit_g: Optional[float] = None
    manual_cost_per_100g: Optional[float] = None
    margin_per_100g: Optional[float] = None
    publish_price_kind: str = PublishPriceKind.retail.value
    composite_cost_cache: Optional[float] = None
    composite_cost_computed_at: Optional[datetime] = None
    sku: Optional[str] = None
    remote_variant_id: Optional[int] = None
    remote_stock: Optional[float] = None
    remote_stock_synced_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ItemLookup(BaseModel):
    id: int
    name: str
    type: str
    parent_id: Optional[int] = None
    is_composite: bool = False

    class Config:
        from_attributes = True


class ItemWithPrices(BaseModel):
    item: ItemOut
    prices: PriceBreakdown
    # Composite whose cache is missing: prices wait for a recalculation
    pending_recalculation: bool = False


class ItemDetailOut(BaseModel):
    product: ItemWithPrices
    variants: List[ItemWithPrices] = []
    recipe: List[RecipeLineOut] = []
    rounding_step: float = 1
