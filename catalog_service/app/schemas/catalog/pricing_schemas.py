from pydantic import BaseModel, Field
from typing import Optional

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class PriceBreakdown(BaseModel):
    pack_size: int = 1
    unit_cost: Optional[float] = None
    retail_unit_price: Optional[float] = None
    wholesale_unit_price: Optional[float] = None
    retail_price: Optional[float] = None
    wholesale_price: Optional[float] = None
    cost_per_100g: Optional[float] = None
    price_per_100g: Optional[float] = None


class ItemPricingFields(EmptyStringModel):
    manual_unit_cost: Optional[float] = None
    bulk_price: Optional[float] = None
    units_per_bulk: Optional[float] = None
    is_composite: bool = False
    retail_margin: Optional[float] = None
    wholesale_margin: Optional[float] = None
    wholesale_pack_size: Optional[int] = 1
    is_sold_by_weight: bool = False
    weight_per_unit_g: Optional[float] = None
    manual_cost_per_100g: Optional[float] = None
    margin_per_100g: Optional[float] = None


class PricingPreviewRequest(ItemPricingFields):
    rounding_step: Optional[float] = Field(
        default=None, description="Falls back to the stored rounding_step parameter")
