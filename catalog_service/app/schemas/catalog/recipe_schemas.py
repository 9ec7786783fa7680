from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.catalog_enum import RecipeUnit


class RecipeLineCreate(EmptyStringModel):
    parent_item_id: int
    component_item_id: int
    unit: RecipeUnit = RecipeUnit.weight_grams
    quantity: float = Field(gt=0)


class RecipeLineOut(BaseModel):
    id: int
    parent_item_id: int
    component_item_id: int
    unit: str
    quantity: float

    class Config:
        from_attributes = True


class ResolutionWarning(BaseModel):
    parent_item_id: int
    component_item_id: int
    unit: str
    message: str


class CompositeResolutionResult(BaseModel):
    updated_count: int = 0
    warnings: List[ResolutionWarning] = []
    cycle_item_ids: List[int] = []


class RecipeLineBreakdown(BaseModel):
    line_id: int
    component_item_id: int
    # Item actually used for costing (the parent product for variants)
    costed_item_id: Optional[int] = None
    component_name: Optional[str] = None
    unit: str
    quantity: float
    component_cost: Optional[float] = None
    line_cost: Optional[float] = None
    issue: Optional[str] = None


class CompositeBreakdown(BaseModel):
    item_id: int
    lines: List[RecipeLineBreakdown] = []
    total: Optional[float] = None
    cached_cost: Optional[float] = None
    cached_at: Optional[datetime] = None
    in_cycle: bool = False
