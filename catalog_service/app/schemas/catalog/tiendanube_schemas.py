from pydantic import BaseModel
from typing import List, Optional

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ...enum.catalog_enum import PushScope


class PushPricesRequest(EmptyStringModel):
    scope: PushScope = PushScope.all
    item_id: Optional[int] = None


class VariantSkip(BaseModel):
    sku: str = ""
    local_variant_id: int
    reason: str
    remote_variant_id: Optional[int] = None


class ProductPatchResult(BaseModel):
    remote_product_id: int
    updated: int


class FailedProduct(BaseModel):
    remote_product_id: int
    attempted: int
    error: str


class ReconciliationReport(BaseModel):
    ok: bool
    partial: bool
    scope: PushScope
    requested_item_id: Optional[int] = None
    products_touched: int = 0
    variants_updated: int = 0
    per_product: List[ProductPatchResult] = []
    failed_products: List[FailedProduct] = []
    missing_local_id: List[VariantSkip] = []
    missing_in_remote: List[VariantSkip] = []
    skipped_no_price: List[VariantSkip] = []


class StockSyncSummary(BaseModel):
    ok: bool = True
    remote_variants_seen: int = 0
    local_with_sku: int = 0
    matched_by_sku: int = 0
    rows_written: int = 0
