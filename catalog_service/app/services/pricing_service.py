"""
Pricing formulas shared by the catalog views, the composite cost resolver and
the Tiendanube price push.

All helpers are pure and never raise: missing, non-numeric or non-finite
inputs come back as ``None`` ("no price") instead of an exception or NaN.
"""
import math
import sys
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Optional

from ..enum.catalog_enum import PublishPriceKind
from ..schemas.catalog.pricing_schemas import PriceBreakdown

# Final retail/wholesale/per-100g prices always land on a multiple of 50
FINAL_PRICE_STEP = 50

PRICING_FIELDS = (
    "manual_unit_cost",
    "bulk_price",
    "units_per_bulk",
    "is_composite",
    "retail_margin",
    "wholesale_margin",
    "wholesale_pack_size",
    "is_sold_by_weight",
    "weight_per_unit_g",
    "manual_cost_per_100g",
    "margin_per_100g",
)


def to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def field_value(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def pricing_fields(item: Any) -> dict:
    """Snapshot the pricing inputs of an ORM row, schema or mapping."""
    return {name: field_value(item, name) for name in PRICING_FIELDS}


def ceil_to_step(value: Any, step: Any = 1) -> Optional[float]:
    number = to_number(value)
    if number is None:
        return None
    s = to_number(step)
    k = s if s is not None and s > 0 else 1
    return math.ceil(number / k) * k


def round_to_step(value: Any, step: Any) -> Optional[float]:
    """Round half up to the nearest multiple of ``step``."""
    number = to_number(value)
    if number is None:
        return None
    s = to_number(step)
    if s is None or s <= 0:
        return number
    return math.floor((number + sys.float_info.epsilon) / s + 0.5) * s


def round_to_step_min_positive(value: Any, step: Any) -> Optional[float]:
    rounded = round_to_step(value, step)
    if rounded is None:
        return None
    number = to_number(value)
    s = to_number(step)
    if number is not None and number > 0 and rounded <= 0 and s is not None and s > 0:
        return s
    return rounded


def valid_margin(value: Any) -> Optional[float]:
    margin = to_number(value)
    if margin is not None and 0 < margin < 1:
        return margin
    return None


def unit_cost_from(manual_unit_cost: Any, bulk_price: Any, units_per_bulk: Any) -> Optional[float]:
    manual = to_number(manual_unit_cost)
    if manual is not None and manual > 0:
        return manual

    bulk = to_number(bulk_price)
    units = to_number(units_per_bulk)
    if bulk is not None and bulk > 0 and units is not None and units > 0:
        return bulk / units
    return None


def unit_sale_price(unit_cost: Any, margin: Any, rounding_step: Any = 1) -> Optional[float]:
    cost = to_number(unit_cost)
    m = valid_margin(margin)
    if cost is None or cost <= 0 or m is None:
        return None
    return ceil_to_step(cost / (1 - m), rounding_step)


def pack_size_of(value: Any) -> int:
    pack = to_number(value)
    if pack is None or pack < 1:
        return 1
    return int(pack)


def final_pack_price(unit_price: Any, pack_size: Any = 1, step: Any = FINAL_PRICE_STEP) -> Optional[float]:
    price = to_number(unit_price)
    if price is None:
        return None
    final = round_to_step_min_positive(price * pack_size_of(pack_size), step)
    if final is None:
        return None
    return max(0, final)


def cost_per_100g_from(item: Any, unit_cost: Optional[float]) -> Optional[float]:
    manual = to_number(field_value(item, "manual_cost_per_100g"))
    if manual is not None and manual > 0:
        return manual

    if not field_value(item, "is_sold_by_weight"):
        return None
    weight = to_number(field_value(item, "weight_per_unit_g"))
    if unit_cost is not None and weight is not None and weight > 0:
        return (unit_cost / weight) * 100
    return None


def compute_prices(item: Any, rounding_step: Any = 1) -> PriceBreakdown:
    """
    Turn one item's cost, margin and pack inputs into a price breakdown.

    - unit prices are ceiled to ``rounding_step`` before the pack is applied
    - retail/wholesale prices (unit price x pack) round to the nearest 50
    - the per-100g price needs ``is_sold_by_weight`` and its own margin, and
      ignores the pack size
    """
    pack = pack_size_of(field_value(item, "wholesale_pack_size"))

    unit_cost = unit_cost_from(
        field_value(item, "manual_unit_cost"),
        field_value(item, "bulk_price"),
        field_value(item, "units_per_bulk"),
    )

    retail_unit = unit_sale_price(unit_cost, field_value(item, "retail_margin"), rounding_step)
    wholesale_unit = unit_sale_price(unit_cost, field_value(item, "wholesale_margin"), rounding_step)

    cost_100g = cost_per_100g_from(item, unit_cost)

    price_100g = None
    margin_100g = valid_margin(field_value(item, "margin_per_100g"))
    if field_value(item, "is_sold_by_weight") and cost_100g is not None and cost_100g > 0 and margin_100g is not None:
        price_100g = round_to_step_min_positive(cost_100g / (1 - margin_100g), FINAL_PRICE_STEP)

    return PriceBreakdown(
        pack_size=pack,
        unit_cost=unit_cost,
        retail_unit_price=retail_unit,
        wholesale_unit_price=wholesale_unit,
        retail_price=final_pack_price(retail_unit, pack),
        wholesale_price=final_pack_price(wholesale_unit, pack),
        cost_per_100g=cost_100g,
        price_per_100g=price_100g,
    )


def price_for_kind(prices: PriceBreakdown, kind: Any) -> Optional[float]:
    if kind == PublishPriceKind.wholesale:
        return prices.wholesale_price
    return prices.retail_price
