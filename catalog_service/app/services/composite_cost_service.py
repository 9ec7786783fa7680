"""
Composite (recipe) cost resolution.

A composite item's unit cost is the sum of its recipe lines: ``quantity x
unit cost`` for count lines and ``quantity x cost per 100g / 100`` for gram
lines. Components are resolved recursively with a memo table so every item is
costed once per run; items that sit on a recipe cycle come back without a
cost instead of recursing forever.
"""
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, NamedTuple, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import ItemNotFoundError
from ..crud.catalog import items_crud, recipes_crud
from ..enum.catalog_enum import ItemType, RecipeUnit
from ..schemas.catalog.recipe_schemas import (
    CompositeBreakdown,
    CompositeResolutionResult,
    RecipeLineBreakdown,
    ResolutionWarning,
)
from .pricing_service import compute_prices, pricing_fields, to_number

logger = logging.getLogger(__name__)


class ResolvedCost(NamedTuple):
    unit_cost: Optional[float]
    cost_per_100g: Optional[float]


UNRESOLVED = ResolvedCost(None, None)


def line_cost(unit: str, quantity: Optional[float], component: ResolvedCost) -> Optional[float]:
    if quantity is None:
        return None
    if unit == RecipeUnit.count.value:
        if component.unit_cost is None:
            return None
        return quantity * component.unit_cost
    if component.cost_per_100g is None:
        return None
    return quantity * (component.cost_per_100g / 100)


def missing_cost_message(unit: str, component_id: int, parent_id: int, quantity: Optional[float]) -> str:
    if quantity is None:
        return f"Invalid quantity for component {component_id} (recipe of item {parent_id})"
    if unit == RecipeUnit.count.value:
        return f"Missing unit cost for component {component_id} (recipe of item {parent_id})"
    return f"Missing cost per 100g for component {component_id} (recipe of item {parent_id})"


class CompositeCostResolver:
    """Memoized depth-first costing over one owner's items and recipe lines."""

    def __init__(self, items: Iterable, recipe_lines: Iterable):
        self.items_by_id = {item.id: item for item in items}
        self.lines_by_parent: Dict[int, list] = defaultdict(list)
        for line in recipe_lines:
            self.lines_by_parent[line.parent_item_id].append(line)

        self.memo: Dict[int, ResolvedCost] = {}
        self.warnings: List[ResolutionWarning] = []
        self.cycle_item_ids: List[int] = []
        self._on_stack = set()
        self._path: List[int] = []

    def costed_item(self, item_id: int):
        """The item whose own inputs price ``item_id`` (parent product for variants)."""
        item = self.items_by_id.get(item_id)
        if item is not None and item.type == ItemType.variant.value and item.parent_id is not None:
            return self.items_by_id.get(int(item.parent_id), item)
        return item

    def resolve(self, item_id: int) -> ResolvedCost:
        if item_id in self.memo:
            return self.memo[item_id]

        if item_id in self._on_stack:
            self._record_cycle(item_id)
            return UNRESOLVED

        item = self.items_by_id.get(item_id)
        if item is None:
            return UNRESOLVED

        self._on_stack.add(item_id)
        self._path.append(item_id)
        try:
            result = self._resolve_item(item)
        finally:
            self._path.pop()
            self._on_stack.discard(item_id)

        self.memo[item_id] = result
        return result

    def _record_cycle(self, item_id: int) -> None:
        start = self._path.index(item_id)
        for member in self._path[start:]:
            if member not in self.cycle_item_ids:
                self.cycle_item_ids.append(member)

    def _resolve_item(self, item) -> ResolvedCost:
        # Variants never carry their own recipe, they cost as their parent
        if item.type == ItemType.variant.value and item.parent_id is not None:
            parent_id = int(item.parent_id)
            if parent_id in self.items_by_id:
                return self.resolve(parent_id)

        fields = pricing_fields(item)
        if not item.is_composite:
            prices = compute_prices(fields)
            return ResolvedCost(prices.unit_cost, prices.cost_per_100g)

        total = 0.0
        complete = True
        for line in self.lines_by_parent.get(item.id, []):
            component = self.resolve(line.component_item_id)
            quantity = to_number(line.quantity)
            cost = line_cost(line.unit, quantity, component)
            if cost is None:
                # keep summing so every missing line gets reported
                complete = False
                self.warnings.append(ResolutionWarning(
                    parent_item_id=item.id,
                    component_item_id=line.component_item_id,
                    unit=line.unit,
                    message=missing_cost_message(line.unit, line.component_item_id, item.id, quantity),
                ))
                continue
            total += cost

        if not complete:
            return UNRESOLVED

        # A composite sold by weight also gets a cost per 100g from its total
        fields["manual_unit_cost"] = total
        prices = compute_prices(fields)
        return ResolvedCost(total, prices.cost_per_100g)


def load_resolver(db: Session, owner_id: str) -> CompositeCostResolver:
    items = items_crud.get_items(db, owner_id)
    lines = recipes_crud.get_recipe_lines(db, owner_id)
    return CompositeCostResolver(items, lines)


async def resolve_composites(db: Session, owner_id: str) -> CompositeResolutionResult:
    """
    Recompute every composite of ``owner_id`` and refresh its cost cache.

    Only composites whose cost fully resolved are written; the others keep
    whatever (possibly stale) cache they had. A storage error aborts the
    run and propagates; composites written before it keep their new cache.
    """
    resolver = load_resolver(db, owner_id)

    resolved = []
    for item in resolver.items_by_id.values():
        if not item.is_composite:
            continue
        cost = resolver.resolve(item.id)
        if cost.unit_cost is not None:
            resolved.append((item.id, cost.unit_cost))

    updated = 0
    try:
        for item_id, unit_cost in resolved:
            items_crud.update_item(db, item_id, owner_id, {
                "composite_cost_cache": unit_cost,
                "composite_cost_computed_at": datetime.now(timezone.utc),
            })
            updated += 1
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Composite recalculation aborted for owner %s after %s writes", owner_id, updated)
        raise

    logger.info(
        "Composite recalculation for owner %s: %s updated, %s warnings, %s items on cycles",
        owner_id, updated, len(resolver.warnings), len(resolver.cycle_item_ids),
    )
    return CompositeResolutionResult(
        updated_count=updated,
        warnings=resolver.warnings,
        cycle_item_ids=resolver.cycle_item_ids,
    )


def explain_composite(db: Session, owner_id: str, item_id: int) -> CompositeBreakdown:
    resolver = load_resolver(db, owner_id)
    item = resolver.items_by_id.get(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)

    resolved = resolver.resolve(item_id)

    lines = []
    for line in resolver.lines_by_parent.get(item_id, []):
        component = resolver.resolve(line.component_item_id)
        costed = resolver.costed_item(line.component_item_id)
        quantity = to_number(line.quantity)
        cost = line_cost(line.unit, quantity, component)
        lines.append(RecipeLineBreakdown(
            line_id=line.id,
            component_item_id=line.component_item_id,
            costed_item_id=costed.id if costed is not None else None,
            component_name=costed.name if costed is not None else None,
            unit=line.unit,
            quantity=quantity if quantity is not None else 0,
            component_cost=component.unit_cost if line.unit == RecipeUnit.count.value else component.cost_per_100g,
            line_cost=cost,
            issue=None if cost is not None else missing_cost_message(
                line.unit, line.component_item_id, item_id, quantity),
        ))

    return CompositeBreakdown(
        item_id=item_id,
        lines=lines,
        total=resolved.unit_cost,
        cached_cost=item.composite_cost_cache,
        cached_at=item.composite_cost_computed_at,
        in_cycle=item_id in resolver.cycle_item_ids,
    )
