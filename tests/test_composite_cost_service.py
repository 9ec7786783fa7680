import asyncio
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import SQLAlchemyError

from catalog_service.app.core.exceptions import ItemNotFoundError
from catalog_service.app.services import composite_cost_service
from catalog_service.app.services.composite_cost_service import (
    CompositeCostResolver,
    explain_composite,
    resolve_composites,
)
from conftest import OTHER_OWNER, OWNER


@pytest.fixture
def bakery(make_item, make_line):
    flour = make_item(name="flour", type="ingredient", manual_unit_cost=500,
                      is_sold_by_weight=True, weight_per_unit_g=1000)
    egg = make_item(name="egg", type="ingredient", manual_unit_cost=30)
    cake = make_item(name="cake", is_composite=True)
    make_line(cake, flour, 300, unit="weight-grams")
    make_line(cake, egg, 2, unit="count")
    return SimpleNamespace(flour=flour, egg=egg, cake=cake)


def test_composite_cost_is_sum_of_lines(db, bakery):
    result = asyncio.run(resolve_composites(db, OWNER))

    db.refresh(bakery.cake)
    assert result.updated_count == 1
    assert result.warnings == []
    assert result.cycle_item_ids == []
    # 300 g at 50 per 100 g plus 2 eggs at 30
    assert bakery.cake.composite_cost_cache == pytest.approx(210)
    assert bakery.cake.composite_cost_computed_at is not None


def test_nested_composites_resolve_recursively(db, bakery, make_item, make_line):
    box = make_item(name="cake box", is_composite=True)
    make_line(box, bakery.cake, 2, unit="count")

    result = asyncio.run(resolve_composites(db, OWNER))

    db.refresh(box)
    assert result.updated_count == 2
    assert box.composite_cost_cache == pytest.approx(420)


def test_variant_component_costs_as_parent(db, make_item, make_line):
    jar = make_item(name="jam jar", manual_unit_cost=100)
    variant = make_item(name="jam jar strawberry", type="variant", parent_id=jar.id, manual_unit_cost=999)
    gift = make_item(name="gift", is_composite=True)
    make_line(gift, variant, 1, unit="count")

    asyncio.run(resolve_composites(db, OWNER))

    db.refresh(gift)
    assert gift.composite_cost_cache == pytest.approx(100)


def test_cycle_is_reported_and_not_cached(db, make_item, make_line):
    a = make_item(name="A", is_composite=True)
    b = make_item(name="B", is_composite=True)
    make_line(a, b, 1, unit="count")
    make_line(b, a, 1, unit="count")

    result = asyncio.run(resolve_composites(db, OWNER))

    db.refresh(a)
    db.refresh(b)
    assert set(result.cycle_item_ids) == {a.id, b.id}
    assert result.updated_count == 0
    assert a.composite_cost_cache is None
    assert b.composite_cost_cache is None


def test_dependent_of_cycle_is_unresolved(db, make_item, make_line):
    a = make_item(name="A", is_composite=True)
    b = make_item(name="B", is_composite=True)
    d = make_item(name="D", is_composite=True)
    make_line(a, b, 1, unit="count")
    make_line(b, a, 1, unit="count")
    make_line(d, a, 1, unit="count")

    result = asyncio.run(resolve_composites(db, OWNER))

    db.refresh(d)
    assert d.composite_cost_cache is None
    assert d.id not in result.cycle_item_ids
    assert any(w.parent_item_id == d.id and w.component_item_id == a.id for w in result.warnings)


def test_missing_component_cost_keeps_stale_cache(db, make_item, make_line):
    sugar = make_item(name="sugar", type="ingredient")
    egg = make_item(name="egg", type="ingredient", manual_unit_cost=30)
    cookie = make_item(name="cookie", is_composite=True, composite_cost_cache=77)
    make_line(cookie, sugar, 50, unit="weight-grams")
    make_line(cookie, egg, 1, unit="count")

    result = asyncio.run(resolve_composites(db, OWNER))

    db.refresh(cookie)
    assert result.updated_count == 0
    assert cookie.composite_cost_cache == pytest.approx(77)
    assert len(result.warnings) == 1
    warning = result.warnings[0]
    assert warning.component_item_id == sugar.id
    assert f"component {sugar.id}" in warning.message
    assert f"item {cookie.id}" in warning.message
    assert "per 100g" in warning.message


def test_gram_line_needs_weight_cost(db, make_item, make_line):
    egg = make_item(name="egg", type="ingredient", manual_unit_cost=30)
    omelette = make_item(name="omelette", is_composite=True)
    make_line(omelette, egg, 100, unit="weight-grams")

    result = asyncio.run(resolve_composites(db, OWNER))

    assert result.updated_count == 0
    assert "Missing cost per 100g" in result.warnings[0].message


def test_composite_without_lines_costs_zero(db, make_item):
    empty = make_item(name="empty", is_composite=True)

    result = asyncio.run(resolve_composites(db, OWNER))

    db.refresh(empty)
    assert result.updated_count == 1
    assert empty.composite_cost_cache == 0


def test_recalculation_is_idempotent(db, bakery):
    first = asyncio.run(resolve_composites(db, OWNER))
    db.refresh(bakery.cake)
    first_cost = bakery.cake.composite_cost_cache

    second = asyncio.run(resolve_composites(db, OWNER))
    db.refresh(bakery.cake)

    assert second.updated_count == first.updated_count
    assert second.cycle_item_ids == first.cycle_item_ids
    assert bakery.cake.composite_cost_cache == first_cost


def test_other_owners_are_untouched(db, bakery, make_item, make_line):
    foreign = make_item(name="foreign", owner_id=OTHER_OWNER, is_composite=True)

    asyncio.run(resolve_composites(db, OWNER))

    db.refresh(foreign)
    assert foreign.composite_cost_computed_at is None


def test_resolver_costs_each_item_once():
    items = [
        SimpleNamespace(id=1, type="ingredient", parent_id=None, is_composite=False, manual_unit_cost=10),
        SimpleNamespace(id=2, type="product", parent_id=None, is_composite=True),
        SimpleNamespace(id=3, type="product", parent_id=None, is_composite=True),
        SimpleNamespace(id=4, type="product", parent_id=None, is_composite=True),
    ]
    lines = [
        SimpleNamespace(parent_item_id=2, component_item_id=1, unit="count", quantity=1),
        SimpleNamespace(parent_item_id=3, component_item_id=1, unit="count", quantity=2),
        SimpleNamespace(parent_item_id=4, component_item_id=2, unit="count", quantity=1),
        SimpleNamespace(parent_item_id=4, component_item_id=3, unit="count", quantity=1),
    ]
    resolver = CompositeCostResolver(items, lines)

    assert resolver.resolve(4).unit_cost == pytest.approx(30)
    assert set(resolver.memo) == {1, 2, 3, 4}
    assert resolver.resolve(99).unit_cost is None


def test_explain_composite(db, bakery):
    asyncio.run(resolve_composites(db, OWNER))

    breakdown = explain_composite(db, OWNER, bakery.cake.id)

    assert breakdown.total == pytest.approx(210)
    assert breakdown.cached_cost == pytest.approx(210)
    assert breakdown.in_cycle is False
    assert [line.line_cost for line in breakdown.lines] == [pytest.approx(150), pytest.approx(60)]
    assert breakdown.lines[0].component_name == "flour"


def test_explain_unknown_item(db):
    with pytest.raises(ItemNotFoundError):
        explain_composite(db, OWNER, 12345)


def test_write_failure_aborts_recalculation(db, bakery, make_item, make_line, monkeypatch):
    box = make_item(name="cake box", is_composite=True)
    make_line(box, bakery.egg, 6, unit="count")
    real_update = composite_cost_service.items_crud.update_item
    written = []

    def failing_on_second_write(db, item_id, owner_id, patch, commit=True):
        if written:
            raise SQLAlchemyError("disk full")
        written.append(item_id)
        return real_update(db, item_id, owner_id, patch, commit)

    monkeypatch.setattr(composite_cost_service.items_crud, "update_item", failing_on_second_write)

    with pytest.raises(SQLAlchemyError):
        asyncio.run(resolve_composites(db, OWNER))

    db.refresh(bakery.cake)
    db.refresh(box)
    assert written == [bakery.cake.id]
    assert bakery.cake.composite_cost_cache == pytest.approx(210)
    assert box.composite_cost_cache is None


def test_read_failure_is_fatal(db, bakery, monkeypatch):
    def broken_read(*args, **kwargs):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(composite_cost_service.items_crud, "get_items", broken_read)

    with pytest.raises(SQLAlchemyError):
        asyncio.run(resolve_composites(db, OWNER))

    db.refresh(bakery.cake)
    assert bakery.cake.composite_cost_computed_at is None
