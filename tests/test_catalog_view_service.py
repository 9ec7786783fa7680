import asyncio

import pytest

from catalog_service.app.services.catalog_view_service import get_product_detail, list_products
from catalog_service.app.services.price_push_service import reconcile_prices
from conftest import OWNER, FakeTiendanubeClient, remote_product


def test_variant_price_matches_pushed_price(db, make_item):
    jam = make_item(name="jam", manual_unit_cost=100, retail_margin=0.5)
    # an out-of-range variant margin falls back to the parent's
    make_item(name="jam small", type="variant", parent_id=jam.id, sku="J", retail_margin=0)
    client = FakeTiendanubeClient([remote_product(9, (1, {"sku": "J"}))])

    asyncio.run(reconcile_prices(db, OWNER, client=client, pacing_delay=0))
    detail = get_product_detail(db, OWNER, jam.id)

    assert client.patches == [(9, [{"id": 1, "price": "200"}])]
    assert detail.variants[0].prices.retail_price == 200


def test_variant_inherits_weight_pricing(db, make_item):
    cheese = make_item(name="cheese", manual_unit_cost=300, is_sold_by_weight=True,
                       weight_per_unit_g=500, margin_per_100g=0.25)
    make_item(name="cheese wedge", type="variant", parent_id=cheese.id, margin_per_100g=1.5)

    variant_prices = get_product_detail(db, OWNER, cheese.id).variants[0].prices

    assert variant_prices.cost_per_100g == pytest.approx(60)
    assert variant_prices.price_per_100g == 100


def test_variant_positive_overrides_win(db, make_item):
    jam = make_item(name="jam", manual_unit_cost=100, retail_margin=0.5)
    make_item(name="jam big", type="variant", parent_id=jam.id, manual_unit_cost=150, retail_margin=0.25)

    assert get_product_detail(db, OWNER, jam.id).variants[0].prices.retail_price == 200


def test_uncached_composite_prices_from_manual_cost(db, make_item):
    make_item(name="cake", is_composite=True, manual_unit_cost=100, retail_margin=0.5)

    [cake] = list_products(db, OWNER)

    assert cake.prices.retail_price == 200
    assert cake.pending_recalculation is True


def test_cached_composite_prices_from_cache(db, make_item):
    make_item(name="cake", is_composite=True, manual_unit_cost=1, composite_cost_cache=210, retail_margin=0.3)

    [cake] = list_products(db, OWNER)

    assert cake.prices.unit_cost == pytest.approx(210)
    assert cake.prices.retail_price == 300
    assert cake.pending_recalculation is False
