import os

# Must be set before shared.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.core.database import Base
from catalog_service.app.clients.tiendanube_client import RemoteCatalogError
from catalog_service.app.models.catalog.items import Item
from catalog_service.app.models.catalog.parameters import Parameter  # noqa: F401
from catalog_service.app.models.catalog.recipe_lines import RecipeLine

OWNER = "owner-1"
OTHER_OWNER = "owner-2"


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def make_item(db):
    def _make(**fields):
        fields.setdefault("owner_id", OWNER)
        fields.setdefault("name", "item")
        fields.setdefault("type", "product")
        item = Item(**fields)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item
    return _make


@pytest.fixture
def make_line(db):
    def _make(parent, component, quantity, unit="count", owner_id=OWNER):
        line = RecipeLine(
            owner_id=owner_id,
            parent_item_id=parent.id,
            component_item_id=component.id,
            unit=unit,
            quantity=quantity,
        )
        db.add(line)
        db.commit()
        db.refresh(line)
        return line
    return _make


class FakeTiendanubeClient:
    """In-memory stand-in for TiendanubeClient."""

    def __init__(self, products=None, fail_products=()):
        self.products = list(products or [])
        self.fail_products = set(fail_products)
        self.pages_requested = []
        self.patches = []

    def list_products_page(self, page, per_page, fields=("id", "variants")):
        self.pages_requested.append(page)
        start = (page - 1) * per_page
        return self.products[start:start + per_page]

    def patch_variants(self, product_id, payload):
        if product_id in self.fail_products:
            raise RemoteCatalogError(
                f"Tiendanube PATCH {product_id} -> 500: boom", status_code=500, body="boom")
        self.patches.append((product_id, payload))
        return payload


def remote_product(product_id, *variants):
    return {
        "id": product_id,
        "variants": [dict(id=variant_id, **extra) for variant_id, extra in variants],
    }
