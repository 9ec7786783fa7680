# app/models/catalog/items.py
from sqlalchemy import Boolean, BigInteger, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func
from shared.core.database import Base


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    type = Column(String(16), nullable=False, default="product")
    parent_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=True, index=True)

    # ---------- Cost inputs ----------
    manual_unit_cost = Column(Numeric(14, 4, asdecimal=False))
    bulk_price = Column(Numeric(14, 4, asdecimal=False))
    units_per_bulk = Column(Numeric(14, 4, asdecimal=False))
    is_composite = Column(Boolean, nullable=False, default=False)

    # ---------- Margins ----------
    retail_margin = Column(Numeric(6, 4, asdecimal=False))
    wholesale_margin = Column(Numeric(6, 4, asdecimal=False))
    wholesale_pack_size = Column(Integer, default=1)

    # ---------- Per weight ----------
    is_sold_by_weight = Column(Boolean, nullable=False, default=False)
    weight_per_unit_g = Column(Numeric(14, 4, asdecimal=False))
    manual_cost_per_100g = Column(Numeric(14, 4, asdecimal=False))
    margin_per_100g = Column(Numeric(6, 4, asdecimal=False))

    publish_price_kind = Column(String(16), nullable=False, default="retail")

    # ---------- Derived (snapshot, recomputed by the resolver) ----------
    composite_cost_cache = Column(Numeric(14, 4, asdecimal=False), nullable=True)
    composite_cost_computed_at = Column(DateTime(timezone=True), nullable=True)

    # ---------- Remote catalog linkage ----------
    sku = Column(String(64), index=True)
    remote_variant_id = Column(BigInteger, nullable=True)
    remote_stock = Column(Numeric(14, 3, asdecimal=False), nullable=True)
    remote_stock_synced_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
