# app/models/catalog/recipe_lines.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func
from shared.core.database import Base


class RecipeLine(Base):
    __tablename__ = "recipe_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(64), nullable=False, index=True)
    parent_item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    component_item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    unit = Column(String(16), nullable=False, default="weight-grams")
    quantity = Column(Numeric(14, 4, asdecimal=False), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
