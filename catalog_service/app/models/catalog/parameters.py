# app/models/catalog/parameters.py
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func
from shared.core.database import Base


class Parameter(Base):
    __tablename__ = "parameters"

    key = Column(String(64), primary_key=True)
    value = Column(String(255))

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
