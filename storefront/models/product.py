"""
Catalog products referenced by promotions

The catalog itself is managed elsewhere; this service reads products to
show gift details and validate promotion targets.
"""

from sqlalchemy import Column, String, Numeric, Boolean, Text, JSON

from .base import Base, UUIDModel, TimestampedModel


class Product(Base, UUIDModel, TimestampedModel):
    """Catalog product"""

    __tablename__ = "products"

    name = Column(String(200), nullable=False)
    slug = Column(String(255), nullable=True, unique=True, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    images = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
