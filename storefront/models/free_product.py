"""Automatic free-product bands"""

from sqlalchemy import Column, String, Numeric, Boolean, CheckConstraint, Index

from .base import Base, UUIDModel, TimestampedModel


class FreeProduct(Base, UUIDModel, TimestampedModel):
    """A cart-value band within which a product is added for free"""

    __tablename__ = "free_products"

    # Several bands may exist for one product, so product_id is not unique
    product_id = Column(String(64), nullable=False, index=True)
    min_order_value = Column(Numeric(10, 2), nullable=False)
    max_order_value = Column(Numeric(10, 2), nullable=True)  # NULL means no upper limit
    enabled = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("min_order_value > 0", name="check_free_product_min_positive"),
        CheckConstraint(
            "max_order_value IS NULL OR max_order_value > min_order_value",
            name="check_free_product_band_order"
        ),
        Index("idx_free_products_enabled_min", "enabled", "min_order_value"),
    )
