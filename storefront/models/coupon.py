"""
Coupon and discount models
"""

from sqlalchemy import Column, String, Integer, Numeric, Boolean, Index, CheckConstraint, Text, DateTime
from datetime import datetime
from typing import Optional

from .base import Base, UUIDModel, TimestampedModel
from storefront.utils.helpers import utcnow

UNLIMITED_USES = -1


class DiscountType:
    PERCENTAGE = "percentage"
    FIXED = "fixed"

    ALL = (PERCENTAGE, FIXED)


class Coupon(Base, UUIDModel, TimestampedModel):
    """Cart-wide discount codes"""

    __tablename__ = "coupons"

    code = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")

    # Discount details
    discount_amount = Column(Numeric(10, 2), nullable=False)
    discount_type = Column(String(20), nullable=False, default=DiscountType.PERCENTAGE)

    # Conditions
    minimum_cart_value = Column(Numeric(10, 2), nullable=False, default=0)

    # Usage limits (-1 means unlimited)
    max_uses = Column(Integer, nullable=False, default=UNLIMITED_USES)
    used_count = Column(Integer, nullable=False, default=0)

    # Validity
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)

    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("discount_amount > 0", name="check_coupon_positive_discount"),
        CheckConstraint("minimum_cart_value >= 0", name="check_coupon_min_cart_value"),
        CheckConstraint("max_uses = -1 OR max_uses > 0", name="check_coupon_max_uses"),
        CheckConstraint("used_count >= 0", name="check_coupon_used_count"),
        Index("idx_coupons_active_window", "is_active", "start_date", "end_date"),
    )

    @property
    def is_unlimited(self) -> bool:
        return self.max_uses == UNLIMITED_USES

    @property
    def is_exhausted(self) -> bool:
        return not self.is_unlimited and self.used_count >= self.max_uses

    def in_window(self, now: Optional[datetime] = None) -> bool:
        now = now or utcnow()
        return self.start_date <= now <= self.end_date
