"""Cart-value promo messages and product countdown timers"""

from sqlalchemy import Column, String, Numeric, Boolean, Text, DateTime, CheckConstraint, Index

from .base import Base, UUIDModel, TimestampedModel


class PromoMessage(Base, UUIDModel, TimestampedModel):
    """Banner text shown while the cart total sits inside a band"""

    __tablename__ = "promo_messages"

    min_cart_value = Column(Numeric(10, 2), nullable=False)
    max_cart_value = Column(Numeric(10, 2), nullable=False)
    message = Column(Text, nullable=False)

    __table_args__ = (
        CheckConstraint("max_cart_value >= min_cart_value", name="check_promo_message_band"),
        Index("idx_promo_messages_band", "min_cart_value", "max_cart_value"),
    )


class PromoTimer(Base, UUIDModel, TimestampedModel):
    """Countdown deadline attached to a product"""

    __tablename__ = "promo_timers"

    product_id = Column(String(64), nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
