"""
Gift card models
"""

from sqlalchemy import Column, String, Numeric, Boolean, DateTime, CheckConstraint, Index
from datetime import datetime
from typing import Optional

from .base import Base, UUIDModel, TimestampedModel
from storefront.utils.helpers import utcnow


class GiftCard(Base, UUIDModel, TimestampedModel):
    """Stored-value card redeemable against order totals"""

    __tablename__ = "gift_cards"

    code = Column(String(32), unique=True, nullable=False, index=True)
    initial_amount = Column(Numeric(10, 2), nullable=False)
    balance = Column(Numeric(10, 2), nullable=False)
    expiry_date = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    image_url = Column(String(500), nullable=False, default="")

    __table_args__ = (
        CheckConstraint("initial_amount >= 0", name="check_gift_card_initial_amount"),
        CheckConstraint("balance >= 0", name="check_gift_card_balance_non_negative"),
        CheckConstraint("balance <= initial_amount", name="check_gift_card_balance_cap"),
        Index("idx_gift_cards_active_expiry", "is_active", "expiry_date"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) > self.expiry_date

    def is_redeemable(self, now: Optional[datetime] = None) -> bool:
        return bool(self.is_active) and not self.is_expired(now)


class GiftCardTemplate(Base, UUIDModel, TimestampedModel):
    """Denominations offered to shoppers buying a gift card"""

    __tablename__ = "gift_card_templates"

    initial_amount = Column(Numeric(10, 2), nullable=False)
    expiry_date = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    image_url = Column(String(500), nullable=False, default="")

    __table_args__ = (
        CheckConstraint("initial_amount >= 0", name="check_gift_card_template_amount"),
    )
