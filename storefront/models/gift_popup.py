"""Free-gift popup configuration"""

from sqlalchemy import Column, String, Numeric, Boolean, Integer, JSON, CheckConstraint

from .base import Base, UUIDModel, TimestampedModel


class GiftPopupConfig(Base, UUIDModel, TimestampedModel):
    """
    Singleton row describing the free-gift popup

    Created once by the initialisation step; the services read the first
    row and never create one on demand.
    """

    __tablename__ = "gift_popup_config"

    title = Column(String(200), nullable=False)
    sub_title = Column(String(200), nullable=False, default="")
    active = Column(Boolean, nullable=False, default=False)
    min_cart_value = Column(Numeric(10, 2), nullable=False, default=0)
    max_cart_value = Column(Numeric(10, 2), nullable=True)
    max_selectable_gifts = Column(Integer, nullable=False, default=2)
    gift_products = Column(JSON, nullable=False, default=list)  # product ids as strings

    __table_args__ = (
        CheckConstraint("min_cart_value >= 0", name="check_gift_popup_min_cart_value"),
        CheckConstraint("max_selectable_gifts >= 1", name="check_gift_popup_max_selectable"),
    )
