"""Models package initialization"""

from .base import Base
from .coupon import Coupon, DiscountType, UNLIMITED_USES
from .gift_card import GiftCard, GiftCardTemplate
from .gift_popup import GiftPopupConfig
from .free_product import FreeProduct
from .promo import PromoMessage, PromoTimer
from .product import Product

__all__ = [
    "Base",
    "Coupon",
    "DiscountType",
    "UNLIMITED_USES",
    "GiftCard",
    "GiftCardTemplate",
    "GiftPopupConfig",
    "FreeProduct",
    "PromoMessage",
    "PromoTimer",
    "Product",
]
