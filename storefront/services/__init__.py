"""Services package"""

from .coupon_service import CouponService
from .gift_card_service import GiftCardService, GiftCardTemplateService
from .gift_popup_service import GiftPopupService
from .free_product_service import FreeProductService
from .promo_service import PromoMessageService, PromoTimerService
from .storage import StorageService

__all__ = [
    "CouponService",
    "GiftCardService",
    "GiftCardTemplateService",
    "GiftPopupService",
    "FreeProductService",
    "PromoMessageService",
    "PromoTimerService",
    "StorageService",
]
