"""API routes aggregation"""

from fastapi import APIRouter

from .coupons.router import router as coupons_router, admin_router as admin_coupons_router
from .gift_popup.router import router as gift_popup_router, admin_router as admin_gift_popup_router
from .free_products.router import router as free_products_router, admin_router as admin_free_products_router
from .promo.router import messages_router, timers_router, admin_timers_router
from .gift_cards.router import (
    router as gift_cards_router,
    admin_router as admin_gift_cards_router,
    templates_router,
    admin_templates_router,
)
from .uploads.router import router as uploads_router

api_router = APIRouter()

# Public routes
api_router.include_router(coupons_router, prefix="/coupons", tags=["Coupons"])
api_router.include_router(gift_popup_router, tags=["Gift Popup"])
api_router.include_router(free_products_router, prefix="/free-products", tags=["Free Products"])
api_router.include_router(messages_router, prefix="/promomessages", tags=["Promo Messages"])
api_router.include_router(timers_router, prefix="/promotimers", tags=["Promo Timers"])
api_router.include_router(gift_cards_router, prefix="/giftcards", tags=["Gift Cards"])
api_router.include_router(templates_router, prefix="/giftcard-templates", tags=["Gift Card Templates"])

# Admin routes
api_router.include_router(admin_coupons_router, prefix="/admin/coupons", tags=["Admin"])
api_router.include_router(admin_gift_popup_router, prefix="/admin", tags=["Admin"])
api_router.include_router(admin_free_products_router, prefix="/admin/free-products", tags=["Admin"])
api_router.include_router(admin_timers_router, prefix="/admin/promotimers", tags=["Admin"])
api_router.include_router(admin_gift_cards_router, prefix="/admin/giftcards", tags=["Admin"])
api_router.include_router(admin_templates_router, prefix="/admin/giftcard-templates", tags=["Admin"])
api_router.include_router(uploads_router, prefix="/admin/upload", tags=["Admin"])

# Export router
router = api_router
