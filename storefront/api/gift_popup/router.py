"""Gift popup API router"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Dict, Any

from storefront.core.database import get_db
from storefront.core.security import require_admin
from storefront.schemas.gift_popup import (
    GiftPopupConfigUpdate,
    GiftPopupConfigResponse,
    GiftOfferResponse,
    GiftProductResponse,
)
from storefront.services.gift_popup_service import GiftPopupService

router = APIRouter()
admin_router = APIRouter()


@router.get("/gift-popup", response_model=GiftPopupConfigResponse)
async def get_gift_popup(db: AsyncSession = Depends(get_db)):
    """Current gift popup configuration"""
    return await GiftPopupService(db).get_config()


@router.get("/gift-popup/offer", response_model=GiftOfferResponse)
async def get_gift_offer(
    cart_value: float = Query(..., alias="cartValue", ge=0),
    db: AsyncSession = Depends(get_db)
):
    """Gifts offered for a cart value"""
    return await GiftPopupService(db).get_offer(cart_value)


@router.get("/gift-products", response_model=List[GiftProductResponse])
async def get_gift_products(db: AsyncSession = Depends(get_db)):
    """Details of the configured gift products"""
    return await GiftPopupService(db).get_gift_products()


# Admin routes

@admin_router.get("/gift-popup", response_model=GiftPopupConfigResponse)
async def admin_get_gift_popup(
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await GiftPopupService(db).get_config()


@admin_router.put("/gift-popup", response_model=GiftPopupConfigResponse)
@admin_router.post("/gift-popup", response_model=GiftPopupConfigResponse)
async def update_gift_popup(
    data: GiftPopupConfigUpdate,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Replace the gift popup configuration"""
    return await GiftPopupService(db).update_config(data)


@admin_router.get("/gift-products", response_model=List[GiftProductResponse])
async def admin_get_gift_products(
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Every catalog product, to choose gifts from"""
    return await GiftPopupService(db).list_all_products()
