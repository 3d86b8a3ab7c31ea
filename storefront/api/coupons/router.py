"""Coupons API router"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Dict, Any
import uuid

from storefront.core.database import get_db
from storefront.core.config import settings
from storefront.core.rate_limit import limiter
from storefront.core.security import get_current_user, require_admin
from storefront.schemas.base import MessageResponse
from storefront.schemas.coupon import (
    CouponCreate,
    CouponUpdate,
    CouponResponse,
    CouponValidateRequest,
    CouponValidateResponse,
    CouponApplyRequest,
    CouponApplyResponse,
)
from storefront.services.coupon_service import CouponService

router = APIRouter()
admin_router = APIRouter()


@router.post("/validate", response_model=CouponValidateResponse)
@limiter.limit(settings.RATE_LIMIT_COUPON_VALIDATE)
async def validate_coupon(
    request: Request,
    data: CouponValidateRequest,
    db: AsyncSession = Depends(get_db)
):
    """Check a coupon against a cart value and compute its discount"""
    service = CouponService(db)
    return await service.validate_coupon(data.code, data.cart_value)


@router.post("/apply", response_model=CouponApplyResponse)
async def apply_coupon(
    data: CouponApplyRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Record one use of a coupon"""
    service = CouponService(db)
    coupon = await service.apply_coupon(data.code)
    return CouponApplyResponse(
        success=True,
        message="Coupon applied successfully",
        used_count=coupon.used_count
    )


# Admin routes

@admin_router.get("", response_model=List[CouponResponse])
async def list_coupons(
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await CouponService(db).list_coupons()


@admin_router.get("/{coupon_id}", response_model=CouponResponse)
async def get_coupon(
    coupon_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await CouponService(db).get_coupon(coupon_id)


@admin_router.post("", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    data: CouponCreate,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create coupon"""
    return await CouponService(db).create_coupon(data)


@admin_router.put("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: uuid.UUID,
    data: CouponUpdate,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update coupon"""
    return await CouponService(db).update_coupon(coupon_id, data)


@admin_router.delete("/{coupon_id}", response_model=MessageResponse)
async def delete_coupon(
    coupon_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await CouponService(db).delete_coupon(coupon_id)
    return MessageResponse(message="Coupon deleted successfully")
