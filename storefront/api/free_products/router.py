"""Free products API router"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Dict, Any
import uuid

from storefront.core.database import get_db
from storefront.core.security import require_admin
from storefront.schemas.base import MessageResponse
from storefront.schemas.free_product import (
    FreeProductCreate,
    FreeProductUpdate,
    FreeProductResponse,
    FreeProductEligibilityResponse,
)
from storefront.services.free_product_service import FreeProductService

router = APIRouter()
admin_router = APIRouter()


@router.get("", response_model=List[FreeProductResponse])
async def list_free_products(db: AsyncSession = Depends(get_db)):
    """Enabled free-product bands"""
    return await FreeProductService(db).list_enabled()


@router.get("/eligibility", response_model=FreeProductEligibilityResponse)
async def check_eligibility(
    product_id: str = Query(..., alias="productId", min_length=1),
    cart_value: float = Query(..., alias="cartValue", ge=0),
    db: AsyncSession = Depends(get_db)
):
    """Whether a product is granted for free at a cart value"""
    eligible = await FreeProductService(db).is_eligible(product_id, cart_value)
    return FreeProductEligibilityResponse(
        product_id=product_id,
        cart_value=cart_value,
        eligible=eligible
    )


@router.get("/{band_id}", response_model=FreeProductResponse)
async def get_free_product(band_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await FreeProductService(db).get(band_id, enabled_only=True)


# Admin routes

@admin_router.get("", response_model=List[FreeProductResponse])
async def admin_list_free_products(
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All bands, enabled or not"""
    return await FreeProductService(db).list_all()


@admin_router.get("/{band_id}", response_model=FreeProductResponse)
async def admin_get_free_product(
    band_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await FreeProductService(db).get(band_id)


@admin_router.post("", response_model=FreeProductResponse, status_code=status.HTTP_201_CREATED)
async def create_free_product(
    data: FreeProductCreate,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await FreeProductService(db).create(data)


@admin_router.put("/{band_id}", response_model=FreeProductResponse)
async def update_free_product(
    band_id: uuid.UUID,
    data: FreeProductUpdate,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await FreeProductService(db).update(band_id, data)


@admin_router.delete("/{band_id}", response_model=MessageResponse)
async def delete_free_product(
    band_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await FreeProductService(db).delete(band_id)
    return MessageResponse(message="Free product deleted successfully")
