"""Promo messages and promo timers API routers"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional, Dict, Any
import uuid

from storefront.core.database import get_db
from storefront.core.security import require_admin
from storefront.schemas.base import MessageResponse
from storefront.schemas.promo import (
    PromoMessageCreate,
    PromoMessageUpdate,
    PromoMessageResponse,
    PromoTimerCreate,
    PromoTimerUpdate,
    PromoTimerResponse,
    ProductTimerResponse,
)
from storefront.services.promo_service import PromoMessageService, PromoTimerService

messages_router = APIRouter()
timers_router = APIRouter()
admin_timers_router = APIRouter()


@messages_router.get("", response_model=List[PromoMessageResponse])
async def list_promo_messages(
    cart_total: Optional[float] = Query(None, alias="cartTotal", ge=0),
    db: AsyncSession = Depends(get_db)
):
    """Messages matching a cart total, best match first"""
    return await PromoMessageService(db).list_messages(cart_total)


@messages_router.get("/select", response_model=Optional[PromoMessageResponse])
async def select_promo_message(
    cart_total: float = Query(..., alias="cartTotal", ge=0),
    db: AsyncSession = Depends(get_db)
):
    """The single message to show for a cart total, or null"""
    return await PromoMessageService(db).select(cart_total)


@messages_router.get("/{message_id}", response_model=PromoMessageResponse)
async def get_promo_message(message_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await PromoMessageService(db).get(message_id)


@messages_router.post("", response_model=PromoMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_promo_message(
    data: PromoMessageCreate,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await PromoMessageService(db).create(data)


@messages_router.patch("/{message_id}", response_model=PromoMessageResponse)
async def update_promo_message(
    message_id: uuid.UUID,
    data: PromoMessageUpdate,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await PromoMessageService(db).update(message_id, data)


@messages_router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_promo_message(
    message_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await PromoMessageService(db).delete(message_id)


# Promo timers

@timers_router.get("", response_model=List[PromoTimerResponse])
async def list_promo_timers(db: AsyncSession = Depends(get_db)):
    """Enabled timers, soonest deadline first"""
    return await PromoTimerService(db).list_enabled()


@timers_router.get("/product/{product_id}", response_model=ProductTimerResponse)
async def get_product_timer(product_id: str, db: AsyncSession = Depends(get_db)):
    """Countdown for a product"""
    return await PromoTimerService(db).for_product(product_id)


@admin_timers_router.get("", response_model=List[PromoTimerResponse])
async def admin_list_promo_timers(
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await PromoTimerService(db).list_all()


@admin_timers_router.get("/{timer_id}", response_model=PromoTimerResponse)
async def admin_get_promo_timer(
    timer_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await PromoTimerService(db).get(timer_id)


@admin_timers_router.post("", response_model=PromoTimerResponse, status_code=status.HTTP_201_CREATED)
async def create_promo_timer(
    data: PromoTimerCreate,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await PromoTimerService(db).create(data)


@admin_timers_router.put("/{timer_id}", response_model=PromoTimerResponse)
async def update_promo_timer(
    timer_id: uuid.UUID,
    data: PromoTimerUpdate,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await PromoTimerService(db).update(timer_id, data)


@admin_timers_router.delete("/{timer_id}", response_model=MessageResponse)
async def delete_promo_timer(
    timer_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await PromoTimerService(db).delete(timer_id)
    return MessageResponse(message="Promo timer deleted successfully")
