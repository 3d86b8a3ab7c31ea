"""Gift cards and gift card templates API routers"""

from fastapi import APIRouter, Depends, Request, Form, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional, Dict, Any
from datetime import datetime
import uuid

from storefront.core.database import get_db
from storefront.core.config import settings
from storefront.core.rate_limit import limiter
from storefront.core.security import get_current_user, require_admin
from storefront.schemas.base import MessageResponse
from storefront.schemas.gift_card import (
    GiftCardResponse,
    GiftCardBalanceResponse,
    GiftCardRedeemRequest,
    GiftCardRedeemResponse,
    GiftCardTemplateResponse,
)
from storefront.services.gift_card_service import (
    GiftCardService,
    GiftCardTemplateService,
    check_initial_amount,
)
from storefront.services.storage import StorageService, get_storage_service
from storefront.utils.helpers import to_naive_utc

router = APIRouter()
admin_router = APIRouter()
templates_router = APIRouter()
admin_templates_router = APIRouter()


async def _store_image(storage: StorageService, image: Optional[UploadFile], folder: str) -> str:
    if image is None or not image.filename:
        return ""
    return await storage.save_upload(image, folder)


@router.post("/redeem", response_model=GiftCardRedeemResponse)
@limiter.limit(settings.RATE_LIMIT_GIFT_CARD_REDEEM)
async def redeem_gift_card(
    request: Request,
    data: GiftCardRedeemRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Debit an amount from a gift card"""
    remaining = await GiftCardService(db).redeem(data.code, data.amount)
    return GiftCardRedeemResponse(success=True, remaining_balance=float(remaining))


@router.get("/{code}", response_model=GiftCardBalanceResponse)
async def get_gift_card_balance(code: str, db: AsyncSession = Depends(get_db)):
    """Balance and expiry of a gift card"""
    return await GiftCardService(db).get_balance(code)


# Admin routes

@admin_router.get("", response_model=List[GiftCardResponse])
async def list_gift_cards(
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await GiftCardService(db).list_cards()


@admin_router.get("/{card_id}", response_model=GiftCardResponse)
async def get_gift_card(
    card_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await GiftCardService(db).get_card(card_id)


@admin_router.post("", response_model=GiftCardResponse, status_code=status.HTTP_201_CREATED)
async def create_gift_card(
    initial_amount: float = Form(..., alias="initialAmount", gt=0),
    expiry_date: datetime = Form(..., alias="expiryDate"),
    is_active: bool = Form(True, alias="isActive"),
    image: Optional[UploadFile] = File(None),
    admin: Dict[str, Any] = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service),
    db: AsyncSession = Depends(get_db)
):
    """Mint a gift card, optionally with an image"""
    check_initial_amount(initial_amount)
    image_url = await _store_image(storage, image, "giftcards")
    return await GiftCardService(db).create_card(
        initial_amount=initial_amount,
        expiry_date=to_naive_utc(expiry_date),
        is_active=is_active,
        image_url=image_url,
    )


@admin_router.put("/{card_id}", response_model=GiftCardResponse)
async def update_gift_card(
    card_id: uuid.UUID,
    initial_amount: Optional[float] = Form(None, alias="initialAmount", gt=0),
    balance: Optional[float] = Form(None, ge=0),
    expiry_date: Optional[datetime] = Form(None, alias="expiryDate"),
    is_active: Optional[bool] = Form(None, alias="isActive"),
    image: Optional[UploadFile] = File(None),
    admin: Dict[str, Any] = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service),
    db: AsyncSession = Depends(get_db)
):
    """Update a gift card; the balance can only go down"""
    service = GiftCardService(db)
    changes = {
        "initial_amount": initial_amount,
        "balance": balance,
        "expiry_date": to_naive_utc(expiry_date),
        "is_active": is_active,
    }
    service.check_update(await service.get_card(card_id), changes)

    changes["image_url"] = await _store_image(storage, image, "giftcards")
    return await service.update_card(card_id, changes)


@admin_router.delete("/{card_id}", response_model=MessageResponse)
async def retire_gift_card(
    card_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Retire a gift card"""
    await GiftCardService(db).retire_card(card_id)
    return MessageResponse(message="Gift card retired successfully")


# Gift card templates

@templates_router.get("", response_model=List[GiftCardTemplateResponse])
async def list_active_templates(db: AsyncSession = Depends(get_db)):
    """Active templates, cheapest first"""
    return await GiftCardTemplateService(db).list_active()


@admin_templates_router.get("", response_model=List[GiftCardTemplateResponse])
async def admin_list_templates(
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await GiftCardTemplateService(db).list_templates()


@admin_templates_router.get("/{template_id}", response_model=GiftCardTemplateResponse)
async def admin_get_template(
    template_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await GiftCardTemplateService(db).get_template(template_id)


@admin_templates_router.post("", response_model=GiftCardTemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    initial_amount: float = Form(..., alias="initialAmount", gt=0),
    expiry_date: datetime = Form(..., alias="expiryDate"),
    is_active: bool = Form(True, alias="isActive"),
    image: Optional[UploadFile] = File(None),
    admin: Dict[str, Any] = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service),
    db: AsyncSession = Depends(get_db)
):
    check_initial_amount(initial_amount)
    image_url = await _store_image(storage, image, "giftcard-templates")
    return await GiftCardTemplateService(db).create_template(
        initial_amount=initial_amount,
        expiry_date=to_naive_utc(expiry_date),
        is_active=is_active,
        image_url=image_url,
    )


@admin_templates_router.put("/{template_id}", response_model=GiftCardTemplateResponse)
async def update_template(
    template_id: uuid.UUID,
    initial_amount: Optional[float] = Form(None, alias="initialAmount", gt=0),
    expiry_date: Optional[datetime] = Form(None, alias="expiryDate"),
    is_active: Optional[bool] = Form(None, alias="isActive"),
    image: Optional[UploadFile] = File(None),
    admin: Dict[str, Any] = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service),
    db: AsyncSession = Depends(get_db)
):
    service = GiftCardTemplateService(db)
    await service.get_template(template_id)
    if initial_amount is not None:
        check_initial_amount(initial_amount)

    changes = {
        "initial_amount": initial_amount,
        "expiry_date": to_naive_utc(expiry_date),
        "is_active": is_active,
        "image_url": await _store_image(storage, image, "giftcard-templates"),
    }
    return await service.update_template(template_id, changes)


@admin_templates_router.delete("/{template_id}", response_model=MessageResponse)
async def delete_template(
    template_id: uuid.UUID,
    admin: Dict[str, Any] = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await GiftCardTemplateService(db).delete_template(template_id)
    return MessageResponse(message="Template deleted")
