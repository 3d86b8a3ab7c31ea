"""
Gift card schemas

Admin create/update requests are multipart forms (they may carry an image),
so only responses and the JSON redemption body are modelled here.
"""

from pydantic import Field, field_validator
from datetime import datetime

from .base import BaseSchema, ResourceSchema


class GiftCardResponse(ResourceSchema):
    code: str
    initial_amount: float
    balance: float
    expiry_date: datetime
    is_active: bool
    image_url: str


class GiftCardBalanceResponse(BaseSchema):
    code: str
    balance: float
    expiry_date: datetime
    redeemable: bool


class GiftCardRedeemRequest(BaseSchema):
    code: str = Field(..., min_length=1, max_length=32)
    amount: float = Field(..., gt=0)

    @field_validator("code")
    @classmethod
    def uppercase_code(cls, v: str) -> str:
        return v.strip().upper()


class GiftCardRedeemResponse(BaseSchema):
    success: bool
    remaining_balance: float


class GiftCardTemplateResponse(ResourceSchema):
    initial_amount: float
    expiry_date: datetime
    is_active: bool
    image_url: str
