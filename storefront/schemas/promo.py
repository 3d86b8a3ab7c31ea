"""Promo message and promo timer schemas"""

from pydantic import Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

from .base import BaseSchema, ResourceSchema, UTCDateTime
from storefront.utils.validators import sanitize_html


def clean_promo_message(value: str) -> str:
    """Sanitize a promo message and require some visible text"""
    cleaned = sanitize_html(value)
    if not sanitize_html(cleaned, allowed_tags=[]):
        raise ValueError("Message must contain text")
    return cleaned


class PromoMessageCreate(BaseSchema):
    min_cart_value: float = Field(..., ge=0)
    max_cart_value: float = Field(..., ge=0)
    message: str = Field(..., min_length=1, max_length=1000)

    @field_validator("message")
    @classmethod
    def clean_message(cls, v: str) -> str:
        return clean_promo_message(v)

    @model_validator(mode="after")
    def check_band(self):
        if self.max_cart_value < self.min_cart_value:
            raise ValueError("Maximum cart value cannot be below the minimum cart value")
        return self


class PromoMessageUpdate(BaseSchema):
    min_cart_value: Optional[float] = Field(None, ge=0)
    max_cart_value: Optional[float] = Field(None, ge=0)
    message: Optional[str] = Field(None, min_length=1, max_length=1000)

    @field_validator("message")
    @classmethod
    def clean_message(cls, v: Optional[str]) -> Optional[str]:
        return clean_promo_message(v) if v is not None else v


class PromoMessageResponse(ResourceSchema):
    min_cart_value: float
    max_cart_value: float
    message: str


class PromoTimerCreate(BaseSchema):
    product_id: str = Field(..., min_length=1, max_length=64)
    end_time: UTCDateTime
    enabled: bool = True


class PromoTimerUpdate(BaseSchema):
    product_id: Optional[str] = Field(None, min_length=1, max_length=64)
    end_time: Optional[UTCDateTime] = None
    enabled: Optional[bool] = None


class PromoTimerResponse(ResourceSchema):
    product_id: str
    end_time: datetime
    enabled: bool


class ProductTimerResponse(BaseSchema):
    product_id: str
    end_time: datetime
    remaining_seconds: int
    expired: bool
