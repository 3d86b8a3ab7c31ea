"""
Coupon schemas for request/response validation
"""

from pydantic import Field, field_validator
from typing import Optional, Literal

from .base import BaseSchema, ResourceSchema, UTCDateTime


class CouponBase(BaseSchema):
    description: str = ""
    discount_amount: float = Field(..., gt=0)
    discount_type: Literal["percentage", "fixed"] = "percentage"
    minimum_cart_value: float = Field(0, ge=0)
    max_uses: int = Field(-1, ge=-1, description="-1 means unlimited")
    start_date: UTCDateTime
    end_date: UTCDateTime
    is_active: bool = True


class CouponCreate(CouponBase):
    """Schema for creating a coupon"""
    code: str = Field(..., min_length=3, max_length=50)

    @field_validator("code")
    @classmethod
    def uppercase_code(cls, v: str) -> str:
        return v.strip().upper()


class CouponUpdate(BaseSchema):
    """Partial update; omitted fields keep their value"""
    code: Optional[str] = Field(None, min_length=3, max_length=50)
    description: Optional[str] = None
    discount_amount: Optional[float] = Field(None, gt=0)
    discount_type: Optional[Literal["percentage", "fixed"]] = None
    minimum_cart_value: Optional[float] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=-1)
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    is_active: Optional[bool] = None

    @field_validator("code")
    @classmethod
    def uppercase_code(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v


class CouponResponse(ResourceSchema):
    code: str
    description: str
    discount_amount: float
    discount_type: str
    minimum_cart_value: float
    max_uses: int
    used_count: int
    start_date: UTCDateTime
    end_date: UTCDateTime
    is_active: bool


class CouponValidateRequest(BaseSchema):
    code: str = Field(..., min_length=1, max_length=50)
    cart_value: float = Field(..., ge=0)


class CouponValidateResponse(BaseSchema):
    valid: bool
    discount_value: float
    message: str
    coupon: CouponResponse


class CouponApplyRequest(BaseSchema):
    code: str = Field(..., min_length=1, max_length=50)


class CouponApplyResponse(BaseSchema):
    success: bool
    message: str
    used_count: int
