"""Free product schemas"""

from pydantic import Field, model_validator
from typing import Optional

from .base import BaseSchema, ResourceSchema


class FreeProductCreate(BaseSchema):
    product_id: str = Field(..., min_length=1, max_length=64)
    min_order_value: float = Field(..., gt=0)
    max_order_value: Optional[float] = None
    enabled: bool = True

    @model_validator(mode="after")
    def check_band(self):
        if self.max_order_value is not None and self.max_order_value <= self.min_order_value:
            raise ValueError("Maximum order value must be greater than minimum order value")
        return self


class FreeProductUpdate(BaseSchema):
    """Partial update; send maxOrderValue: null to remove the upper limit"""
    product_id: Optional[str] = Field(None, min_length=1, max_length=64)
    min_order_value: Optional[float] = Field(None, gt=0)
    max_order_value: Optional[float] = None
    enabled: Optional[bool] = None


class FreeProductResponse(ResourceSchema):
    product_id: str
    min_order_value: float
    max_order_value: Optional[float] = None
    enabled: bool


class FreeProductEligibilityResponse(BaseSchema):
    product_id: str
    cart_value: float
    eligible: bool
