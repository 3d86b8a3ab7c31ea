"""Gift popup schemas"""

from pydantic import Field, model_validator
from typing import List, Optional
import uuid

from .base import BaseSchema, ResourceSchema


class GiftPopupConfigUpdate(BaseSchema):
    title: str = Field(..., min_length=1, max_length=200)
    sub_title: str = Field("", max_length=200)
    active: bool = False
    min_cart_value: float = Field(..., ge=0)
    max_cart_value: Optional[float] = Field(None, ge=0)
    max_selectable_gifts: int = Field(2, ge=1)
    gift_products: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_limits(self):
        products = len(self.gift_products)
        if products and self.max_selectable_gifts > products:
            raise ValueError(
                f"Maximum selectable gifts ({self.max_selectable_gifts}) cannot exceed "
                f"the number of available gift products ({products})"
            )
        if self.max_cart_value is not None and self.max_cart_value < self.min_cart_value:
            raise ValueError("Maximum cart value cannot be below the minimum cart value")
        return self


class GiftPopupConfigResponse(ResourceSchema):
    title: str
    sub_title: str
    active: bool
    min_cart_value: float
    max_cart_value: Optional[float] = None
    max_selectable_gifts: int
    gift_products: List[str]


class GiftOfferResponse(BaseSchema):
    eligible: bool
    selectable_gifts: List[str]
    max_selectable: int


class GiftProductResponse(BaseSchema):
    id: uuid.UUID
    name: str
    price: float
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
