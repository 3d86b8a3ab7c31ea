"""Base schemas shared by all resources"""

from pydantic import AfterValidator, BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Annotated
import uuid

from storefront.utils.helpers import to_naive_utc

# Timestamps are stored as naive UTC; aware inputs are converted
UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]


class BaseSchema(BaseModel):
    """
    Base schema with common configuration

    Fields are exposed in camelCase; requests may use either spelling.
    """

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class ResourceSchema(BaseSchema):
    """Fields every stored record carries"""
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseSchema):
    message: str
    success: bool = True
