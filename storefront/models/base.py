"""Base models and mixins for database models"""

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, declared_attr
from typing import Any, Dict, Optional
import uuid

from storefront.utils.helpers import utcnow


class Base(DeclarativeBase):
    """Declarative base with an update helper"""

    def update_from_dict(self, data: Dict[str, Any], exclude: Optional[list] = None):
        """Update model instance from dictionary"""
        exclude = exclude or []

        for key, value in data.items():
            if hasattr(self, key) and key not in exclude:
                setattr(self, key, value)

    def __repr__(self):
        class_name = self.__class__.__name__
        attributes = [
            f"{column.name}={getattr(self, column.name)!r}"
            for column in self.__table__.columns
            if column.primary_key
        ]
        return f"<{class_name}({', '.join(attributes)})>"


class UUIDModel:
    """Mixin for adding UUID primary key"""

    @declared_attr
    def id(cls):
        return Column(
            Uuid(as_uuid=True),
            primary_key=True,
            default=uuid.uuid4,
            nullable=False
        )


class TimestampedModel:
    """Mixin for adding created_at and updated_at timestamps"""

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime,
            nullable=False,
            default=utcnow,
            index=True
        )

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime,
            nullable=False,
            default=utcnow,
            onupdate=utcnow
        )


__all__ = [
    'Base',
    'UUIDModel',
    'TimestampedModel',
]
