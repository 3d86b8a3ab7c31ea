"""
Promo messages and promo timers
"""

from typing import Optional, List, Dict, Any
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import uuid
import logging

from storefront.models import PromoMessage, PromoTimer
from storefront.core.exceptions import NotFoundException, ValidationException
from storefront.schemas.promo import (
    PromoMessageCreate,
    PromoMessageUpdate,
    PromoTimerCreate,
    PromoTimerUpdate,
)
from storefront.utils.helpers import utcnow, to_money, Number

logger = logging.getLogger(__name__)


class PromoMessageService:
    """Cart-value keyed banner messages"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_messages(self, cart_total: Optional[Number] = None) -> List[PromoMessage]:
        """
        Messages whose band covers cart_total, tightest lower bound first

        Every message is returned when cart_total is None.
        """
        query = select(PromoMessage)
        if cart_total is not None:
            cart = to_money(cart_total)
            query = query.where(
                PromoMessage.min_cart_value <= cart,
                PromoMessage.max_cart_value >= cart,
            )
        query = query.order_by(
            PromoMessage.min_cart_value.desc(),
            PromoMessage.max_cart_value.asc(),
            PromoMessage.created_at.desc(),
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def select(self, cart_total: Number) -> Optional[PromoMessage]:
        """The single best message for a cart, or None"""
        messages = await self.list_messages(cart_total)
        return messages[0] if messages else None

    async def get(self, message_id: uuid.UUID) -> PromoMessage:
        message = await self.db.get(PromoMessage, message_id)
        if not message:
            raise NotFoundException("Promo message not found")
        return message

    async def create(self, data: PromoMessageCreate) -> PromoMessage:
        message = PromoMessage(
            min_cart_value=to_money(data.min_cart_value),
            max_cart_value=to_money(data.max_cart_value),
            message=data.message,
        )
        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        logger.info(f"Promo message {message.id} created for {message.min_cart_value}-{message.max_cart_value}")
        return message

    async def update(self, message_id: uuid.UUID, data: PromoMessageUpdate) -> PromoMessage:
        message = await self.get(message_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        min_value = to_money(changes.get("min_cart_value", message.min_cart_value))
        max_value = to_money(changes.get("max_cart_value", message.max_cart_value))
        if max_value < min_value:
            raise ValidationException("Maximum cart value cannot be below the minimum cart value")

        message.min_cart_value = min_value
        message.max_cart_value = max_value
        if "message" in changes:
            if not changes["message"]:
                raise ValidationException("Message cannot be empty")
            message.message = changes["message"]

        await self.db.commit()
        await self.db.refresh(message)
        return message

    async def delete(self, message_id: uuid.UUID) -> None:
        message = await self.get(message_id)
        await self.db.delete(message)
        await self.db.commit()
        logger.info(f"Promo message {message_id} deleted")


def remaining_seconds(end_time: datetime, now: Optional[datetime] = None) -> int:
    """Whole seconds until end_time, never negative"""
    delta = end_time - (now or utcnow())
    return max(0, int(delta.total_seconds()))


class PromoTimerService:
    """Per-product countdown deadlines"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_enabled(self) -> List[PromoTimer]:
        result = await self.db.execute(
            select(PromoTimer)
            .where(PromoTimer.enabled.is_(True))
            .order_by(PromoTimer.end_time.asc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[PromoTimer]:
        result = await self.db.execute(
            select(PromoTimer).order_by(PromoTimer.created_at.desc())
        )
        return list(result.scalars().all())

    async def for_product(self, product_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Latest enabled timer of a product with its countdown"""
        result = await self.db.execute(
            select(PromoTimer)
            .where(PromoTimer.product_id == product_id, PromoTimer.enabled.is_(True))
            .order_by(PromoTimer.end_time.desc())
            .limit(1)
        )
        timer = result.scalar_one_or_none()
        if not timer:
            raise NotFoundException("No promo timer for this product")

        seconds = remaining_seconds(timer.end_time, now)
        return {
            "product_id": timer.product_id,
            "end_time": timer.end_time,
            "remaining_seconds": seconds,
            "expired": seconds == 0,
        }

    async def get(self, timer_id: uuid.UUID) -> PromoTimer:
        timer = await self.db.get(PromoTimer, timer_id)
        if not timer:
            raise NotFoundException("Promo timer not found")
        return timer

    async def create(self, data: PromoTimerCreate) -> PromoTimer:
        timer = PromoTimer(product_id=data.product_id, end_time=data.end_time, enabled=data.enabled)
        self.db.add(timer)
        await self.db.commit()
        await self.db.refresh(timer)
        logger.info(f"Promo timer {timer.id} created for product {timer.product_id}")
        return timer

    async def update(self, timer_id: uuid.UUID, data: PromoTimerUpdate) -> PromoTimer:
        timer = await self.get(timer_id)
        timer.update_from_dict(data.model_dump(exclude_unset=True, exclude_none=True))
        await self.db.commit()
        await self.db.refresh(timer)
        return timer

    async def delete(self, timer_id: uuid.UUID) -> None:
        timer = await self.get(timer_id)
        await self.db.delete(timer)
        await self.db.commit()
        logger.info(f"Promo timer {timer_id} deleted")
