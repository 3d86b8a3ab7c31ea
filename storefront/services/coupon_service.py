"""
Coupon service for managing discount coupons
"""

from typing import Optional, Dict, Any, List
from datetime import datetime
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
import uuid
import logging

from storefront.models import Coupon, DiscountType, UNLIMITED_USES
from storefront.core.exceptions import (
    StorefrontException,
    NotFoundException,
    ValidationException,
    DuplicateResourceException,
    CouponNotFoundException,
    CouponInactiveException,
    CouponExpiredException,
    ThresholdNotMetException,
    UsageLimitExhaustedException,
)
from storefront.core.monitoring import coupon_validations, coupon_applications
from storefront.schemas.coupon import CouponCreate, CouponUpdate
from storefront.utils.helpers import utcnow, to_money, Number

logger = logging.getLogger(__name__)


def calculate_discount(coupon: Coupon, cart_value: Number) -> Decimal:
    """
    Discount granted by a coupon on a cart

    Percentage coupons take their share of the cart; fixed coupons take
    their amount. The result never exceeds the cart value.
    """
    cart = to_money(cart_value)
    amount = Decimal(str(coupon.discount_amount))

    if coupon.discount_type == DiscountType.PERCENTAGE:
        discount = cart * amount / Decimal(100)
    else:
        discount = amount

    return to_money(min(discount, cart))


def check_coupon(coupon: Optional[Coupon], cart_value: Optional[Number] = None, now: Optional[datetime] = None) -> Coupon:
    """
    Raise the first rule a coupon fails, in the order shoppers see them

    cart_value is optional so the same checks explain a failed apply.
    """
    if coupon is None:
        raise CouponNotFoundException()

    if not coupon.is_active:
        raise CouponInactiveException()

    if not coupon.in_window(now):
        raise CouponExpiredException()

    if coupon.is_exhausted:
        raise UsageLimitExhaustedException()

    if cart_value is not None and to_money(cart_value) < to_money(coupon.minimum_cart_value):
        raise ThresholdNotMetException(float(coupon.minimum_cart_value))

    return coupon


class CouponService:
    """
    Service for managing coupon operations
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_code(self, code: str) -> Optional[Coupon]:
        result = await self.db.execute(
            select(Coupon).where(Coupon.code == code.strip().upper())
        )
        return result.scalar_one_or_none()

    async def validate_coupon(
        self,
        code: str,
        cart_value: Number,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Validate coupon and calculate discount

        Raises the matching rejection (not found, inactive, expired,
        exhausted, threshold) when the coupon cannot be used.
        """
        coupon = await self.get_by_code(code)

        try:
            check_coupon(coupon, cart_value, now)
        except StorefrontException as e:
            coupon_validations.labels(result=getattr(e, "error_code", "error")).inc()
            logger.info(f"Coupon {code.upper()} rejected for cart {cart_value}: {e}")
            raise

        discount = calculate_discount(coupon, cart_value)
        coupon_validations.labels(result="valid").inc()
        logger.info(f"Coupon {coupon.code} valid for cart {cart_value}, discount {discount}")

        return {
            "valid": True,
            "discount_value": discount,
            "message": "Coupon applied successfully",
            "coupon": coupon,
        }

    async def apply_coupon(self, code: str, now: Optional[datetime] = None) -> Coupon:
        """
        Record one use of a coupon

        The increment is a single conditional UPDATE guarded by the usage
        limit, so concurrent applications can never exceed max_uses.
        """
        code = code.strip().upper()
        now = now or utcnow()

        result = await self.db.execute(
            update(Coupon)
            .where(
                Coupon.code == code,
                Coupon.is_active.is_(True),
                Coupon.start_date <= now,
                Coupon.end_date >= now,
                or_(
                    Coupon.max_uses == UNLIMITED_USES,
                    Coupon.used_count < Coupon.max_uses,
                ),
            )
            .values(used_count=Coupon.used_count + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            await self.db.rollback()
            coupon = await self.get_by_code(code)
            try:
                check_coupon(coupon, now=now)
            except StorefrontException as e:
                coupon_applications.labels(result=getattr(e, "error_code", "error")).inc()
                logger.info(f"Coupon {code} not applied: {e}")
                raise
            # Lost a race between the UPDATE and the diagnosis read
            coupon_applications.labels(result="LIMIT_EXHAUSTED").inc()
            raise UsageLimitExhaustedException()

        await self.db.commit()

        coupon = await self.get_by_code(code)
        await self.db.refresh(coupon)
        coupon_applications.labels(result="applied").inc()
        logger.info(f"Coupon {code} applied, used {coupon.used_count} times")
        return coupon

    # Admin operations

    async def list_coupons(self) -> List[Coupon]:
        result = await self.db.execute(
            select(Coupon).order_by(Coupon.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_coupon(self, coupon_id: uuid.UUID) -> Coupon:
        coupon = await self.db.get(Coupon, coupon_id)
        if not coupon:
            raise NotFoundException("Coupon not found")
        return coupon

    async def create_coupon(self, data: CouponCreate) -> Coupon:
        """Create a coupon after checking its rules"""
        self._check_rules(data.discount_type, data.discount_amount, data.start_date, data.end_date, data.max_uses)

        if await self.get_by_code(data.code):
            raise DuplicateResourceException("Coupon", "code", data.code)

        coupon = Coupon(
            code=data.code,
            description=data.description,
            discount_amount=to_money(data.discount_amount),
            discount_type=data.discount_type,
            minimum_cart_value=to_money(data.minimum_cart_value),
            max_uses=data.max_uses,
            used_count=0,
            start_date=data.start_date,
            end_date=data.end_date,
            is_active=data.is_active,
        )
        self.db.add(coupon)
        await self._commit_unique(data.code)
        await self.db.refresh(coupon)

        logger.info(f"Coupon {coupon.code} created")
        return coupon

    async def update_coupon(self, coupon_id: uuid.UUID, data: CouponUpdate) -> Coupon:
        """Apply a partial update, validating the merged result"""
        coupon = await self.get_coupon(coupon_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("code") and changes["code"] != coupon.code:
            if await self.get_by_code(changes["code"]):
                raise DuplicateResourceException("Coupon", "code", changes["code"])

        self._check_rules(
            changes.get("discount_type") or coupon.discount_type,
            changes.get("discount_amount") or coupon.discount_amount,
            changes.get("start_date") or coupon.start_date,
            changes.get("end_date") or coupon.end_date,
            changes["max_uses"] if changes.get("max_uses") is not None else coupon.max_uses,
        )

        for field in ("discount_amount", "minimum_cart_value"):
            if changes.get(field) is not None:
                changes[field] = to_money(changes[field])

        coupon.update_from_dict({k: v for k, v in changes.items() if v is not None})
        await self._commit_unique(coupon.code)
        await self.db.refresh(coupon)

        logger.info(f"Coupon {coupon.code} updated: {sorted(changes)}")
        return coupon

    async def delete_coupon(self, coupon_id: uuid.UUID) -> None:
        coupon = await self.get_coupon(coupon_id)
        await self.db.delete(coupon)
        await self.db.commit()
        logger.info(f"Coupon {coupon.code} deleted")

    async def _commit_unique(self, code: str) -> None:
        """Commit, reporting a unique-code race as a duplicate"""
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceException("Coupon", "code", code)

    @staticmethod
    def _check_rules(
        discount_type: str,
        discount_amount: Number,
        start_date: datetime,
        end_date: datetime,
        max_uses: int,
    ) -> None:
        amount = Decimal(str(discount_amount))

        if discount_type == DiscountType.PERCENTAGE and not (0 < amount <= 100):
            raise ValidationException("Percentage discount must be between 1 and 100")

        if discount_type == DiscountType.FIXED and amount <= 0:
            raise ValidationException("Fixed discount must be greater than 0")

        if start_date >= end_date:
            raise ValidationException("End date must be after start date")

        if max_uses != UNLIMITED_USES and max_uses < 1:
            raise ValidationException("Maximum uses must be -1 (unlimited) or a positive number")
