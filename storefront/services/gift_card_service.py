"""
Gift card ledger and gift card templates
"""

from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, Numeric
from sqlalchemy.exc import IntegrityError
import uuid
import logging

from storefront.models import GiftCard, GiftCardTemplate
from storefront.core.config import settings
from storefront.core.exceptions import (
    StorefrontException,
    NotFoundException,
    ValidationException,
    GiftCardExpiredException,
    InsufficientBalanceException,
)
from storefront.core.monitoring import gift_card_redemptions
from storefront.core.security import SecurityUtils
from storefront.utils.helpers import utcnow, to_money, Number

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5

# SQLite keeps Numeric as REAL, so balances are rounded to cents in SQL
MONEY = Numeric(10, 2)


def check_initial_amount(value: Number) -> Decimal:
    """Round an initial amount to cents and require it to be positive"""
    amount = to_money(value)
    if amount <= 0:
        raise ValidationException("Initial amount must be greater than 0")
    return amount


class GiftCardService:
    """Stored-value gift cards"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_code(self, code: str) -> Optional[GiftCard]:
        result = await self.db.execute(
            select(GiftCard).where(GiftCard.code == code.strip().upper())
        )
        return result.scalar_one_or_none()

    async def get_balance(self, code: str) -> Dict[str, Any]:
        """Public balance lookup"""
        card = await self.get_by_code(code)
        if not card:
            raise NotFoundException("Gift card not found", error_code="GIFT_CARD_NOT_FOUND")

        return {
            "code": card.code,
            "balance": card.balance,
            "expiry_date": card.expiry_date,
            "redeemable": card.is_redeemable(),
        }

    async def redeem(self, code: str, amount: Number, now: Optional[datetime] = None) -> Decimal:
        """
        Debit a gift card

        The debit is one conditional UPDATE guarded by the balance, so two
        concurrent redemptions can never overdraw a card.

        Returns:
            Remaining balance
        """
        code = code.strip().upper()
        amount = to_money(amount)
        now = now or utcnow()

        if amount <= 0:
            raise ValidationException("Redemption amount must be greater than 0")

        result = await self.db.execute(
            update(GiftCard)
            .where(
                GiftCard.code == code,
                GiftCard.is_active.is_(True),
                GiftCard.expiry_date >= now,
                func.round(GiftCard.balance, 2, type_=MONEY) >= amount,
            )
            .values(balance=func.round(GiftCard.balance - amount, 2, type_=MONEY), updated_at=now)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            await self.db.rollback()
            try:
                await self._diagnose_failed_redeem(code, amount, now)
            except StorefrontException as e:
                gift_card_redemptions.labels(result=e.error_code).inc()
                logger.info(f"Gift card {code} redemption of {amount} refused: {e.detail}")
                raise

        await self.db.commit()

        card = await self.get_by_code(code)
        await self.db.refresh(card)
        gift_card_redemptions.labels(result="redeemed").inc()
        logger.info(f"Gift card {code} debited {amount}, balance {card.balance}")
        return card.balance

    async def _diagnose_failed_redeem(self, code: str, amount: Decimal, now: datetime) -> None:
        card = await self.get_by_code(code)
        if not card:
            raise NotFoundException("Gift card not found", error_code="GIFT_CARD_NOT_FOUND")
        if not card.is_redeemable(now):
            raise GiftCardExpiredException()
        # Also covers a balance spent by a concurrent redemption
        raise InsufficientBalanceException(float(card.balance))

    # Admin operations

    async def list_cards(self) -> List[GiftCard]:
        result = await self.db.execute(
            select(GiftCard).order_by(GiftCard.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_card(self, card_id: uuid.UUID) -> GiftCard:
        card = await self.db.get(GiftCard, card_id)
        if not card:
            raise NotFoundException("Gift card not found", error_code="GIFT_CARD_NOT_FOUND")
        return card

    async def create_card(
        self,
        initial_amount: Number,
        expiry_date: datetime,
        is_active: bool = True,
        image_url: str = ""
    ) -> GiftCard:
        """Mint a gift card with a fresh code and a full balance"""
        amount = check_initial_amount(initial_amount)

        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            code = SecurityUtils.generate_code(settings.GIFT_CARD_CODE_LENGTH)
            if await self.get_by_code(code):
                continue

            card = GiftCard(
                code=code,
                initial_amount=amount,
                balance=amount,
                expiry_date=expiry_date,
                is_active=is_active,
                image_url=image_url,
            )
            self.db.add(card)
            try:
                await self.db.commit()
            except IntegrityError:
                # Another request minted the same code in the meantime
                await self.db.rollback()
                logger.warning(f"Gift card code collision on attempt {attempt}")
                continue

            await self.db.refresh(card)
            logger.info(f"Gift card {card.code} created for {amount}")
            return card

        raise RuntimeError("Could not generate a unique gift card code")

    async def update_card(self, card_id: uuid.UUID, changes: Dict[str, Any]) -> GiftCard:
        """
        Apply admin changes to a card

        The balance may be lowered but never raised, and the initial
        amount may not drop below the balance.
        """
        card = await self.get_card(card_id)
        balance, initial_amount = self.check_update(card, changes)

        card.balance = balance
        card.initial_amount = initial_amount
        if changes.get("expiry_date") is not None:
            card.expiry_date = changes["expiry_date"]
        if changes.get("is_active") is not None:
            card.is_active = changes["is_active"]
        if changes.get("image_url"):
            card.image_url = changes["image_url"]

        await self.db.commit()
        await self.db.refresh(card)
        logger.info(f"Gift card {card.code} updated")
        return card

    @staticmethod
    def check_update(card: GiftCard, changes: Dict[str, Any]) -> Tuple[Decimal, Decimal]:
        """Resolve the new balance and initial amount, rejecting invalid changes"""
        balance = to_money(changes["balance"]) if changes.get("balance") is not None else card.balance
        initial_amount = (
            to_money(changes["initial_amount"])
            if changes.get("initial_amount") is not None
            else card.initial_amount
        )

        if balance < 0:
            raise ValidationException("Balance cannot be negative")
        if balance > card.balance:
            raise ValidationException("Gift card balance cannot be increased")
        if initial_amount < balance:
            raise ValidationException("Initial amount cannot be below the current balance")
        return balance, initial_amount

    async def retire_card(self, card_id: uuid.UUID) -> GiftCard:
        """Deactivate a card; cards are never physically deleted"""
        card = await self.get_card(card_id)
        card.is_active = False
        await self.db.commit()
        await self.db.refresh(card)
        logger.info(f"Gift card {card.code} retired")
        return card


class GiftCardTemplateService:
    """Denominations offered to shoppers"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_active(self) -> List[GiftCardTemplate]:
        result = await self.db.execute(
            select(GiftCardTemplate)
            .where(GiftCardTemplate.is_active.is_(True))
            .order_by(GiftCardTemplate.initial_amount.asc())
        )
        return list(result.scalars().all())

    async def list_templates(self) -> List[GiftCardTemplate]:
        result = await self.db.execute(
            select(GiftCardTemplate).order_by(GiftCardTemplate.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_template(self, template_id: uuid.UUID) -> GiftCardTemplate:
        template = await self.db.get(GiftCardTemplate, template_id)
        if not template:
            raise NotFoundException("Gift card template not found")
        return template

    async def create_template(
        self,
        initial_amount: Number,
        expiry_date: datetime,
        is_active: bool = True,
        image_url: str = ""
    ) -> GiftCardTemplate:
        amount = check_initial_amount(initial_amount)

        template = GiftCardTemplate(
            initial_amount=amount,
            expiry_date=expiry_date,
            is_active=is_active,
            image_url=image_url,
        )
        self.db.add(template)
        await self.db.commit()
        await self.db.refresh(template)
        logger.info(f"Gift card template {template.id} created for {amount}")
        return template

    async def update_template(self, template_id: uuid.UUID, changes: Dict[str, Any]) -> GiftCardTemplate:
        template = await self.get_template(template_id)

        if changes.get("initial_amount") is not None:
            template.initial_amount = check_initial_amount(changes["initial_amount"])
        if changes.get("expiry_date") is not None:
            template.expiry_date = changes["expiry_date"]
        if changes.get("is_active") is not None:
            template.is_active = changes["is_active"]
        if changes.get("image_url"):
            template.image_url = changes["image_url"]

        await self.db.commit()
        await self.db.refresh(template)
        return template

    async def delete_template(self, template_id: uuid.UUID) -> None:
        template = await self.get_template(template_id)
        await self.db.delete(template)
        await self.db.commit()
        logger.info(f"Gift card template {template_id} deleted")
