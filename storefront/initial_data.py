"""
Initialise the database

Creates the tables, the gift popup configuration and the default gift
card templates. Run once per deployment:

    python -m storefront.initial_data
"""

from datetime import timedelta
from sqlalchemy import select
import asyncio
import logging

from storefront.core.config import settings
from storefront.core.database import init_db, get_db_context, close_db
from storefront.core.monitoring import setup_logging
from storefront.models import GiftCardTemplate
from storefront.services.gift_popup_service import GiftPopupService
from storefront.utils.helpers import utcnow, to_money

logger = logging.getLogger(__name__)

TEMPLATE_VALIDITY = timedelta(days=365)


async def seed_gift_card_templates(db) -> int:
    """Create one active template per default amount when none exist"""
    result = await db.execute(select(GiftCardTemplate.id).limit(1))
    if result.scalar_one_or_none() is not None:
        return 0

    expiry = utcnow() + TEMPLATE_VALIDITY
    for amount in settings.GIFT_CARD_TEMPLATE_AMOUNTS:
        db.add(GiftCardTemplate(initial_amount=to_money(amount), expiry_date=expiry, is_active=True))
    await db.commit()
    return len(settings.GIFT_CARD_TEMPLATE_AMOUNTS)


async def init() -> None:
    await init_db()

    async with get_db_context() as db:
        await GiftPopupService(db).ensure_default_config()
        created = await seed_gift_card_templates(db)
        if created:
            logger.info(f"Created {created} gift card templates")


async def main() -> None:
    setup_logging()
    logger.info("Creating initial data")
    try:
        await init()
    finally:
        await close_db()
    logger.info("Initial data created")


if __name__ == "__main__":
    asyncio.run(main())
