"""
Free-gift popup configuration and offer evaluation
"""

from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import uuid
import logging

from storefront.models import GiftPopupConfig, Product
from storefront.core.cache import cache
from storefront.core.config import settings
from storefront.core.exceptions import NotFoundException
from storefront.schemas.gift_popup import GiftPopupConfigUpdate, GiftPopupConfigResponse
from storefront.utils.helpers import to_money, Number

logger = logging.getLogger(__name__)

CONFIG_CACHE_KEY = "gift_popup:config"


def evaluate_offer(config: GiftPopupConfigResponse, cart_value: Number) -> Dict[str, Any]:
    """
    Decide which gifts a cart qualifies for

    Returns eligible, the selectable product ids and how many of them
    may be picked.
    """
    cart = to_money(cart_value)
    eligible = (
        config.active
        and cart >= to_money(config.min_cart_value)
        and (config.max_cart_value is None or cart <= to_money(config.max_cart_value))
    )

    if not eligible:
        return {"eligible": False, "selectable_gifts": [], "max_selectable": 0}

    gifts = list(config.gift_products)
    return {
        "eligible": True,
        "selectable_gifts": gifts,
        "max_selectable": min(config.max_selectable_gifts, len(gifts)),
    }


class GiftPopupService:
    """Service for the singleton gift popup configuration"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self) -> Optional[GiftPopupConfig]:
        result = await self.db.execute(
            select(GiftPopupConfig).order_by(GiftPopupConfig.created_at.asc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_config(self) -> GiftPopupConfigResponse:
        """Current configuration, served from cache when possible"""
        cached = await cache.get(CONFIG_CACHE_KEY)
        if cached:
            return GiftPopupConfigResponse.model_validate(cached)

        record = await self._load()
        if not record:
            raise NotFoundException("Gift popup configuration not found")

        config = GiftPopupConfigResponse.model_validate(record)
        await cache.set(CONFIG_CACHE_KEY, config.model_dump(mode="json"), expire=settings.CACHE_TTL_SECONDS)
        return config

    async def update_config(self, data: GiftPopupConfigUpdate) -> GiftPopupConfigResponse:
        """Replace the configuration and invalidate the cached copy"""
        record = await self._load()
        if not record:
            raise NotFoundException("Gift popup configuration not found")

        record.title = data.title
        record.sub_title = data.sub_title
        record.active = data.active
        record.min_cart_value = to_money(data.min_cart_value)
        record.max_cart_value = to_money(data.max_cart_value) if data.max_cart_value is not None else None
        record.max_selectable_gifts = data.max_selectable_gifts
        record.gift_products = list(data.gift_products)

        await self.db.commit()
        await self.db.refresh(record)
        await cache.delete(CONFIG_CACHE_KEY)

        logger.info(
            f"Gift popup updated: active={record.active}, min={record.min_cart_value}, "
            f"{len(record.gift_products)} gift products"
        )
        return GiftPopupConfigResponse.model_validate(record)

    async def get_offer(self, cart_value: Number) -> Dict[str, Any]:
        config = await self.get_config()
        return evaluate_offer(config, cart_value)

    async def get_gift_products(self) -> List[Product]:
        """Details of the products configured as gifts"""
        config = await self.get_config()
        ids = []
        for product_id in config.gift_products:
            try:
                ids.append(uuid.UUID(str(product_id)))
            except ValueError:
                logger.warning(f"Ignoring malformed gift product id {product_id!r}")

        if not ids:
            return []

        result = await self.db.execute(select(Product).where(Product.id.in_(ids)))
        return list(result.scalars().all())

    async def list_all_products(self) -> List[Product]:
        """Every catalog product, for picking gifts in the admin"""
        result = await self.db.execute(select(Product).order_by(Product.name.asc()))
        return list(result.scalars().all())

    async def ensure_default_config(self) -> GiftPopupConfig:
        """Create the default configuration if none exists"""
        record = await self._load()
        if record:
            return record

        record = GiftPopupConfig(
            title=settings.GIFT_POPUP_DEFAULT_TITLE,
            sub_title=settings.GIFT_POPUP_DEFAULT_SUBTITLE,
            active=False,
            min_cart_value=to_money(settings.GIFT_POPUP_DEFAULT_MIN_CART_VALUE),
            max_cart_value=None,
            max_selectable_gifts=settings.GIFT_POPUP_DEFAULT_MAX_SELECTABLE,
            gift_products=[],
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        logger.info("Default gift popup configuration created")
        return record
