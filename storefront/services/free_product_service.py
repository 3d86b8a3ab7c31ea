"""
Automatic free-product bands
"""

from typing import Optional, List
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
import uuid
import logging

from storefront.models import FreeProduct
from storefront.core.exceptions import NotFoundException, ValidationException, ConflictException
from storefront.schemas.free_product import FreeProductCreate, FreeProductUpdate
from storefront.utils.helpers import to_money, Number

logger = logging.getLogger(__name__)


def bands_overlap(
    min_a: Decimal,
    max_a: Optional[Decimal],
    min_b: Decimal,
    max_b: Optional[Decimal],
) -> bool:
    """Closed intervals, None meaning unbounded above"""
    a_below_b = max_a is not None and max_a < min_b
    b_below_a = max_b is not None and max_b < min_a
    return not (a_below_b or b_below_a)


class FreeProductService:
    """Service for free-product bands"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _matching_bands(self, cart: Decimal):
        return select(FreeProduct).where(
            FreeProduct.enabled.is_(True),
            FreeProduct.min_order_value <= cart,
            or_(
                FreeProduct.max_order_value.is_(None),
                FreeProduct.max_order_value >= cart,
            ),
        )

    async def is_eligible(self, product_id: str, cart_value: Number) -> bool:
        """True when any enabled band of the product covers the cart value"""
        query = self._matching_bands(to_money(cart_value)).where(
            FreeProduct.product_id == product_id
        ).limit(1)
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None

    async def eligible_products(self, cart_value: Number) -> List[str]:
        """Product ids granted for free at this cart value"""
        result = await self.db.execute(
            self._matching_bands(to_money(cart_value)).order_by(FreeProduct.min_order_value.asc())
        )
        product_ids: List[str] = []
        for band in result.scalars().all():
            if band.product_id not in product_ids:
                product_ids.append(band.product_id)
        return product_ids

    async def list_enabled(self) -> List[FreeProduct]:
        result = await self.db.execute(
            select(FreeProduct)
            .where(FreeProduct.enabled.is_(True))
            .order_by(FreeProduct.min_order_value.asc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[FreeProduct]:
        result = await self.db.execute(
            select(FreeProduct).order_by(FreeProduct.created_at.desc())
        )
        return list(result.scalars().all())

    async def get(self, band_id: uuid.UUID, enabled_only: bool = False) -> FreeProduct:
        band = await self.db.get(FreeProduct, band_id)
        if not band or (enabled_only and not band.enabled):
            raise NotFoundException("Free product not found")
        return band

    async def create(self, data: FreeProductCreate) -> FreeProduct:
        min_value = to_money(data.min_order_value)
        max_value = to_money(data.max_order_value) if data.max_order_value is not None else None
        await self._check_overlap(data.product_id, min_value, max_value)

        band = FreeProduct(
            product_id=data.product_id,
            min_order_value=min_value,
            max_order_value=max_value,
            enabled=data.enabled,
        )
        self.db.add(band)
        await self.db.commit()
        await self.db.refresh(band)

        logger.info(f"Free product band {band.id} created for product {band.product_id}")
        return band

    async def update(self, band_id: uuid.UUID, data: FreeProductUpdate) -> FreeProduct:
        """Partial update; the merged band is validated as a whole"""
        band = await self.get(band_id)
        changes = data.model_dump(exclude_unset=True)

        product_id = changes.get("product_id") or band.product_id
        min_value = (
            to_money(changes["min_order_value"])
            if changes.get("min_order_value") is not None
            else band.min_order_value
        )
        if "max_order_value" in changes:
            max_value = to_money(changes["max_order_value"]) if changes["max_order_value"] is not None else None
        else:
            max_value = band.max_order_value

        if min_value <= 0:
            raise ValidationException("Minimum order value must be greater than zero")
        if max_value is not None and max_value <= min_value:
            raise ValidationException("Maximum order value must be greater than minimum order value")

        await self._check_overlap(product_id, min_value, max_value, exclude_id=band.id)

        band.product_id = product_id
        band.min_order_value = min_value
        band.max_order_value = max_value
        if changes.get("enabled") is not None:
            band.enabled = changes["enabled"]

        await self.db.commit()
        await self.db.refresh(band)
        logger.info(f"Free product band {band.id} updated")
        return band

    async def delete(self, band_id: uuid.UUID) -> None:
        band = await self.get(band_id)
        await self.db.delete(band)
        await self.db.commit()
        logger.info(f"Free product band {band_id} deleted")

    async def _check_overlap(
        self,
        product_id: str,
        min_value: Decimal,
        max_value: Optional[Decimal],
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(FreeProduct).where(FreeProduct.product_id == product_id)
        if exclude_id is not None:
            query = query.where(FreeProduct.id != exclude_id)

        result = await self.db.execute(query)
        for other in result.scalars().all():
            if bands_overlap(min_value, max_value, other.min_order_value, other.max_order_value):
                raise ConflictException(
                    "This product already has a free-product band covering these order values",
                    error_code="BAND_OVERLAP"
                )
