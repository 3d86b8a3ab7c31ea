"""Shared fixtures: a fresh SQLite database per test and an API client"""

import os
import tempfile
from datetime import timedelta

_TMP_DIR = tempfile.mkdtemp(prefix="storefront-tests-")

# Settings are read at import time
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'unused.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_FILE"] = ""
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from storefront.core.cache import cache
from storefront.core.database import get_db
from storefront.core.security import SecurityUtils
from storefront.main import app
from storefront.models import Base, Coupon, GiftCard, GiftPopupConfig, Product
from storefront.utils.helpers import utcnow, to_money


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clear_cache():
    cache._fallback_cache.clear()
    yield
    cache._fallback_cache.clear()


def make_token(is_admin: bool = False, user_id: str = "user-1") -> str:
    return SecurityUtils.create_access_token(
        {"sub": user_id, "email": f"{user_id}@example.com", "isAdmin": is_admin}
    )


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token(is_admin=True, user_id='admin-1')}"}


async def create_coupon(db, **overrides) -> Coupon:
    now = utcnow()
    values = dict(
        code="SAVE10",
        description="",
        discount_amount=to_money(10),
        discount_type="percentage",
        minimum_cart_value=to_money(0),
        max_uses=-1,
        used_count=0,
        start_date=now - timedelta(days=1),
        end_date=now + timedelta(days=30),
        is_active=True,
    )
    values.update(overrides)
    coupon = Coupon(**values)
    db.add(coupon)
    await db.commit()
    await db.refresh(coupon)
    return coupon


async def create_gift_card(db, code: str = "GIFT1234", amount: float = 1000, **overrides) -> GiftCard:
    values = dict(
        code=code,
        initial_amount=to_money(amount),
        balance=to_money(amount),
        expiry_date=utcnow() + timedelta(days=365),
        is_active=True,
    )
    values.update(overrides)
    card = GiftCard(**values)
    db.add(card)
    await db.commit()
    await db.refresh(card)
    return card


async def create_product(db, name: str, price: float = 499) -> Product:
    product = Product(name=name, price=to_money(price), images=[f"https://img.example.com/{name}.jpg"])
    db.add(product)
    await db.commit()
    await db.refresh(product)
    return product


async def create_gift_popup(db, **overrides) -> GiftPopupConfig:
    values = dict(
        title="Claim Your Complimentary Gift",
        sub_title="Choose Any 2",
        active=True,
        min_cart_value=to_money(1000),
        max_cart_value=None,
        max_selectable_gifts=2,
        gift_products=[],
    )
    values.update(overrides)
    config = GiftPopupConfig(**values)
    db.add(config)
    await db.commit()
    await db.refresh(config)
    return config
