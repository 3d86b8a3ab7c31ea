from decimal import Decimal

import pytest

from storefront.core.cache import cache
from storefront.core.exceptions import NotFoundException
from storefront.schemas.gift_popup import GiftPopupConfigResponse, GiftPopupConfigUpdate
from storefront.services.gift_popup_service import GiftPopupService, CONFIG_CACHE_KEY, evaluate_offer

from conftest import create_gift_popup, create_product


def _config(**overrides) -> GiftPopupConfigResponse:
    values = dict(
        id="6f1c3c56-3c1e-4f4e-8d55-2f0d6e7c9a10",
        created_at="2025-01-01T00:00:00",
        updated_at="2025-01-01T00:00:00",
        title="Claim Your Complimentary Gift",
        sub_title="Choose Any 2",
        active=True,
        min_cart_value=1000,
        max_cart_value=None,
        max_selectable_gifts=2,
        gift_products=["a", "b", "c"],
    )
    values.update(overrides)
    return GiftPopupConfigResponse(**values)


@pytest.mark.parametrize(
    "cart_value, eligible",
    [(999.99, False), (1000, True), (5000, True)],
)
def test_offer_threshold(cart_value, eligible):
    offer = evaluate_offer(_config(), cart_value)
    assert offer["eligible"] is eligible


def test_offer_respects_upper_bound():
    config = _config(max_cart_value=2000)

    assert evaluate_offer(config, 2000)["eligible"] is True
    assert evaluate_offer(config, 2000.01)["eligible"] is False


def test_inactive_popup_offers_nothing():
    offer = evaluate_offer(_config(active=False), 5000)
    assert offer == {"eligible": False, "selectable_gifts": [], "max_selectable": 0}


def test_max_selectable_capped_by_product_count():
    offer = evaluate_offer(_config(max_selectable_gifts=2, gift_products=["only"]), 1500)

    assert offer["selectable_gifts"] == ["only"]
    assert offer["max_selectable"] == 1


def test_eligible_with_no_products():
    offer = evaluate_offer(_config(gift_products=[]), 1500)
    assert offer == {"eligible": True, "selectable_gifts": [], "max_selectable": 0}


async def test_missing_config_is_not_created_on_read(db):
    with pytest.raises(NotFoundException):
        await GiftPopupService(db).get_config()


async def test_config_is_cached_and_invalidated(db):
    await create_gift_popup(db, min_cart_value=Decimal("1000"))
    service = GiftPopupService(db)

    config = await service.get_config()
    assert config.min_cart_value == 1000.0
    assert (await cache.get(CONFIG_CACHE_KEY))["min_cart_value"] == 1000.0

    await service.update_config(GiftPopupConfigUpdate(title="New", min_cart_value=1500))

    assert await cache.get(CONFIG_CACHE_KEY) is None
    assert (await service.get_config()).min_cart_value == 1500.0


async def test_ensure_default_config_is_idempotent(db):
    service = GiftPopupService(db)

    first = await service.ensure_default_config()
    second = await service.ensure_default_config()

    assert first.id == second.id
    assert first.active is False
    assert first.min_cart_value == Decimal("1000.00")


# API

async def test_api_get_popup_and_offer(client, db):
    await create_gift_popup(db, gift_products=["p1", "p2", "p3"], max_selectable_gifts=2)

    response = await client.get("/api/gift-popup")
    assert response.status_code == 200
    assert response.json()["minCartValue"] == 1000.0
    assert response.json()["subTitle"] == "Choose Any 2"

    response = await client.get("/api/gift-popup/offer", params={"cartValue": 1200})
    assert response.json() == {"eligible": True, "selectableGifts": ["p1", "p2", "p3"], "maxSelectable": 2}

    response = await client.get("/api/gift-popup/offer", params={"cartValue": 10})
    assert response.json()["eligible"] is False


async def test_api_update_validates_limits(client, db, admin_headers):
    await create_gift_popup(db)

    response = await client.put(
        "/api/admin/gift-popup",
        json={"title": "Gifts", "minCartValue": 1000, "maxSelectableGifts": 3, "giftProducts": ["a", "b"]},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert "cannot exceed" in response.json()["message"]

    response = await client.post(
        "/api/admin/gift-popup",
        json={
            "title": "Gifts",
            "active": True,
            "minCartValue": 1500,
            "maxCartValue": 5000,
            "maxSelectableGifts": 2,
            "giftProducts": ["a", "b"],
        },
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["maxCartValue"] == 5000.0

    response = await client.get("/api/gift-popup")
    assert response.json()["minCartValue"] == 1500.0


async def test_api_update_requires_admin(client, db, user_headers):
    await create_gift_popup(db)

    response = await client.put(
        "/api/admin/gift-popup", json={"title": "Gifts", "minCartValue": 10}, headers=user_headers
    )
    assert response.status_code == 403


async def test_api_gift_products(client, db, admin_headers):
    mug = await create_product(db, "Mug")
    await create_product(db, "Tote Bag")
    await create_gift_popup(db, gift_products=[str(mug.id), "not-a-uuid"])

    response = await client.get("/api/gift-products")
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["Mug"]

    response = await client.get("/api/admin/gift-products", headers=admin_headers)
    assert [p["name"] for p in response.json()] == ["Mug", "Tote Bag"]
