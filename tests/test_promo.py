from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from storefront.core.exceptions import NotFoundException
from storefront.schemas.promo import PromoMessageCreate, PromoMessageUpdate, PromoTimerCreate
from storefront.services.promo_service import PromoMessageService, PromoTimerService, remaining_seconds
from storefront.utils.helpers import utcnow


async def _message(db, min_value, max_value, text):
    return await PromoMessageService(db).create(
        PromoMessageCreate(min_cart_value=min_value, max_cart_value=max_value, message=text)
    )


async def test_select_returns_none_outside_every_band(db):
    await _message(db, 0, 499, "Add more for free shipping")
    await _message(db, 1000, 1999, "Unlock a free gift")

    assert await PromoMessageService(db).select(750) is None
    assert await PromoMessageService(db).select(5000) is None


async def test_select_prefers_tightest_band(db):
    await _message(db, 0, 5000, "Generic offer")
    await _message(db, 1000, 5000, "Spend more, save more")
    await _message(db, 2000, 3000, "Almost there")

    assert (await PromoMessageService(db).select(2500)).message == "Almost there"
    assert (await PromoMessageService(db).select(1500)).message == "Spend more, save more"
    assert (await PromoMessageService(db).select(10)).message == "Generic offer"


async def test_band_edges_are_inclusive(db):
    await _message(db, 1000, 2000, "In band")

    assert await PromoMessageService(db).select(1000) is not None
    assert await PromoMessageService(db).select(2000) is not None


def test_message_html_is_sanitised():
    data = PromoMessageCreate(
        min_cart_value=0,
        max_cart_value=10,
        message='<b>Free</b> gift<script>alert(1)</script>',
    )
    assert "<script>" not in data.message
    assert data.message.startswith("<b>Free</b> gift")


@pytest.mark.parametrize("text", ["<b></b>", "<script></script>", "   ", "<i> </i>"])
def test_message_without_visible_text_is_rejected(text):
    with pytest.raises(ValidationError):
        PromoMessageCreate(min_cart_value=0, max_cart_value=10, message=text)
    with pytest.raises(ValidationError):
        PromoMessageUpdate(message=text)


def test_remaining_seconds():
    now = datetime(2025, 1, 1, 12, 0, 0)

    assert remaining_seconds(now + timedelta(minutes=5), now) == 300
    assert remaining_seconds(now - timedelta(minutes=5), now) == 0


async def test_timer_for_product(db):
    service = PromoTimerService(db)
    await service.create(PromoTimerCreate(product_id="prod-1", end_time=utcnow() + timedelta(hours=2)))

    timer = await service.for_product("prod-1")
    assert timer["expired"] is False
    assert 7100 < timer["remaining_seconds"] <= 7200

    with pytest.raises(NotFoundException):
        await service.for_product("prod-2")


async def test_disabled_timer_is_hidden(db):
    service = PromoTimerService(db)
    await service.create(PromoTimerCreate(product_id="prod-1", end_time=utcnow() + timedelta(hours=1), enabled=False))

    assert await service.list_enabled() == []
    with pytest.raises(NotFoundException):
        await service.for_product("prod-1")


# API

async def test_api_promo_messages(client, admin_headers):
    for payload in (
        {"minCartValue": 0, "maxCartValue": 999, "message": "Spend 1000 for a free gift"},
        {"minCartValue": 500, "maxCartValue": 999, "message": "So close to a free gift"},
    ):
        response = await client.post("/api/promomessages", json=payload, headers=admin_headers)
        assert response.status_code == 201

    response = await client.get("/api/promomessages", params={"cartTotal": 700})
    assert [m["message"] for m in response.json()] == ["So close to a free gift", "Spend 1000 for a free gift"]

    response = await client.get("/api/promomessages")
    assert len(response.json()) == 2

    response = await client.get("/api/promomessages/select", params={"cartTotal": 700})
    assert response.json()["message"] == "So close to a free gift"

    response = await client.get("/api/promomessages/select", params={"cartTotal": 5000})
    assert response.status_code == 200
    assert response.json() is None


async def test_api_promo_message_writes_require_admin(client, user_headers):
    payload = {"minCartValue": 0, "maxCartValue": 10, "message": "Hi"}

    assert (await client.post("/api/promomessages", json=payload)).status_code == 401
    assert (await client.post("/api/promomessages", json=payload, headers=user_headers)).status_code == 403


async def test_api_promo_message_update_and_delete(client, admin_headers):
    created = (await client.post(
        "/api/promomessages",
        json={"minCartValue": 0, "maxCartValue": 100, "message": "Hello"},
        headers=admin_headers,
    )).json()

    response = await client.patch(
        f"/api/promomessages/{created['id']}", json={"minCartValue": 200}, headers=admin_headers
    )
    assert response.status_code == 422

    response = await client.patch(
        f"/api/promomessages/{created['id']}", json={"message": "<b></b>"}, headers=admin_headers
    )
    assert response.status_code == 422

    response = await client.patch(
        f"/api/promomessages/{created['id']}", json={"message": "Updated"}, headers=admin_headers
    )
    assert response.json()["message"] == "Updated"

    response = await client.delete(f"/api/promomessages/{created['id']}", headers=admin_headers)
    assert response.status_code == 204

    assert (await client.get(f"/api/promomessages/{created['id']}")).status_code == 404


async def test_api_promo_timers(client, admin_headers):
    end_time = (utcnow() + timedelta(days=1)).isoformat()
    response = await client.post(
        "/api/admin/promotimers",
        json={"productId": "prod-1", "endTime": end_time},
        headers=admin_headers,
    )
    assert response.status_code == 201
    timer_id = response.json()["id"]

    response = await client.get("/api/promotimers")
    assert [t["productId"] for t in response.json()] == ["prod-1"]

    response = await client.get("/api/promotimers/product/prod-1")
    assert response.status_code == 200
    assert response.json()["expired"] is False
    assert response.json()["remainingSeconds"] > 0

    response = await client.put(
        f"/api/admin/promotimers/{timer_id}", json={"enabled": False}, headers=admin_headers
    )
    assert response.json()["enabled"] is False
    assert (await client.get("/api/promotimers")).json() == []

    response = await client.delete(f"/api/admin/promotimers/{timer_id}", headers=admin_headers)
    assert response.status_code == 200
    assert (await client.get(f"/api/admin/promotimers/{timer_id}", headers=admin_headers)).status_code == 404
