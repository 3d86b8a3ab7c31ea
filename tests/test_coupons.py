import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest

from storefront.core.exceptions import (
    CouponNotFoundException,
    CouponInactiveException,
    CouponExpiredException,
    DuplicateResourceException,
    ThresholdNotMetException,
    UsageLimitExhaustedException,
    ValidationException,
)
from storefront.schemas.coupon import CouponCreate
from storefront.services.coupon_service import CouponService, calculate_discount
from storefront.utils.helpers import utcnow

from conftest import create_coupon


async def test_flat_coupon_scenario(db):
    await create_coupon(
        db,
        code="FLAT500",
        discount_type="fixed",
        discount_amount=Decimal("500"),
        minimum_cart_value=Decimal("3000"),
    )

    result = await CouponService(db).validate_coupon("FLAT500", 4297)

    assert result["valid"] is True
    assert result["discount_value"] == Decimal("500.00")


async def test_code_lookup_is_case_insensitive(db):
    await create_coupon(db, code="WELCOME")

    result = await CouponService(db).validate_coupon("welcome", 100)
    assert result["valid"] is True


@pytest.mark.parametrize("cart_value", [0, 1, 2999.99])
async def test_cart_below_minimum_is_rejected(db, cart_value):
    await create_coupon(db, code="FLAT500", discount_type="fixed", discount_amount=Decimal("500"),
                        minimum_cart_value=Decimal("3000"))

    with pytest.raises(ThresholdNotMetException) as exc_info:
        await CouponService(db).validate_coupon("FLAT500", cart_value)

    assert exc_info.value.extra["valid"] is False
    assert exc_info.value.extra["minimumCartValue"] == 3000.0


@pytest.mark.parametrize(
    "minimum, shown",
    [(Decimal("12345.67"), "12345.67"), (Decimal("1500000"), "1500000.00")],
)
async def test_threshold_message_shows_exact_minimum(db, minimum, shown):
    await create_coupon(db, code="BIGSPEND", minimum_cart_value=minimum)

    with pytest.raises(ThresholdNotMetException) as exc_info:
        await CouponService(db).validate_coupon("BIGSPEND", 100)

    assert exc_info.value.detail == f"Minimum cart value of {shown} required for this coupon"


async def test_unknown_code(db):
    with pytest.raises(CouponNotFoundException):
        await CouponService(db).validate_coupon("NOPE", 1000)


async def test_inactive_coupon(db):
    await create_coupon(db, code="OFF", is_active=False)
    with pytest.raises(CouponInactiveException):
        await CouponService(db).validate_coupon("OFF", 1000)


async def test_coupon_outside_window(db):
    now = utcnow()
    await create_coupon(db, code="OLD", start_date=now - timedelta(days=10), end_date=now - timedelta(days=1))
    await create_coupon(db, code="SOON", start_date=now + timedelta(days=1), end_date=now + timedelta(days=10))

    service = CouponService(db)
    with pytest.raises(CouponExpiredException):
        await service.validate_coupon("OLD", 1000)
    with pytest.raises(CouponExpiredException):
        await service.validate_coupon("SOON", 1000)


async def test_exhausted_coupon(db):
    await create_coupon(db, code="ONCE", max_uses=1, used_count=1)
    with pytest.raises(UsageLimitExhaustedException):
        await CouponService(db).validate_coupon("ONCE", 1000)


@pytest.mark.parametrize(
    "cart_value, percent, expected",
    [
        (1000, 10, Decimal("100.00")),
        (4297, 15, Decimal("644.55")),
        (99.99, 100, Decimal("99.99")),
        (0.05, 50, Decimal("0.03")),
    ],
)
async def test_percentage_discount(db, cart_value, percent, expected):
    coupon = await create_coupon(db, code="PCT", discount_amount=Decimal(percent))

    assert calculate_discount(coupon, cart_value) == expected
    assert calculate_discount(coupon, cart_value) <= Decimal(str(cart_value)).quantize(Decimal("0.01"))


async def test_fixed_discount_never_exceeds_cart(db):
    coupon = await create_coupon(db, code="BIG", discount_type="fixed", discount_amount=Decimal("500"))
    assert calculate_discount(coupon, 120) == Decimal("120.00")


async def test_apply_increments_used_count(db):
    await create_coupon(db, code="MULTI", max_uses=3)

    coupon = await CouponService(db).apply_coupon("multi")
    assert coupon.used_count == 1


async def test_apply_unlimited_coupon(db):
    await create_coupon(db, code="ALWAYS", max_uses=-1, used_count=41)

    coupon = await CouponService(db).apply_coupon("ALWAYS")
    assert coupon.used_count == 42


async def test_apply_reports_reason(db):
    await create_coupon(db, code="OFF", is_active=False)

    with pytest.raises(CouponInactiveException):
        await CouponService(db).apply_coupon("OFF")
    with pytest.raises(CouponNotFoundException):
        await CouponService(db).apply_coupon("MISSING")


async def test_concurrent_apply_single_use(session_factory, db):
    await create_coupon(db, code="ONLYONE", max_uses=1)

    async def apply():
        async with session_factory() as session:
            return await CouponService(session).apply_coupon("ONLYONE")

    results = await asyncio.gather(apply(), apply(), return_exceptions=True)

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], UsageLimitExhaustedException)

    db.expire_all()
    coupon = await CouponService(db).get_by_code("ONLYONE")
    assert coupon.used_count == 1


async def test_create_rejects_bad_rules(db):
    now = utcnow()
    service = CouponService(db)

    with pytest.raises(ValidationException):
        await service.create_coupon(CouponCreate(
            code="TOOMUCH", discount_amount=150, discount_type="percentage",
            start_date=now, end_date=now + timedelta(days=1),
        ))
    with pytest.raises(ValidationException):
        await service.create_coupon(CouponCreate(
            code="BACKWARDS", discount_amount=10,
            start_date=now, end_date=now - timedelta(days=1),
        ))
    with pytest.raises(ValidationException):
        await service.create_coupon(CouponCreate(
            code="ZEROUSES", discount_amount=10, max_uses=0,
            start_date=now, end_date=now + timedelta(days=1),
        ))


async def test_create_reports_code_taken_between_check_and_insert(db, monkeypatch):
    await create_coupon(db, code="RACE10")
    service = CouponService(db)

    async def not_found(code):
        return None

    monkeypatch.setattr(service, "get_by_code", not_found)
    now = utcnow()

    with pytest.raises(DuplicateResourceException):
        await service.create_coupon(CouponCreate(
            code="race10", discount_amount=10,
            start_date=now, end_date=now + timedelta(days=1),
        ))

    assert len(await service.list_coupons()) == 1


# API

def _coupon_payload(**overrides):
    now = utcnow()
    payload = {
        "code": "flat500",
        "description": "Flat 500 off",
        "discountType": "fixed",
        "discountAmount": 500,
        "minimumCartValue": 3000,
        "maxUses": 10,
        "startDate": (now - timedelta(days=1)).isoformat(),
        "endDate": (now + timedelta(days=30)).isoformat(),
    }
    payload.update(overrides)
    return payload


async def test_api_validate_flow(client, admin_headers):
    response = await client.post("/api/admin/coupons", json=_coupon_payload(), headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["code"] == "FLAT500"
    assert response.json()["usedCount"] == 0

    response = await client.post("/api/coupons/validate", json={"code": "FLAT500", "cartValue": 4297})
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["discountValue"] == 500.0
    assert body["coupon"]["code"] == "FLAT500"


async def test_api_validate_threshold_not_met(client, db):
    await create_coupon(db, code="FLAT500", discount_type="fixed", discount_amount=Decimal("500"),
                        minimum_cart_value=Decimal("3000"))

    response = await client.post("/api/coupons/validate", json={"code": "FLAT500", "cartValue": 1000})

    assert response.status_code == 400
    body = response.json()
    assert body["valid"] is False
    assert body["code"] == "THRESHOLD_NOT_MET"
    assert body["minimumCartValue"] == 3000.0
    assert "3000" in body["message"]


async def test_api_validate_unknown_code(client):
    response = await client.post("/api/coupons/validate", json={"code": "NOPE", "cartValue": 100})

    assert response.status_code == 404
    assert response.json() == {"message": "Invalid coupon code", "code": "COUPON_NOT_FOUND", "valid": False}


async def test_api_validate_rejects_negative_cart(client):
    response = await client.post("/api/coupons/validate", json={"code": "ANY", "cartValue": -1})
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_api_apply_requires_login(client, db):
    await create_coupon(db, code="SAVE10")

    response = await client.post("/api/coupons/apply", json={"code": "SAVE10"})
    assert response.status_code == 401


async def test_api_apply(client, db, user_headers):
    await create_coupon(db, code="ONCE", max_uses=1)

    response = await client.post("/api/coupons/apply", json={"code": "ONCE"}, headers=user_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Coupon applied successfully", "usedCount": 1}

    response = await client.post("/api/coupons/apply", json={"code": "ONCE"}, headers=user_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "LIMIT_EXHAUSTED"


async def test_api_duplicate_code(client, admin_headers):
    response = await client.post("/api/admin/coupons", json=_coupon_payload(), headers=admin_headers)
    assert response.status_code == 201

    response = await client.post("/api/admin/coupons", json=_coupon_payload(), headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_RESOURCE"


async def test_api_update_and_delete(client, admin_headers):
    created = (await client.post("/api/admin/coupons", json=_coupon_payload(), headers=admin_headers)).json()

    response = await client.put(
        f"/api/admin/coupons/{created['id']}",
        json={"isActive": False, "discountAmount": 750},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["isActive"] is False
    assert response.json()["discountAmount"] == 750.0
    assert response.json()["code"] == "FLAT500"

    response = await client.put(
        f"/api/admin/coupons/{created['id']}",
        json={"discountType": "percentage"},
        headers=admin_headers,
    )
    assert response.status_code == 422

    response = await client.delete(f"/api/admin/coupons/{created['id']}", headers=admin_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/admin/coupons/{created['id']}", headers=admin_headers)
    assert response.status_code == 404


async def test_api_list_coupons(client, db, admin_headers):
    await create_coupon(db, code="FIRST")
    await create_coupon(db, code="SECOND")

    response = await client.get("/api/admin/coupons", headers=admin_headers)
    assert response.status_code == 200
    assert {c["code"] for c in response.json()} == {"FIRST", "SECOND"}
