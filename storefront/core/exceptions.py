"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class StorefrontException(HTTPException):
    """Base exception class for the storefront application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.extra = extra or {}


class BadRequestException(StorefrontException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST", extra: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
            extra=extra
        )


class UnauthorizedException(StorefrontException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Authentication required", error_code: str = "UNAUTHORIZED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenException(StorefrontException):
    """403 Forbidden"""

    def __init__(self, detail: str = "Admin access required", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code
        )


class NotFoundException(StorefrontException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND", extra: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code,
            extra=extra
        )


class ConflictException(StorefrontException):
    """409 Conflict"""

    def __init__(self, detail: str, error_code: str = "CONFLICT", extra: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code,
            extra=extra
        )


class ValidationException(StorefrontException):
    """422 Unprocessable Entity"""

    def __init__(self, detail: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code
        )


class DuplicateResourceException(ConflictException):
    """Resource already exists"""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            detail=f"{resource} with {field} '{value}' already exists",
            error_code="DUPLICATE_RESOURCE"
        )


# Coupon rejections carry "valid": false so the storefront can render them
# the same way as a successful validation response.
COUPON_REJECTED = {"valid": False}


class CouponNotFoundException(NotFoundException):
    """Unknown coupon code"""

    def __init__(self, detail: str = "Invalid coupon code"):
        super().__init__(detail=detail, error_code="COUPON_NOT_FOUND", extra=dict(COUPON_REJECTED))


class CouponInactiveException(BadRequestException):
    """Coupon switched off by an admin"""

    def __init__(self):
        super().__init__(
            detail="This coupon is inactive",
            error_code="COUPON_INACTIVE",
            extra=dict(COUPON_REJECTED)
        )


class CouponExpiredException(BadRequestException):
    """Coupon outside its validity window"""

    def __init__(self):
        super().__init__(
            detail="This coupon has expired or is not yet active",
            error_code="COUPON_EXPIRED",
            extra=dict(COUPON_REJECTED)
        )


class ThresholdNotMetException(BadRequestException):
    """Cart value below the coupon minimum"""

    def __init__(self, minimum_cart_value: float):
        super().__init__(
            detail=f"Minimum cart value of {minimum_cart_value:.2f} required for this coupon",
            error_code="THRESHOLD_NOT_MET",
            extra={**COUPON_REJECTED, "minimumCartValue": minimum_cart_value}
        )


class UsageLimitExhaustedException(ConflictException):
    """Coupon has no redemptions left"""

    def __init__(self):
        super().__init__(
            detail="This coupon has reached its usage limit",
            error_code="LIMIT_EXHAUSTED",
            extra=dict(COUPON_REJECTED)
        )


class GiftCardExpiredException(BadRequestException):
    """Gift card retired or past its expiry date"""

    def __init__(self, detail: str = "This gift card has expired or is inactive"):
        super().__init__(detail=detail, error_code="GIFT_CARD_EXPIRED")


class InsufficientBalanceException(BadRequestException):
    """Redemption amount exceeds the gift card balance"""

    def __init__(self, balance: float):
        super().__init__(
            detail=f"Insufficient gift card balance. Only {balance:.2f} available.",
            error_code="INSUFFICIENT_BALANCE",
            extra={"balance": balance}
        )


def _error_body(message: str, code: Optional[str], extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"message": message, "code": code}
    if extra:
        body.update(extra)
    return body


async def storefront_exception_handler(request: Request, exc: StorefrontException) -> JSONResponse:
    """Render application exceptions as {message, code, ...}"""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, exc.error_code, exc.extra),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework-raised HTTP errors (404 routes, 405, ...)"""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), "HTTP_ERROR"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and query parameters"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(message, "VALIDATION_ERROR", {"errors": jsonable_errors(errors)}),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Storage failures and bugs surface as a generic 500"""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", "INTERNAL_ERROR"),
    )


def jsonable_errors(errors: list) -> list:
    """Strip non-serialisable context from pydantic errors"""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in errors
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all error handlers to the application"""
    app.add_exception_handler(StorefrontException, storefront_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
