"""
Security utilities for authentication and authorization
Verifies JWT tokens issued by the storefront login service and
checks the admin claim for admin-only routes
"""

from datetime import timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import secrets
import string
import logging

from .config import settings
from .exceptions import UnauthorizedException, ForbiddenException
from storefront.utils.helpers import utcnow

logger = logging.getLogger(__name__)

# Tokens usually arrive in the session cookie; the header is accepted for API clients
security = HTTPBearer(auto_error=False)


class SecurityUtils:
    """Security utility functions"""

    @staticmethod
    def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """Create JWT access token"""
        to_encode = data.copy()
        expire = utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """Decode and validate JWT token"""
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError as e:
            logger.warning(f"Rejected token: {e}")
            raise UnauthorizedException("Authentication failed")

    @staticmethod
    def generate_code(length: int = 8) -> str:
        """Generate alphanumeric redemption code"""
        characters = string.ascii_uppercase + string.digits
        return ''.join(secrets.choice(characters) for _ in range(length))


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token and credentials:
        token = credentials.credentials
    return token


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Dict[str, Any]:
    """Extract and validate user from JWT token"""
    token = _extract_token(request, credentials)
    if not token:
        raise UnauthorizedException("Authentication required")

    payload = SecurityUtils.decode_token(token)

    return {
        "id": payload.get("sub") or payload.get("id"),
        "email": payload.get("email"),
        "is_admin": bool(payload.get("isAdmin", False)),
    }


async def require_admin(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Allow only tokens carrying a truthy isAdmin claim"""
    if not current_user.get("is_admin"):
        raise ForbiddenException("Admin access required")
    return current_user
