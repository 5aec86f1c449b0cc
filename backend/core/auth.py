"""
Bearer token authentication for API endpoints.

Tokens are issued by the upstream identity provider; this module only
verifies them and exposes the caller's identity and roles to the routes.
``create_access_token`` exists for development and tests.
"""

import secrets
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel
import logging

from .config import get_settings
from .exceptions import APIError

logger = logging.getLogger(__name__)

settings = get_settings()

# Roles allowed to act on reservations they do not own
STAFF_ROLES = {"admin", "manager", "host", "staff"}

security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    """Token payload data."""

    user_id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None
    roles: List[str] = []
    token_id: Optional[str] = None


class User(BaseModel):
    """Authenticated caller."""

    id: int
    username: str
    email: Optional[str] = None
    roles: List[str] = []
    is_active: bool = True

    @property
    def is_staff(self) -> bool:
        return bool(set(self.roles) & STAFF_ROLES)


def generate_token_id() -> str:
    """Generate a unique token ID for tracking."""
    return secrets.token_urlsafe(32)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token."""
    to_encode = data.copy()
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.jwt_access_token_expire_minutes
        )

    to_encode.update(
        {
            "exp": expire,
            "type": "access",
            "jti": generate_token_id(),
            "iat": datetime.utcnow(),
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
        }
    )

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = "access") -> Optional[TokenData]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token to verify
        token_type: Expected token type

    Returns:
        TokenData if valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"leeway": settings.jwt_leeway_seconds},
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Token has expired")
        return None
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None

    if payload.get("type") != token_type:
        logger.warning(f"Token type mismatch: expected {token_type}, got {payload.get('type')}")
        return None

    # sub is a string per the JWT standard
    try:
        user_id = int(payload.get("sub"))
    except (ValueError, TypeError):
        return None

    return TokenData(
        user_id=user_id,
        username=payload.get("username"),
        email=payload.get("email"),
        roles=payload.get("roles", []),
        token_id=payload.get("jti"),
    )


def _credentials_exception() -> APIError:
    return APIError(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        error_code="UNAUTHORIZED",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """Resolve the current authenticated user from the bearer token."""
    if not credentials:
        raise _credentials_exception()

    token_data = verify_token(credentials.credentials)
    if token_data is None:
        raise _credentials_exception()

    username = token_data.username or f"user-{token_data.user_id}"
    return User(
        id=token_data.user_id,
        username=username,
        email=token_data.email,
        roles=token_data.roles,
    )


def require_roles(required_roles: List[str]) -> Callable:
    """Enforce that the current user holds at least one of the specified roles."""

    required_set = set(required_roles)

    async def dependency(user: User = Depends(get_current_user)) -> User:
        user_roles = set(user.roles or [])
        if "admin" not in user_roles and not user_roles & required_set:
            raise APIError(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Operation requires one of these roles: {required_roles}",
                error_code="FORBIDDEN",
            )
        return user

    return dependency


# Common role dependencies
require_admin = require_roles(["admin"])
require_manager = require_roles(["admin", "manager"])
require_staff = require_roles(sorted(STAFF_ROLES))
require_payment_callback = require_roles(["admin", "payment_gateway"])
