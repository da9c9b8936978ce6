"""
Bearer-token handling.

Tokens are issued by the account service; this module only decodes them
into an explicit principal. ``create_access_token`` mirrors the issuer's
claim layout and is used by tooling and tests.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi.security import OAuth2PasswordBearer
import jwt
from jwt import PyJWTError

from .core.config import settings
from .core.enums import RoleName
from .core.exceptions import ForbiddenException, UnauthorizedException
from .principal import ParentPrincipal

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a JWT access token (signature and expiry)."""
    payload_raw = jwt.decode(
        token,
        _secret_value(settings.secret_key),
        algorithms=[settings.algorithm],
        options={"verify_aud": False},
    )
    return cast(Dict[str, Any], payload_raw)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: The data to encode in the token (``sub`` is the account id)
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])

    return cast(
        str,
        jwt.encode(to_encode, _secret_value(settings.secret_key), algorithm=settings.algorithm),
    )


def parent_principal_from_token(token: Optional[str]) -> ParentPrincipal:
    """
    Resolve a bearer token into the parent it authenticates.

    Raises:
        UnauthorizedException: Missing, invalid or expired token
        ForbiddenException: Valid token for a non-parent account
    """
    if not token:
        raise UnauthorizedException("Not authenticated", code="NOT_AUTHENTICATED")

    try:
        payload = decode_access_token(token)
    except PyJWTError as e:
        logger.info(f"Rejected access token: {str(e)}")
        raise UnauthorizedException(
            "Could not validate credentials", code="INVALID_TOKEN"
        ) from e

    subject = payload.get("sub")
    try:
        parent_id = int(subject)
    except (TypeError, ValueError):
        raise UnauthorizedException(
            "Could not validate credentials", code="INVALID_TOKEN"
        ) from None

    role = payload.get("role", RoleName.PARENT.value)
    if role != RoleName.PARENT.value:
        raise ForbiddenException(
            "Only parent accounts can manage bookings", code="PARENT_ROLE_REQUIRED"
        )

    return ParentPrincipal(parent_id=parent_id, email=str(payload.get("email") or ""))
