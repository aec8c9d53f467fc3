"""JWT handling for subjects issued by the identity provider."""

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from jose import jwt

from storefront.core.config import settings
from storefront.models.role import RoleType


def create_access_token(
    subject_id: str,
    roles: Iterable[RoleType | str],
    expires_delta: timedelta | None = None,
) -> str:
    """Tokens carry roles only. Permissions are derived per request from the
    current role map, so a role change takes effect on the next call."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {
        "sub": subject_id,
        "roles": sorted({RoleType(r).value for r in roles}),
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode and validate JWT. Raises JWTError on failure."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
