"""JWT helpers (shared secret, HS256 by default)."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from pizzeria.config import get_settings
from pizzeria.errors import AuthenticationError


def create_access_token(
    user_id: UUID,
    role: str,
    expires_minutes: int | None = None,
) -> str:
    """Issue a bearer token for a user."""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    claims = {"sub": str(user_id), "role": role, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and verify a bearer token, raising AuthenticationError on failure."""
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise AuthenticationError(f"Invalid or expired token: {exc}") from exc

    if "sub" not in claims:
        raise AuthenticationError("Token is missing the subject claim")
    return claims
