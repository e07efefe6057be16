"""JWT access tokens."""

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from posture.config import settings

logger = logging.getLogger(__name__)


def roles_for_user_type(user_type: str) -> list[str]:
    return ["admin", "user"] if user_type == "Admin" else ["user"]


def create_access_token(user_id: int, username: str, user_type: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "username": username,
        "roles": roles_for_user_type(user_type),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and verify an access token.

    Raises:
        ValueError: signature, expiry, issuer or audience check failed.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError as exc:
        logger.debug("JWT decode failed: %s", exc)
        raise ValueError(f"Invalid token: {exc}") from exc
