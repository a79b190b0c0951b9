"""JWT access token encoding and verification for staff actors."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from frontdesk.config import settings


def create_access_token(
    staff_id: str,
    name: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a short-lived access token for a staff member.

    Tokens are normally issued by the identity provider; this exists for
    scripts and tests that need to act as a named staff member.

    Args:
        staff_id: Stable identifier stored in ``sub``.
        name: Display name stored in ``name`` and stamped onto bookings.
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))
    to_encode = {"sub": staff_id, "name": name, "exp": expire, "iat": now, "type": "access"}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
