"""Password hashing and JWT token helpers.

Provides:
- hash_password() / verify_password(): passlib pbkdf2_sha256 hashing
- create_access_token(): short-lived JWT carrying the user's role
- create_refresh_token(): long-lived JWT with a ``type=refresh`` claim
- decode_token(): verify signature, expiry and token type
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from portfolio_cms.core.config import settings
from portfolio_cms.core.exceptions import AuthenticationError

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------
def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Unrecognised hash format
        return False


# ---------------------------------------------------------------------------
# Token creation
# ---------------------------------------------------------------------------
def create_access_token(
    subject: str,
    role: str = "user",
    extra: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token with role claim.

    Args:
        subject: User id.
        role: User role (admin, user, guest).
        extra: Additional claims, e.g. ``{"username": ...}``.
        expires_delta: Custom expiry. Defaults to settings.jwt_expiry_minutes.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = dict(extra or {})
    payload.update(
        {
            "sub": subject,
            "role": role,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now
            + (expires_delta or timedelta(minutes=settings.jwt_expiry_minutes)),
        }
    )
    return jwt.encode(
        payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )


def create_refresh_token(
    subject: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a long-lived refresh token (7 days default).

    Returns:
        Encoded JWT string with type=refresh claim.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "type": REFRESH_TOKEN_TYPE,
        "iat": now,
        "exp": now
        + (expires_delta or timedelta(days=settings.jwt_refresh_expiry_days)),
    }
    return jwt.encode(
        payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------
def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> dict:
    """Decode and validate a token.

    Raises:
        AuthenticationError: expired, tampered, or of the wrong type.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid authentication token")

    if payload.get("type") != expected_type:
        raise AuthenticationError(f"Not an {expected_type} token")
    return payload
