"""Password hashing and access/refresh token handling."""

import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta
from typing import Literal

import jwt

from techfeed.config import get_settings

TokenType = Literal["access", "refresh"]

ALGORITHM = "HS256"
PBKDF2_ITERATIONS = 120_000


def hash_password(password: str) -> str:
    """Hash a password as `pbkdf2_sha256$<iterations>$<salt>$<digest>`."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        scheme, iterations, salt, expected = password_hash.split("$")
        rounds = int(iterations)
    except ValueError:
        return False
    if scheme != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), rounds)
    return hmac.compare_digest(digest.hex(), expected)


def create_token(user_id: int, token_type: TokenType) -> str:
    """Sign a token whose subject is the user id."""
    settings = get_settings()
    if token_type == "access":
        lifetime = timedelta(minutes=settings.jwt_access_expire_minutes)
    else:
        lifetime = timedelta(days=settings.jwt_refresh_expire_days)

    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
        # Keeps tokens issued within the same second distinct
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def verify_token(token: str, token_type: TokenType) -> int | None:
    """Return the user id for a valid token of the given type, else None."""
    try:
        payload = jwt.decode(token, get_settings().jwt_secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None

    if payload.get("type") != token_type:
        return None
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None
