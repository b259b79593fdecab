from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
import structlog

from delivery_api.config import settings

logger = structlog.get_logger()

# ---------- JWT key loading ----------

_private_key: Optional[str] = None
_public_key: Optional[str] = None


def _load_private_key() -> str:
    global _private_key
    if _private_key is None:
        with open(settings.JWT_PRIVATE_KEY_PATH, "r") as f:
            _private_key = f.read()
    return _private_key


def _load_public_key() -> str:
    global _public_key
    if _public_key is None:
        with open(settings.JWT_PUBLIC_KEY_PATH, "r") as f:
            _public_key = f.read()
    return _public_key


def _signing_key() -> str:
    if settings.uses_asymmetric_jwt:
        return _load_private_key()
    return settings.JWT_SECRET


def _verification_key() -> str:
    if settings.uses_asymmetric_jwt:
        return _load_public_key()
    return settings.JWT_SECRET


# ---------- token generation ----------

def create_access_token(
    user_id: int,
    company_id: Optional[int],
    user_type: str,
    full_name: Optional[str] = None,
) -> str:
    """Issue a token shaped like the auth service's. Used by seeds and tests."""
    now = datetime.now(timezone.utc)
    claims = {
        "id": user_id,
        "user_id": user_id,
        "user_type": user_type,
        "company_id": company_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        "type": "access",
    }
    if full_name:
        claims["full_name"] = full_name
    return jwt.encode(claims, _signing_key(), algorithm=settings.JWT_ALGORITHM)


# ---------- token verification ----------

def decode_token(token: str) -> dict:
    """Decode and verify a JWT token. Raises JWTError on failure."""
    return jwt.decode(token, _verification_key(), algorithms=[settings.JWT_ALGORITHM])


def verify_access_token(token: str) -> dict:
    """Verify an access token and return its claims.

    Tokens from the auth service carry no ``type`` claim; only an explicit
    non-access type is rejected.
    """
    payload = decode_token(token)
    if payload.get("type", "access") != "access":
        raise JWTError("Not an access token")
    if "id" not in payload or "user_type" not in payload:
        raise JWTError("Token missing identity claims")
    return payload
