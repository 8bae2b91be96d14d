# backend/trailblazers/core/security.py
"""
Password hashing and signed-token helpers.

Passwords are hashed with bcrypt through passlib. Tokens are HS256 JWTs
(PyJWT) carrying a ``purpose`` claim so an ID token can never be replayed
as a password-reset link and vice versa.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

import jwt
from jwt import PyJWTError
from passlib.context import CryptContext

from .config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds
)


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a bcrypt hash.

    Returns:
        bool: True if password matches, False otherwise
    """
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except (ValueError, TypeError) as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    return str(pwd_context.hash(password))


def create_token(
    subject: str,
    purpose: str,
    expires_delta: timedelta,
    claims: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> str:
    issued_at = now or datetime.now(timezone.utc)
    payload: Dict[str, Any] = dict(claims or {})
    payload.update(
        {
            "sub": subject,
            "purpose": purpose,
            "iat": issued_at,
            "exp": issued_at + expires_delta,
        }
    )
    return jwt.encode(
        payload, _secret_value(settings.secret_key), algorithm=settings.jwt_algorithm
    )


def decode_token(token: str, purpose: str) -> Dict[str, Any]:
    """
    Decode and verify a token issued for ``purpose``.

    Raises:
        PyJWTError: if the signature, expiry or purpose is invalid
    """
    payload = jwt.decode(
        token,
        _secret_value(settings.secret_key),
        algorithms=[settings.jwt_algorithm],
    )
    if payload.get("purpose") != purpose:
        raise jwt.InvalidTokenError(f"Token is not valid for {purpose}")
    return cast(Dict[str, Any], payload)


__all__ = [
    "PyJWTError",
    "create_token",
    "decode_token",
    "get_password_hash",
    "pwd_context",
    "verify_password",
]
