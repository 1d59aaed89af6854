"""
JWT creation and verification.

Tokens are HS256 JWTs carrying the user id under the ``id`` claim.
Secret and lifetime come from ``config.jwt_secret`` / ``config.jwt_expiry_seconds``
(env vars: ``JWT_SECRET``, ``JWT_EXPIRY_SECONDS``).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from jose import JWTError, jwt

from config.settings import config


def create_token(user_id: str) -> str:
    """Create a signed token containing ``user_id`` and expiry."""
    now = datetime.now(timezone.utc)
    claims = {
        "id": user_id,
        "iat": now,
        "exp": now + timedelta(seconds=config.jwt_expiry_seconds),
    }
    return jwt.encode(claims, config.jwt_secret, algorithm=config.jwt_algorithm)


def verify_token(token: str) -> str:
    """
    Verify token and return the user id.

    Raises ``HTTPException(401)`` on invalid or expired tokens.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except JWTError:
        raise credentials_exception

    user_id = payload.get("id")
    if not isinstance(user_id, str) or not user_id:
        raise credentials_exception
    return user_id
