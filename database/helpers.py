"""
Database helper functions — user lookup and persistence.

"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return uuid.UUID(value) if isinstance(value, str) else value


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(
        select(User).where(User.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: str | uuid.UUID) -> Optional[User]:
    """Return the user with ``user_id``, or ``None`` for unknown/malformed ids."""
    try:
        uid = _to_uuid(user_id)
    except ValueError:
        return None
    result = await session.execute(select(User).where(User.id == uid))
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession,
    *,
    name: str,
    email: str,
    password_hash: str,
    terms_accepted: Optional[bool],
) -> User:
    """
    Insert a new ``User`` row and flush it so database errors surface here.

    Raises ``sqlalchemy.exc.IntegrityError`` when the email is already taken.
    """
    user = User(
        id=uuid.uuid4(),
        name=name,
        email=normalize_email(email),
        password_hash=password_hash,
        terms_accepted=terms_accepted,
        created_at=datetime.now(timezone.utc),
    )
    session.add(user)
    await session.flush()
    logger.debug("Inserted user row %s", user.id)
    return user
