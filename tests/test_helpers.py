"""
Tests for the user data-access helpers against a mocked AsyncSession.
"""

import uuid

import pytest
from unittest.mock import MagicMock

from database.helpers import (
    create_user,
    get_user_by_email,
    get_user_by_id,
    normalize_email,
)
from database.models import User


def _result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def test_normalize_email():
    assert normalize_email("  Ada@Example.COM ") == "ada@example.com"


class TestLookups:
    @pytest.mark.asyncio
    async def test_get_user_by_email_found(self, fake_session):
        user = User(id=uuid.uuid4(), name="Ada", email="ada@example.com", password_hash="x")
        fake_session.execute.return_value = _result(user)

        found = await get_user_by_email(fake_session, "ADA@example.com")

        assert found is user
        statement = fake_session.execute.await_args.args[0]
        assert "ada@example.com" in statement.compile().params.values()

    @pytest.mark.asyncio
    async def test_get_user_by_email_missing(self, fake_session):
        fake_session.execute.return_value = _result(None)

        assert await get_user_by_email(fake_session, "nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_get_user_by_id_malformed(self, fake_session):
        assert await get_user_by_id(fake_session, "not-a-uuid") is None
        fake_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_user_by_id_found(self, fake_session):
        uid = uuid.uuid4()
        user = User(id=uid, name="Ada", email="ada@example.com", password_hash="x")
        fake_session.execute.return_value = _result(user)

        assert await get_user_by_id(fake_session, str(uid)) is user


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_adds_and_flushes(self, fake_session):
        user = await create_user(
            fake_session,
            name="Ada",
            email=" Ada@Example.com",
            password_hash="$2b$04$hash",
            terms_accepted=True,
        )

        fake_session.add.assert_called_once_with(user)
        fake_session.flush.assert_awaited_once()
        assert isinstance(user.id, uuid.UUID)
        assert user.email == "ada@example.com"
        assert user.password_hash == "$2b$04$hash"
        assert user.terms_accepted is True
        assert user.created_at is not None
