"""
Shared fixtures: an in-memory user store standing in for the database.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from auth.dependencies import db_session
from config.settings import config
from database.helpers import normalize_email
from database.models import User
from main import create_app


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Lowest bcrypt cost keeps hashing in tests fast."""
    monkeypatch.setattr(config, "bcrypt_rounds", 4)
    monkeypatch.setattr(config, "jwt_secret", "tests-secret-key")


@pytest.fixture
def fake_session() -> MagicMock:
    session = MagicMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.execute = AsyncMock()
    return session


class UserStore:
    """Dict-backed replacement for the helpers in ``database.helpers``."""

    def __init__(self) -> None:
        self.users: Dict[str, User] = {}

    async def get_user_by_email(self, session, email):
        return self.users.get(normalize_email(email))

    async def get_user_by_id(self, session, user_id):
        for user in self.users.values():
            if str(user.id) == str(user_id):
                return user
        return None

    async def create_user(self, session, *, name, email, password_hash, terms_accepted):
        email = normalize_email(email)
        if email in self.users:
            raise IntegrityError("INSERT INTO users", {}, Exception("duplicate key"))
        user = User(
            id=uuid.uuid4(),
            name=name,
            email=email,
            password_hash=password_hash,
            terms_accepted=terms_accepted,
            created_at=datetime.now(timezone.utc),
        )
        self.users[email] = user
        return user


@pytest.fixture
def user_store():
    store = UserStore()
    with patch("auth.routes.get_user_by_email", side_effect=store.get_user_by_email), \
         patch("auth.routes.get_user_by_id", side_effect=store.get_user_by_id), \
         patch("auth.routes.create_user", side_effect=store.create_user):
        yield store


@pytest.fixture
def app(fake_session):
    application = create_app()

    async def _override_session():
        yield fake_session

    application.dependency_overrides[db_session] = _override_session
    return application


@pytest.fixture
def client(app, user_store) -> TestClient:
    # No context manager: startup (table creation) is not run against a real DB.
    return TestClient(app)
