"""
Shared fixtures: a throwaway SQLite database, a fake Google verifier and
a ``TestClient`` wired to both.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, Optional

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from auth.errors import InvalidTokenError
from auth.firebase import FederatedIdentity
from auth.service import AuthService
from auth.tokens import TokenService
from config.settings import Settings
from database.models import User
from database.session import Database
from database.users import UserStore

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class FakeVerifier:
    """Accepts only the ID tokens it was given."""

    def __init__(self, identities: Optional[Dict[str, FederatedIdentity]] = None) -> None:
        self.identities = dict(identities or {})
        self.calls = 0

    async def verify(self, id_token: Optional[str]) -> FederatedIdentity:
        self.calls += 1
        identity = self.identities.get(id_token) if id_token else None
        if identity is None:
            raise InvalidTokenError()
        return identity


class UnreachableDatabase:
    """Stands in for a database whose server refuses connections."""

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    @asynccontextmanager
    async def session(self):
        raise ConnectionRefusedError(111, "Connect call failed ('127.0.0.1', 5432)")
        yield


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        cors_origins=["http://localhost:3000"],
        frontend_url="https://app.example.com",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


async def count_users(database: Database, username: Optional[str] = None) -> int:
    stmt = select(func.count()).select_from(User)
    if username is not None:
        stmt = stmt.where(User.username == username)
    async with database.session() as session:
        return (await session.execute(stmt)).scalar_one()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier(
        {
            "google-token-ada": FederatedIdentity(email="ada@example.com", name="Ada Lovelace"),
            "google-token-ada-2": FederatedIdentity(email="ada@example.com", name="Ada L."),
        }
    )


@pytest_asyncio.fixture
async def database(settings: Settings):
    db = Database(settings.database_url)
    await db.connect()
    yield db
    await db.disconnect()


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture
def service(database: Database, tokens: TokenService, verifier: FakeVerifier) -> AuthService:
    return AuthService(
        users=UserStore(database),
        tokens=tokens,
        verifier=verifier,
        bcrypt_rounds=4,
    )


@pytest.fixture
def client(settings: Settings, verifier: FakeVerifier):
    from main import create_app

    app = create_app(settings, verifier=verifier)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def outage_client(settings: Settings, verifier: FakeVerifier):
    from main import create_app

    app = create_app(settings, database=UnreachableDatabase(), verifier=verifier)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
