"""
Shared fixtures: a throwaway SQLite file per test and cheap bcrypt rounds.
"""

from datetime import timedelta

import pytest
import pytest_asyncio

from auth.password import PasswordHasher
from auth.tokens import TokenIssuer
from config.settings import Settings
from core.identity_service import IdentityService
from database.session import build_engine, build_session_factory, create_schema
from database.user_store import UserStore

TEST_SECRET = "test-secret-0123456789-abcdefghijklmnopqrstuvwxyz-ABCDEFGHIJKLMNOP"


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'users.db'}"


@pytest.fixture
def settings(database_url):
    return Settings(
        database_url=database_url,
        jwt_secret=TEST_SECRET,
        jwt_expiry_seconds=3600,
        bcrypt_rounds=4,
        auto_migrate=True,
    )


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenIssuer(TEST_SECRET, timedelta(hours=1))


@pytest_asyncio.fixture
async def store(database_url):
    engine = build_engine(database_url)
    await create_schema(engine)
    yield UserStore(build_session_factory(engine))
    await engine.dispose()


@pytest_asyncio.fixture
async def service(store, tokens, hasher):
    return IdentityService(store, tokens, hasher)
