"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are read at import time; configure the test environment first.
TEST_ENCRYPTION_KEY = "0123456789abcdef" * 4
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENCRYPTION_KEY"] = TEST_ENCRYPTION_KEY
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-0123456789"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["EMAIL_BACKEND"] = "console"
os.environ["LOG_FILE"] = ""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from app.core.database import Base
from app import models  # noqa: F401
from app.models.user import ROLE_ADMIN, ROLE_MANAGER, ROLE_USER
from app.services.field_cipher import FieldCipher
from app.services.sensitive_fields import SensitiveFieldCodec

from tests.factories import seed_user, auth_headers_for


@pytest.fixture
def cipher() -> FieldCipher:
    return FieldCipher(TEST_ENCRYPTION_KEY)


@pytest.fixture
def codec(cipher: FieldCipher) -> SensitiveFieldCodec:
    return SensitiveFieldCodec(cipher)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """A session on a private in-memory database, for service-level tests."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def client() -> TestClient:
    """
    Test client with a fresh database.

    The app lifespan creates the tables and disposes the engine on exit, so
    every client starts from an empty in-memory database.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def test_user(client: TestClient):
    return seed_user(client, "alice", "alice@example.com", role=ROLE_USER)


@pytest.fixture
def other_user(client: TestClient):
    return seed_user(client, "bob", "bob@example.com", role=ROLE_USER)


@pytest.fixture
def manager_user(client: TestClient):
    return seed_user(client, "manny", "manny@example.com", role=ROLE_MANAGER)


@pytest.fixture
def admin_user(client: TestClient):
    return seed_user(client, "root", "root@example.com", role=ROLE_ADMIN)


@pytest.fixture
def auth_headers(test_user) -> dict:
    return auth_headers_for(test_user)


@pytest.fixture
def other_headers(other_user) -> dict:
    return auth_headers_for(other_user)


@pytest.fixture
def manager_headers(manager_user) -> dict:
    return auth_headers_for(manager_user)


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return auth_headers_for(admin_user)
