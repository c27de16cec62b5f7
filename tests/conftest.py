"""
Pytest configuration and fixtures for the Checkbook permissions service tests.

This module provides:
- Database setup and teardown (fresh in-memory SQLite per test by default)
- Test client fixtures
- User, account and grant fixtures
- Authentication token fixtures
"""

# Set environment variables BEFORE importing anything from checkbook
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-checkbook-permission-tests")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import uuid
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from checkbook.core.config import settings
from checkbook.core.database import (
    create_database_engine,
    create_sessionmaker,
    get_db,
)
from checkbook.main import app
from checkbook.models import Account, AccountPermission, Base, PermissionLevel, User


# ============================================================================
# Database Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a test database engine with all tables.

    In-memory SQLite gives each test an empty database; set TEST_DATABASE_URL
    to a PostgreSQL URL to run the suite against PostgreSQL instead.
    """
    engine = create_database_engine(settings.test_database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for short-lived setup and verification sessions."""
    return create_sessionmaker(test_engine)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Database session for service and repository tests."""
    async with session_factory() as session:
        yield session


# ============================================================================
# FastAPI Client Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async FastAPI test client with database override.

    Every request gets its own session from the test engine.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# Data Fixtures
# ============================================================================
async def create_user(
    session_factory: async_sessionmaker[AsyncSession],
    username: str,
) -> User:
    async with session_factory() as session:
        user = User(
            username=username,
            email=f"{username}@example.com",
            full_name=username.title(),
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


async def create_account(
    session_factory: async_sessionmaker[AsyncSession],
    owner: User,
    name: str = "Household",
    is_shared: bool = True,
) -> Account:
    async with session_factory() as session:
        account = Account(user_id=owner.id, name=name, is_shared=is_shared)
        session.add(account)
        await session.commit()
        await session.refresh(account)
        return account


async def create_grant(
    session_factory: async_sessionmaker[AsyncSession],
    account: Account,
    user: User,
    level: PermissionLevel,
) -> AccountPermission:
    async with session_factory() as session:
        grant = AccountPermission(
            account_id=account.id,
            user_id=user.id,
            permission_level=level,
            created_by=account.user_id,
        )
        session.add(grant)
        await session.commit()
        await session.refresh(grant)
        return grant


@pytest_asyncio.fixture
async def owner(session_factory) -> User:
    """Owner of the test accounts."""
    return await create_user(session_factory, "owner")


@pytest_asyncio.fixture
async def alice(session_factory) -> User:
    return await create_user(session_factory, "alice")


@pytest_asyncio.fixture
async def bob(session_factory) -> User:
    return await create_user(session_factory, "bob")


@pytest_asyncio.fixture
async def shared_account(session_factory, owner) -> Account:
    """A shared account owned by ``owner``."""
    return await create_account(session_factory, owner, is_shared=True)


@pytest_asyncio.fixture
async def private_account(session_factory, owner) -> Account:
    """An unshared account owned by ``owner``."""
    return await create_account(session_factory, owner, name="Private", is_shared=False)


@pytest_asyncio.fixture
async def alice_view_grant(session_factory, shared_account, alice) -> AccountPermission:
    """Alice holds VIEW_ONLY on the shared account."""
    return await create_grant(
        session_factory, shared_account, alice, PermissionLevel.VIEW_ONLY
    )


# ============================================================================
# Authentication Fixtures
# ============================================================================
def make_token(user_id: uuid.UUID, secret: str | None = None) -> str:
    """Sign an access token the way the identity service does."""
    return jwt.encode(
        {"sub": str(user_id), "type": "access"},
        secret or settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user.id)}"}


@pytest.fixture
def headers_for():
    """Build Authorization headers for a user."""
    return auth_headers


@pytest.fixture
def grant_factory(session_factory):
    """Create a grant directly in the store, bypassing the service."""

    async def _grant(account: Account, user: User, level: PermissionLevel):
        return await create_grant(session_factory, account, user, level)

    return _grant


@pytest.fixture
def user_factory(session_factory):
    async def _user(username: str) -> User:
        return await create_user(session_factory, username)

    return _user


@pytest.fixture
def account_factory(session_factory):
    async def _account(owner: User, name: str = "Household", is_shared: bool = True):
        return await create_account(session_factory, owner, name, is_shared)

    return _account
