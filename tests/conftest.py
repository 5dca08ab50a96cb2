import os
from contextlib import contextmanager
from typing import AsyncGenerator, Optional

# Settings are read at import time by libs.db.config, so defaults go first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser, Role
from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.session import get_async_db
from services.store_service import models as _store_models  # noqa: F401
from services.store_service.app.main import app
from services.store_service.services.fakestore_client import get_fakestore_client
from tests.factories import CategoryFactory, ProductFactory, UserFactory
from tests.stubs import make_fakestore_client

get_settings.cache_clear()

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh schema per test. In-memory SQLite by default; point
    TEST_DATABASE_URL at a scratch Postgres database to run against it.
    """
    engine_kwargs = {}
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine_kwargs = {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    engine = create_async_engine(TEST_DATABASE_URL, **engine_kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient bound to the store app with the DB dependency overridden.
    Requests are anonymous unless wrapped in ``override_auth``.
    """

    async def _get_test_db():
        yield db_session

    app.dependency_overrides[get_async_db] = _get_test_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def fakestore():
    """Mock FakeStore catalog wired into the app; yields (client, transport)."""
    fake_client, transport = make_fakestore_client()
    app.dependency_overrides[get_fakestore_client] = lambda: fake_client
    yield fake_client, transport
    app.dependency_overrides.pop(get_fakestore_client, None)


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def auth_user_for(user) -> AuthUser:
    """Principal for a persisted ``User`` row."""
    return AuthUser(
        user_id=user.id, email=user.email, username=user.username, role=user.role
    )


@contextmanager
def override_auth(target_app, user: Optional[AuthUser]):
    """Authenticate requests as ``user`` inside the block."""
    previous = target_app.dependency_overrides.get(get_current_user)
    target_app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            target_app.dependency_overrides.pop(get_current_user, None)
        else:
            target_app.dependency_overrides[get_current_user] = previous


# ---------------------------------------------------------------------------
# Persisted fixtures
# ---------------------------------------------------------------------------


async def _persist(db, *rows):
    db.add_all(rows)
    await db.commit()
    return rows[0] if len(rows) == 1 else rows


@pytest_asyncio.fixture
async def shopper(db_session):
    return await _persist(db_session, UserFactory.create(role=Role.SHOPPER))


@pytest_asyncio.fixture
async def employee(db_session):
    return await _persist(db_session, UserFactory.create(role=Role.EMPLOYEE))


@pytest_asyncio.fixture
async def admin(db_session):
    return await _persist(db_session, UserFactory.create(role=Role.ADMIN))


@pytest_asyncio.fixture
async def super_admin(db_session):
    return await _persist(db_session, UserFactory.create(role=Role.SUPER_ADMIN))


@pytest_asyncio.fixture
async def category(db_session):
    return await _persist(db_session, CategoryFactory.create(name="Electronics"))


@pytest_asyncio.fixture
async def product(db_session, category):
    return await _persist(
        db_session,
        ProductFactory.create(category_id=category.id, title="Laptop", stock_quantity=5),
    )
