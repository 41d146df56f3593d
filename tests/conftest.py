"""
Shared fixtures: a throwaway SQLite database per test, users, and an HTTP client.
"""

import os

os.environ.setdefault("SECRET", "test-secret-do-not-use-in-production-4f1c")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("EMAIL_TRANSPORT", "dummy")

import pytest
from fastapi_users.password import PasswordHelper
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from qaboard import models  # noqa: F401
from qaboard.database import Base, enable_sqlite_foreign_keys, get_db
from qaboard.main import app
from qaboard.models import User, UserRole
from qaboard.services.policy import Identity
from qaboard.users import get_jwt_strategy

PASSWORD = "correct-horse-battery"
HASHED_PASSWORD = PasswordHelper().hash(PASSWORD)


@pytest.fixture
async def engine(tmp_path):
    # A file database so concurrent sessions get their own connections.
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'qaboard.db'}")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(session_maker):
    """Factory creating a persisted user and returning it."""
    counter = {"n": 0}

    async def _make_user(name=None, role=UserRole.member, blocked=False, reason=None):
        counter["n"] += 1
        name = name or f"user{counter['n']}"
        async with session_maker() as session:
            user = User(
                name=name,
                email=f"{name}@example.com",
                hashed_password=HASHED_PASSWORD,
                role=role,
                is_blocked=blocked,
                blocked_reason=reason,
                is_active=True,
                is_verified=True,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make_user


@pytest.fixture
async def owner(make_user):
    return await make_user("owner")


@pytest.fixture
async def other(make_user):
    return await make_user("other")


@pytest.fixture
async def admin(make_user):
    return await make_user("admin", role=UserRole.admin)


def identity_of(user) -> Identity:
    return Identity.from_user(user)


@pytest.fixture
async def client(session_maker):
    async def _get_test_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def auth_headers(user) -> dict:
    token = await get_jwt_strategy().write_token(user)
    return {"Authorization": f"Bearer {token}"}


async def raise_operational_error(*args, **kwargs):
    """Stand-in for a session method that loses its connection mid-transaction."""
    raise OperationalError("statement", {}, Exception("database is locked"))
