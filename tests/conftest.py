"""Shared fixtures: in-memory SQLite per test, app client with get_db overridden."""

import itertools
import os
from datetime import datetime, timedelta

# Must be set before socialhub.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from socialhub.db.base import Base
from socialhub.db.init_db import get_db
from socialhub.main import app
from socialhub.models.user import User
from socialhub.utils.security import create_access_token, get_password_hash

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """Insert a user. Each call is created one minute after the previous one."""
    counter = itertools.count(1)

    async def _make_user(username=None, **fields):
        n = next(counter)
        username = username or f"user{n}"
        fields.setdefault("email", f"{username}@example.com")
        fields.setdefault("created_at", BASE_TIME + timedelta(minutes=n))
        async with session_factory() as session:
            user = User(
                username=username,
                hashed_password=get_password_hash("password123"),
                **fields,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make_user


@pytest.fixture
def add_rows(session_factory):
    """Insert arbitrary model instances (follows, posts, likes, replies)."""

    async def _add_rows(*rows):
        async with session_factory() as session:
            session.add_all(rows)
            await session.commit()
            for row in rows:
                await session.refresh(row)
        return rows

    return _add_rows


@pytest.fixture
def auth_headers():
    def _auth_headers(user_id, **token_kwargs):
        token = create_access_token({"id": user_id}, **token_kwargs)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers

