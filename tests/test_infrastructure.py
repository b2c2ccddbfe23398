"""Storage failures, health check and table recreation."""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from socialhub.db.init_db import get_db
from socialhub.db.recreate_tables import recreate_tables
from socialhub.main import app
from socialhub.models.user import User


class BrokenSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.fixture
def broken_db():
    async def override_get_db():
        yield BrokenSession()

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.pop(get_db, None)


async def test_storage_failure_is_a_generic_500(client, broken_db, caplog):
    res = await client.get("/users/1/posts")

    assert res.status_code == 500
    assert res.json() == {"error": "A server error occurred."}
    assert "connection refused" not in res.text
    assert any("Database error" in r.getMessage() for r in caplog.records)


async def test_storage_failure_on_profile(client, broken_db):
    res = await client.get("/users/1")
    assert res.status_code == 500
    assert set(res.json()) == {"error"}


async def test_health_ok(client):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json()["database"] == "ok"


async def test_health_reports_unreachable_database(client, broken_db):
    res = await client.get("/health")
    assert res.status_code == 503


async def test_recreate_tables_wipes_data(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'recreate.db'}"
    await recreate_tables(url)

    engine = create_async_engine(url)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        session.add(User(username="temp", email="temp@example.com", hashed_password="x"))
        await session.commit()

    await recreate_tables(url)

    async with session_factory() as session:
        users = (await session.execute(select(User))).scalars().all()
    await engine.dispose()
    assert users == []
