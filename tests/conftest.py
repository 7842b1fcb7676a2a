"""Test fixtures — a fresh database per test, HTTP client against the app.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own engine with the schema created from the models
2. get_db is overridden so the app uses that test session
3. After the test the schema is dropped and the engine disposed

The database defaults to in-memory SQLite (aiosqlite) so the suite runs
anywhere. Point CHATROOM_TEST_DATABASE_URL at a PostgreSQL database
(postgresql+asyncpg://...) to run the same tests against Postgres.
"""

import os
import uuid

# Must be set before chatroom.config builds its settings singleton.
os.environ.setdefault(
    "CHATROOM_JWT_SECRET", "test-secret-4f6c1e0b9a2d47f3b8e5c7d9a1f0e2b3"
)

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from chatroom.db.engine import get_db
from chatroom.db.models import Base
from chatroom.main import app


TEST_DB_URL = os.environ.get(
    "CHATROOM_TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:"
)


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a freshly created schema."""
    engine_kwargs = {}
    if TEST_DB_URL.startswith("sqlite"):
        # One shared connection, otherwise each checkout sees a new empty :memory: DB
        engine_kwargs["poolclass"] = StaticPool
    engine = create_async_engine(TEST_DB_URL, echo=False, **engine_kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with the app's get_db overridden for testing.

    Learn: Auth is NOT mocked — tests register real users and send
    real Bearer tokens, so the whole hash → token → verify path runs.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def make_user(client):
    """Factory: register a user and return (user, token, auth headers)."""

    async def _make(username=None, email=None, password="password123"):
        suffix = uuid.uuid4().hex[:8]
        r = await client.post(
            "/api/v1/auth/register",
            json={
                "username": username or f"user_{suffix}",
                "email": email or f"user-{suffix}@example.com",
                "password": password,
            },
        )
        assert r.status_code == 201, r.text
        body = r.json()
        headers = {"Authorization": f"Bearer {body['token']}"}
        return body["user"], body["token"], headers

    return _make
