"""Test fixtures — a throwaway SQLite database and app per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own SQLite file under tmp_path, with the schema
   created from the ORM models.
2. The app is built with create_app(test_settings), so the signing
   secret, bcrypt cost and upload directory are test values.
3. get_db is overridden to hand out sessions bound to the test database,
   one per request, exactly as production does.

Auth is never mocked: tests register and log in through the real routes.

The ITEMVAULT_* env vars must be set before any itemvault import, because
importing itemvault.config builds the settings singleton and refuses to
start without a database URL and a JWT secret.
"""

import os

os.environ.setdefault("ITEMVAULT_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ITEMVAULT_JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("ITEMVAULT_BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from itemvault.config import Settings
from itemvault.db.engine import get_db
from itemvault.db.models import Base
from itemvault.main import create_app

TEST_SECRET = "test-secret-not-for-production"
DEFAULT_PASSWORD = "secret1"


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'itemvault.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        upload_dir=str(tmp_path / "uploads"),
        max_upload_bytes=1024,
    )


@pytest_asyncio.fixture()
async def db_engine(test_settings):
    engine = create_async_engine(test_settings.database_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def app(test_settings, session_factory):
    application = create_app(test_settings)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def login(client):
    """Register + log in through the API; returns Authorization headers.

    Usage:
        headers = await login("alice")
    """

    async def _login(username: str, password: str = DEFAULT_PASSWORD) -> dict:
        r = await client.post(
            "/register", json={"username": username, "password": password}
        )
        assert r.status_code == 201, r.text
        r = await client.post(
            "/login", json={"username": username, "password": password}
        )
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}

    return _login
