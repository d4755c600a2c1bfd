import os

# Must be set before the application modules build their engine and settings.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_KEY", "test-signing-key-0123456789abcdef0123456789")
os.environ.setdefault("JWT_ISSUER", "bookstore-tests")

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bookstore.database import enable_sqlite_foreign_keys, get_session
from bookstore.domain.models import Base
from bookstore.main import app
from bookstore.seed import ADMINISTRATOR, CUSTOMER, ensure_roles, ensure_user

BASE = "http://test"

ADMIN_PASSWORD = "P@ssword1"
CUSTOMER_PASSWORD = "Customer#2"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as s:
        yield s


@pytest.fixture
async def users(session_factory) -> None:
    """Seed an administrator and a customer account."""
    async with session_factory() as s:
        roles = await ensure_roles(s)
        await ensure_user(s, "admin", "admin@bookstore.com", ADMIN_PASSWORD, [roles[ADMINISTRATOR]])
        await ensure_user(s, "customer", "customer@bookstore.com", CUSTOMER_PASSWORD, [roles[CUSTOMER]])
        await s.commit()


@pytest.fixture
async def client(session_factory, users) -> AsyncGenerator[AsyncClient, None]:
    async def _session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = _session_override
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=BASE) as c:
        yield c
    app.dependency_overrides.clear()


async def _login(client: AsyncClient, username: str, password: str) -> dict[str, str]:
    resp = await client.post("/api/users", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
async def admin_headers(client: AsyncClient) -> dict[str, str]:
    return await _login(client, "admin", ADMIN_PASSWORD)


@pytest.fixture
async def customer_headers(client: AsyncClient) -> dict[str, str]:
    return await _login(client, "customer", CUSTOMER_PASSWORD)
