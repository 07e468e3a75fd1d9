"""
Test infrastructure for the Articles API.

Strategy
--------
- SQLite in-memory via aiosqlite removes the need for a running Postgres
  instance; StaticPool makes every session share the one connection that
  holds the in-memory database.
- The app's get_db dependency is overridden so every request uses the
  test session factory.  The lifespan (real engine, Redis) never runs
  under ASGITransport.
- All tables are created fresh before each test and dropped after.
- The Redis cache is disabled by setting cache._redis = None, so every
  read goes to the database.  The fake_redis fixture swaps in a dict-backed
  client for the cache tests.
- Route handlers commit their own writes, so the get_db override only
  rolls back on error.
- bcrypt runs at its minimum cost so the suite stays fast.
"""
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("CACHE_ENABLED", "false")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from articles_api.cache import cache  # noqa: E402
from articles_api.database import Base, get_db  # noqa: E402
from articles_api.main import app  # noqa: E402
from articles_api.middleware import install_query_counter  # noqa: E402
import articles_api.models  # noqa: E402,F401

# ---------------------------------------------------------------------------
# Test database engine — SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for tests that seed data or assert ORM state directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """An httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    cache._redis = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def login_user(async_client: AsyncClient):
    """
    Factory fixture: register (if needed) and log in a user, returning the
    ``Authorization`` headers plus the login payload.
    """

    async def _login(email: str = "alice@example.com", password: str = "s3cretpass"):
        await async_client.post("/api/v1/register", json={"email": email, "password": password})
        resp = await async_client.post("/api/v1/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        user = resp.json()["user"]
        return {"Authorization": f"Bearer {user['accessToken']}"}, user

    return _login


# ---------------------------------------------------------------------------
# In-memory Redis
# ---------------------------------------------------------------------------

class FakeRedis:
    """Dict-backed stand-in for the redis.asyncio calls the article cache makes."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}

    async def get(self, key: str):
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None):
        self.store[key] = value
        return True

    async def incr(self, key: str) -> int:
        value = int(self.store.get(key, 0)) + 1
        self.store[key] = str(value)
        return value

    async def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        pass


@pytest_asyncio.fixture
async def fake_redis(async_client: AsyncClient):
    """Enable the article cache on top of a FakeRedis for the duration of a test."""
    fake = FakeRedis()
    cache._redis = fake
    yield fake
    cache._redis = None
