"""Root conftest - shared test configuration, async DB and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - get_listing_cache overridden with a fresh cache per test

Design Decisions:
    - SQLite in-memory: fast, no external dependency; PostgreSQL-specific
      features are not exercised
"""

import os

# Never point tests at a real database
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from catalog.db.base import Base  # noqa: E402
import catalog.models  # noqa: E402,F401
from catalog.infrastructure.database import get_db  # noqa: E402
from catalog.infrastructure.listing_cache import (  # noqa: E402
    InMemoryListingCache, get_listing_cache,
)
from catalog.main import app  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def listing_cache():
    return InMemoryListingCache(ttl_seconds=300)


@pytest.fixture
async def client(test_session_factory, listing_cache):
    """FastAPI test client with DB and cache dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_listing_cache] = lambda: listing_cache

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
