"""Root test fixtures shared across all test types.

Services are wired against the in-memory document store driven by a
controllable clock. Redis-backed tests use fakeredis.
"""

import os

# Set APP_ENV to testing before any gallery imports
os.environ.setdefault("APP_ENV", "testing")
# Cheap Argon2 parameters keep hashing fast in tests
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import AsyncGenerator

import pytest
from fakeredis import aioredis as fakeredis_aio
from redis.asyncio import Redis

from src.gallery.context import AppContext
from src.gallery.core import redis as redis_core
from src.gallery.core.config import get_settings
from src.gallery.core.storage import InMemoryStorage
from src.gallery.main import Gallery
from src.gallery.store import InMemoryDocumentStore
from tests.helpers import FakeClock

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


# --- Clock and store ---


@pytest.fixture
def clock() -> FakeClock:
    """Shared clock for store timestamps and the rate limiter."""
    return FakeClock()


@pytest.fixture
async def store(clock: FakeClock) -> AsyncGenerator[InMemoryDocumentStore]:
    store = InMemoryDocumentStore(clock=clock)
    yield store
    await store.close()


# --- Wired gallery ---


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage({"hackathon_session_id": "session-a"})


@pytest.fixture
def gallery(store: InMemoryDocumentStore, clock: FakeClock, storage: InMemoryStorage) -> Gallery:
    """All services wired against the in-memory store, session "session-a"."""
    return Gallery(
        get_settings(),
        store,
        AppContext.load(storage),
        rate_limit_clock=clock.ms,
    )


# --- Redis Test Fixtures (shared) ---


@pytest.fixture
async def fake_redis() -> AsyncGenerator[Redis]:
    """Provides a fakeredis client for testing.

    Returns an in-memory Redis implementation that behaves like
    a real Redis server but doesn't require external dependencies.
    """
    client = fakeredis_aio.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
async def mock_redis(fake_redis: Redis, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Redis]:
    """Patches get_redis() to return the fakeredis client."""
    redis_core.reset_redis_state()

    async def _get_fake_redis(*args, **kwargs) -> Redis:
        return fake_redis

    monkeypatch.setattr("src.gallery.main.get_redis", _get_fake_redis)
    yield fake_redis
    redis_core.reset_redis_state()
