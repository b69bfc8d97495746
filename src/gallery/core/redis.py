"""Shared Redis client for the Redis document store.

The client is created lazily and reused. A missing REDIS_URL or an
unreachable server yields None, and the gallery runs on the in-memory store
instead. One failed attempt is not retried until close_redis() resets it.
"""

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from src.gallery.core.config import Settings, get_settings
from src.gallery.core.logging import get_logger

logger = get_logger(__name__)

_pool: ConnectionPool | None = None
_redis: Redis | None = None
_connection_attempted: bool = False


async def _discard() -> None:
    global _pool, _redis
    if _redis is not None:
        await _redis.aclose()
    if _pool is not None:
        await _pool.disconnect()
    _redis = None
    _pool = None


async def get_redis(settings: Settings | None = None) -> Redis | None:
    """Return the shared client, or None when Redis is unavailable.

    Args:
        settings: Defaults to get_settings(); only read on the first attempt.
    """
    global _pool, _redis, _connection_attempted

    if _redis is not None:
        return _redis
    if _connection_attempted:
        return None

    _connection_attempted = True
    settings = settings or get_settings()
    if not settings.redis_url:
        logger.info("Redis not configured (REDIS_URL not set)")
        return None

    try:
        _pool = ConnectionPool.from_url(
            settings.redis_url,
            max_connections=settings.redis_pool_size,
            socket_connect_timeout=settings.redis_connect_timeout_seconds,
            decode_responses=True,
        )
        _redis = Redis(connection_pool=_pool)
        await _redis.ping()  # type: ignore[misc]
    except (RedisError, OSError) as e:
        logger.warning("Redis connection failed, falling back to in-memory store", error=str(e))
        await _discard()
        return None

    logger.info("Redis connected", pool_size=settings.redis_pool_size)
    return _redis


async def close_redis() -> None:
    """Close the shared client and allow a fresh connection attempt."""
    global _connection_attempted
    if _redis is not None:
        logger.info("Redis connection closed")
    await _discard()
    _connection_attempted = False


def reset_redis_state() -> None:
    """Forget the shared client without closing it (tests)."""
    global _pool, _redis, _connection_attempted
    _redis = None
    _pool = None
    _connection_attempted = False
