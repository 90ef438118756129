"""Redis store for the shared item cache.

Handles:
- Connection lifecycle
- Generic get/set/delete with TTL
- JSON helpers for item cache entries

TTL policies:
- Item entries: ITEM_TTL_SECONDS (default 5 minutes). The staleness check is
  still evaluated on read from the stored fetch timestamp; the Redis expiry
  only reclaims memory for ids nobody asks for again.
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from hnstore.settings import get_settings

# Key prefixes
PREFIX_ITEM = "item:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis(redis_url: str | None = None) -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        redis_url or settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Validate connectivity early (especially for `rediss://` in production).
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Generic cache operations
# ============================================================


async def cache_get(key: str) -> str | None:
    """Get value from cache.

    Args:
        key: Cache key.

    Returns:
        Cached value or None if not found.
    """
    return await _get_redis().get(key)


async def cache_set(key: str, value: str, ttl: int) -> None:
    """Set value in cache with TTL.

    Args:
        key: Cache key.
        value: Value to cache.
        ttl: Time-to-live in seconds.
    """
    await _get_redis().setex(key, ttl, value)


async def cache_delete(key: str) -> None:
    """Delete value from cache.

    Args:
        key: Cache key.
    """
    await _get_redis().delete(key)


async def cache_get_json(key: str) -> dict[str, Any] | None:
    """Get JSON value from cache.

    Args:
        key: Cache key.

    Returns:
        Parsed JSON dict or None if not found.
    """
    value = await cache_get(key)
    if value:
        return json.loads(value)
    return None


async def cache_set_json(key: str, value: dict[str, Any], ttl: int) -> None:
    """Set JSON value in cache.

    Args:
        key: Cache key.
        value: Dict to cache as JSON.
        ttl: Time-to-live in seconds.
    """
    await cache_set(key, json.dumps(value), ttl)


# ============================================================
# Item cache entries
# ============================================================


async def get_item_cache(item_id: int) -> dict[str, Any] | None:
    """Get cached item entry payload ({"item": ..., "fetched_at": ...})."""
    return await cache_get_json(f"{PREFIX_ITEM}{item_id}")


async def set_item_cache(item_id: int, payload: dict[str, Any], ttl: int) -> None:
    """Cache an item entry payload."""
    await cache_set_json(f"{PREFIX_ITEM}{item_id}", payload, ttl)


async def delete_item_cache(item_id: int) -> None:
    """Drop a cached item entry."""
    await cache_delete(f"{PREFIX_ITEM}{item_id}")
