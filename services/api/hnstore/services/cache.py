"""Read-through item cache.

Flow for get(item_id):
1. Read the entry from the backend
2. Fresh (age < TTL) -> return it, no upstream call
3. Otherwise fetch from the upstream gateway:
   - found     -> store (item, now) and return it
   - not found -> drop any stale entry and return None
   - transient -> raise UpstreamError (no retry, no stale fallback)

Eviction is lazy: entries are only replaced or removed when read. Concurrent
misses for the same id are not coalesced; the fetcher's concurrency ceiling is
the throttle. Backends expose atomic get/set/delete only.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

import redis.exceptions

from hnstore.schemas.items import Item, item_to_json, parse_item
from hnstore.stores.redis import delete_item_cache, get_item_cache, set_item_cache

logger = logging.getLogger("uvicorn.error")

DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class CacheEntry:
    item: Item
    fetched_at: float


class ItemGateway(Protocol):
    async def fetch_item(self, item_id: int) -> Item | None: ...


class CacheBackend(Protocol):
    """Concurrent-safe mapping item_id -> CacheEntry."""

    async def get(self, item_id: int) -> CacheEntry | None: ...

    async def set(self, item_id: int, entry: CacheEntry) -> None: ...

    async def delete(self, item_id: int) -> None: ...


class MemoryCacheBackend:
    """In-process backend.

    Unbounded by default. With max_entries set, the least recently used entry
    is dropped once the bound is exceeded.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        self._entries: OrderedDict[int, CacheEntry] = OrderedDict()
        self._max_entries = max_entries
        self._lock = asyncio.Lock()

    async def get(self, item_id: int) -> CacheEntry | None:
        async with self._lock:
            entry = self._entries.get(item_id)
            if entry is not None and self._max_entries is not None:
                self._entries.move_to_end(item_id)
            return entry

    async def set(self, item_id: int, entry: CacheEntry) -> None:
        async with self._lock:
            self._entries[item_id] = entry
            self._entries.move_to_end(item_id)
            if self._max_entries is not None:
                while len(self._entries) > self._max_entries:
                    self._entries.popitem(last=False)

    async def delete(self, item_id: int) -> None:
        async with self._lock:
            self._entries.pop(item_id, None)

    def __len__(self) -> int:
        return len(self._entries)


class RedisCacheBackend:
    """Backend shared across processes via Redis.

    Redis failures degrade to a miss (reads) or a skipped write, so an outage
    costs upstream calls rather than errors.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        # Key expiry only reclaims memory; freshness is still checked on read.
        self._expire_seconds = max(1, int(ttl_seconds))

    async def get(self, item_id: int) -> CacheEntry | None:
        try:
            payload = await get_item_cache(item_id)
        except redis.exceptions.RedisError as e:
            logger.warning(f"Redis item cache read failed for {item_id}: {e}")
            return None
        if not payload:
            return None

        item = parse_item(payload.get("item"))
        fetched_at = payload.get("fetched_at")
        if item is None or not isinstance(fetched_at, (int, float)):
            return None
        return CacheEntry(item=item, fetched_at=float(fetched_at))

    async def set(self, item_id: int, entry: CacheEntry) -> None:
        payload = {"item": item_to_json(entry.item), "fetched_at": entry.fetched_at}
        try:
            await set_item_cache(item_id, payload, self._expire_seconds)
        except redis.exceptions.RedisError as e:
            logger.warning(f"Redis item cache write failed for {item_id}: {e}")

    async def delete(self, item_id: int) -> None:
        try:
            await delete_item_cache(item_id)
        except redis.exceptions.RedisError as e:
            logger.warning(f"Redis item cache delete failed for {item_id}: {e}")


class ItemCache:
    """Per-item read-through cache in front of the upstream gateway."""

    def __init__(
        self,
        gateway: ItemGateway,
        backend: CacheBackend | None = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.gateway = gateway
        self.backend = backend if backend is not None else MemoryCacheBackend()
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.fetched_at < self.ttl_seconds

    async def get(self, item_id: int) -> Item | None:
        """Return the item, fetching it if missing or stale.

        Raises:
            UpstreamError: the refresh failed transiently.
        """
        entry = await self.backend.get(item_id)
        if entry is not None and self.is_fresh(entry):
            return entry.item

        logger.debug(f"Item cache MISS for {item_id} (stale={entry is not None})")
        item = await self.gateway.fetch_item(item_id)

        if item is None:
            # Upstream deletions must not linger as cache hits.
            if entry is not None:
                await self.backend.delete(item_id)
            return None

        await self.backend.set(item_id, CacheEntry(item=item, fetched_at=self._clock()))
        return item

    async def invalidate(self, item_ids: Iterable[int]) -> int:
        """Drop entries so the next get refetches. Returns how many ids were given."""
        count = 0
        for item_id in set(item_ids):
            await self.backend.delete(item_id)
            count += 1
        return count
