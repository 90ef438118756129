"""Item store: the single surface the front door talks to.

Wires the upstream gateway, the item cache, the batch fetcher and the tree
walker together. Ranked lists are never cached; they are read live on every
call.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from hnstore.schemas.items import Item, RecentChanges
from hnstore.services import repository
from hnstore.services.cache import ItemCache, MemoryCacheBackend, RedisCacheBackend
from hnstore.services.durable import DurableCopyWriter
from hnstore.services.fetcher import ItemFetcher
from hnstore.services.hn_client import HNClient, get_hn_client
from hnstore.services.traversal import TreeWalker
from hnstore.settings import Settings, get_settings

logger = logging.getLogger("uvicorn.error")


class ItemStore:
    def __init__(
        self,
        gateway: HNClient,
        cache: ItemCache,
        fetcher: ItemFetcher,
        walker: TreeWalker,
    ) -> None:
        self.gateway = gateway
        self.cache = cache
        self.fetcher = fetcher
        self.walker = walker

    @classmethod
    def from_settings(cls, gateway: HNClient, settings: Settings) -> "ItemStore":
        if settings.cache_backend == "redis":
            backend = RedisCacheBackend(ttl_seconds=settings.item_ttl_seconds)
        else:
            backend = MemoryCacheBackend(max_entries=settings.cache_max_entries)
        source = DurableCopyWriter(gateway) if settings.durable_copies_enabled else gateway
        cache = ItemCache(source, backend=backend, ttl_seconds=settings.item_ttl_seconds)
        fetcher = ItemFetcher(cache, concurrency=settings.fetch_concurrency)
        walker = TreeWalker(fetcher, cap=settings.traversal_cap)
        return cls(gateway=gateway, cache=cache, fetcher=fetcher, walker=walker)

    # Items

    async def get(self, item_id: int) -> Item | None:
        return await self.cache.get(item_id)

    async def get_many(self, item_ids: list[int]) -> dict[int, Item]:
        return await self.fetcher.get_many(item_ids)

    async def get_ordered(self, item_ids: list[int]) -> list[Item]:
        """get_many re-projected onto the requested order, absent ids skipped."""
        items = await self.get_many(item_ids)
        return [items[i] for i in dict.fromkeys(item_ids) if i in items]

    async def children(self, item_id: int) -> list[Item] | None:
        """Direct replies in upstream order, or None when the item itself does not resolve."""
        item = await self.get(item_id)
        if item is None:
            return None
        return await self.get_ordered(item.child_ids())

    async def descendants(self, item_id: int) -> dict[int, Item]:
        return await self.walker.descendants(item_id)

    async def ancestors(self, item_id: int) -> dict[int, Item]:
        return await self.walker.ancestors(item_id)

    async def get_and_store_many(self, session: AsyncSession, item_ids: list[int]) -> dict[int, Item]:
        """Fetch items and upsert durable copies in the caller's transaction."""
        items = await self.get_many(item_ids)
        await repository.put_items(session, items.values())
        return items

    # Live lists

    async def get_list(self, name: str) -> list[int]:
        return await self.gateway.fetch_list(name)

    async def get_top_stories(self) -> list[int]:
        return await self.gateway.fetch_list("top")

    async def get_new_stories(self) -> list[int]:
        return await self.gateway.fetch_list("new")

    async def get_best_stories(self) -> list[int]:
        return await self.gateway.fetch_list("best")

    async def get_ask_stories(self) -> list[int]:
        return await self.gateway.fetch_list("ask")

    async def get_show_stories(self) -> list[int]:
        return await self.gateway.fetch_list("show")

    async def get_job_stories(self) -> list[int]:
        return await self.gateway.fetch_list("job")

    async def get_updates(self) -> RecentChanges:
        return await self.gateway.fetch_updates()

    async def get_max_item_id(self) -> int:
        return await self.gateway.fetch_max_id()

    async def evict_recent_changes(self) -> int:
        """Invalidate cache entries for items the upstream reports as changed."""
        updates = await self.get_updates()
        evicted = await self.cache.invalidate(updates.items)
        logger.info(f"Evicted {evicted} recently changed items from the cache")
        return evicted


# Singleton store instance
_store: ItemStore | None = None


def get_item_store() -> ItemStore:
    """Get the process-wide item store, built from settings on first use."""
    global _store
    if _store is None:
        _store = ItemStore.from_settings(get_hn_client(), get_settings())
    return _store


def reset_item_store() -> None:
    """Forget the singleton (shutdown and tests)."""
    global _store
    _store = None
