"""Bounded-concurrency batch lookups on top of the item cache.

get_many turns N ids into N single-item cache lookups, at most `concurrency`
in flight at once. The result maps id -> item for ids that resolved; absent
ids and ids whose lookup failed transiently are left out. Callers needing the
original order re-project: [items[i] for i in ids if i in items].
"""

import asyncio
import logging
from collections.abc import Iterable

from hnstore.schemas.items import Item
from hnstore.services.cache import ItemCache
from hnstore.services.hn_client import UpstreamError

logger = logging.getLogger("uvicorn.error")

DEFAULT_CONCURRENCY = 50


class ItemFetcher:
    def __init__(self, cache: ItemCache, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.cache = cache
        self.concurrency = concurrency

    async def get_many(self, item_ids: Iterable[int]) -> dict[int, Item]:
        unique_ids = list(dict.fromkeys(item_ids))
        if not unique_ids:
            return {}

        semaphore = asyncio.Semaphore(self.concurrency)
        failed: list[int] = []

        async def _one(item_id: int) -> tuple[int, Item | None]:
            async with semaphore:
                try:
                    return item_id, await self.cache.get(item_id)
                except UpstreamError as e:
                    failed.append(item_id)
                    logger.debug(f"Dropping item {item_id} from batch: {e}")
                    return item_id, None

        results = await asyncio.gather(*(_one(item_id) for item_id in unique_ids))

        if failed:
            logger.warning(
                f"get_many: {len(failed)}/{len(unique_ids)} lookups failed upstream, returning partial result"
            )
        return {item_id: item for item_id, item in results if item is not None}
