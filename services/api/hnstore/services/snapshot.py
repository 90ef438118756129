"""Rank snapshotter: front-page rank history.

Every interval:
1. Read the live top list and keep the first `limit` ids
2. In one transaction:
   - replace the persisted "top_stories" ordering with the new one
   - for each id, append a rank record only if its 1-based rank differs from
     the latest recorded rank (or none exists)
3. Commit; on failure the transaction rolls back and the cycle is skipped

The history is change-compressed: an item sitting at the same rank for hours
has one record, not one per cycle.
"""

import logging
from collections.abc import Callable, Sequence
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from hnstore.services import repository
from hnstore.services.background import run_periodic
from hnstore.services.item_store import ItemStore
from hnstore.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

DEFAULT_INTERVAL_SECONDS = 60.0
DEFAULT_LIMIT = 100

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


@dataclass
class SnapshotStats:
    listed: int = 0
    rank_records_written: int = 0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def save_rank(
    session: AsyncSession,
    top_ids: Sequence[int],
    ts: datetime,
    *,
    limit: int = DEFAULT_LIMIT,
    key: str = repository.TOP_STORIES_KEY,
) -> SnapshotStats:
    """Persist one snapshot of a ranked list inside the caller's transaction."""
    ids = list(top_ids)[:limit]
    stats = SnapshotStats(listed=len(ids))

    await repository.replace_list_snapshot(session, ids, ts, key=key)

    for position, item_id in enumerate(ids):
        rank = position + 1
        latest = await repository.latest_metric_value(session, item_id)
        if latest is None or latest != rank:
            await repository.insert_rank_record(session, item_id, rank, ts)
            stats.rank_records_written += 1

    return stats


class RankSnapshotter:
    """Background task recording top-list rank changes.

    Owns its handles: the store it reads the list through and the session
    factory it writes with.
    """

    def __init__(
        self,
        store: ItemStore,
        session_factory: SessionFactory = get_session,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        limit: int = DEFAULT_LIMIT,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.limit = limit
        self._clock = clock

    async def run_cycle(self) -> SnapshotStats:
        top_ids = await self.store.get_top_stories()
        ts = self._clock()
        async with self.session_factory() as session:
            stats = await save_rank(session, top_ids, ts, limit=self.limit)
        logger.info(
            f"Rank snapshot saved: {stats.listed} listed, {stats.rank_records_written} rank changes"
        )
        return stats

    async def run(self, *, max_cycles: int | None = None) -> None:
        await run_periodic("rank snapshot", self.interval_seconds, self.run_cycle, max_cycles=max_cycles)
