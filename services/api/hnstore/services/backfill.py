"""Backfill sweeper: historical ingestion of durable item copies.

Walks item ids upward from a persisted cursor (the highest id already swept)
towards the upstream max id, one batch per step. Storing the batch and
advancing the cursor happen in the same transaction, so a restart resumes
exactly where the last committed batch ended.

Ids that do not resolve, or fail transiently, are skipped; the cursor still
moves past them.
"""

import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from hnstore.services import repository
from hnstore.services.background import run_periodic
from hnstore.services.item_store import ItemStore
from hnstore.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

CURSOR_KEY = "backfill_ptr"
DEFAULT_BATCH_SIZE = 100

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


@dataclass
class BackfillStats:
    start_id: int = 0
    end_id: int = 0
    stored: int = 0
    done: bool = False


async def read_cursor(session: AsyncSession) -> int:
    raw = await repository.get_config(session, CURSOR_KEY)
    if raw is None:
        return 0
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed {CURSOR_KEY}={raw!r}, restarting from 0")
        return 0


class BackfillSweeper:
    def __init__(
        self,
        store: ItemStore,
        session_factory: SessionFactory = get_session,
        batch_size: int = DEFAULT_BATCH_SIZE,
        interval_seconds: float = 5.0,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.store = store
        self.session_factory = session_factory
        self.batch_size = batch_size
        self.interval_seconds = interval_seconds

    async def run_batch(self) -> BackfillStats:
        """Sweep the next batch of ids. `done` is set once the cursor reaches max id."""
        max_id = await self.store.get_max_item_id()

        async with self.session_factory() as session:
            cursor = await read_cursor(session)
            if cursor >= max_id:
                return BackfillStats(start_id=cursor, end_id=cursor, done=True)

            end_id = min(cursor + self.batch_size, max_id)
            ids = list(range(cursor + 1, end_id + 1))
            items = await self.store.get_and_store_many(session, ids)
            await repository.set_config(session, CURSOR_KEY, str(end_id))

        stats = BackfillStats(start_id=cursor + 1, end_id=end_id, stored=len(items), done=end_id >= max_id)
        logger.info(f"Backfill swept {stats.start_id}..{stats.end_id}: stored {stats.stored}/{len(ids)} items")
        return stats

    async def run(self, *, max_cycles: int | None = None) -> None:
        await run_periodic("backfill", self.interval_seconds, self.run_batch, max_cycles=max_cycles)
