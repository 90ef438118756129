"""Durable copies of items resolved from the upstream.

DurableCopyWriter sits between the item cache and the upstream gateway: every
item the upstream resolves on a cache miss is upserted into the `items` table
in its own short transaction. Cache hits never reach it.

A failed write is logged and the item is still returned; the durable copy is
a side effect of a read, not part of its contract. Without an initialized
database (local runs, unit tests) the writer is a pass-through.
"""

import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hnstore.schemas.items import Item
from hnstore.services import repository
from hnstore.services.cache import ItemGateway
from hnstore.stores.postgres import db_ready, get_session

logger = logging.getLogger("uvicorn.error")

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class DurableCopyWriter:
    def __init__(
        self,
        gateway: ItemGateway,
        session_factory: SessionFactory = get_session,
        is_ready: Callable[[], bool] = db_ready,
    ) -> None:
        self.gateway = gateway
        self.session_factory = session_factory
        self._is_ready = is_ready

    async def fetch_item(self, item_id: int) -> Item | None:
        item = await self.gateway.fetch_item(item_id)
        if item is None or not self._is_ready():
            return item

        try:
            async with self.session_factory() as session:
                await repository.put_item(session, item)
        except SQLAlchemyError as e:
            logger.warning(f"Durable copy of item {item_id} not written: {e}")
        return item
