"""Persistent store operations.

All functions take the caller's session so several operations can share one
transaction (the snapshotter writes its list snapshot and rank records
atomically). Nothing here commits; `get_session()` does that on exit.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from hnstore.models import DEFAULT_USER, METRIC_RANK, Bookmark, ConfigEntry, ItemMetric, ItemRecord, ListEntry
from hnstore.schemas.items import Comment, Item, Job, Story, item_to_json, parse_item

TOP_STORIES_KEY = "top_stories"


# ============================================================
# Items
# ============================================================


def item_to_record(item: Item) -> ItemRecord:
    """Denormalize an item into its durable row."""
    record = ItemRecord(
        id=item.id,
        type=item.type,
        original=json.dumps(item_to_json(item)),
        time=item.time,
        parent_id=item.parent_id(),
    )
    if isinstance(item, Story):
        record.descendants = item.descendants
        record.username = item.by
        record.score = item.score
        record.title = item.title
        record.url = item.url
        record.body = item.text
    elif isinstance(item, Comment):
        record.username = item.by
        record.body = item.text
    elif isinstance(item, Job):
        record.username = item.by
        record.score = item.score
        record.title = item.title
        record.url = item.url
        record.body = item.text
    return record


def record_to_item(record: ItemRecord) -> Item | None:
    """Rehydrate an item from the stored upstream JSON."""
    try:
        return parse_item(json.loads(record.original))
    except json.JSONDecodeError:
        return None


async def get_item_record(session: AsyncSession, item_id: int) -> ItemRecord | None:
    return await session.get(ItemRecord, item_id)


async def put_item(session: AsyncSession, item: Item) -> None:
    """Upsert an item by id."""
    await session.merge(item_to_record(item))


async def put_items(session: AsyncSession, items: Iterable[Item]) -> int:
    count = 0
    for item in items:
        await put_item(session, item)
        count += 1
    return count


# ============================================================
# Rank history
# ============================================================


async def latest_metric_value(
    session: AsyncSession,
    item_id: int,
    metric: str = METRIC_RANK,
) -> int | None:
    """Most recent value recorded for (item, metric), or None."""
    result = await session.execute(
        select(ItemMetric.value)
        .where(ItemMetric.item_id == item_id, ItemMetric.metric == metric)
        .order_by(ItemMetric.created_at.desc(), ItemMetric.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def insert_rank_record(
    session: AsyncSession,
    item_id: int,
    value: int,
    created_at: datetime,
) -> None:
    session.add(ItemMetric(item_id=item_id, metric=METRIC_RANK, value=value, created_at=created_at))
    # Flush so a later latest_metric_value in the same transaction sees it.
    await session.flush()


async def get_rank_history(session: AsyncSession, item_id: int) -> list[ItemMetric]:
    """Rank records for an item, newest first."""
    result = await session.execute(
        select(ItemMetric)
        .where(ItemMetric.item_id == item_id, ItemMetric.metric == METRIC_RANK)
        .order_by(ItemMetric.created_at.desc(), ItemMetric.id.desc())
    )
    return list(result.scalars().all())


# ============================================================
# List snapshots
# ============================================================


async def replace_list_snapshot(
    session: AsyncSession,
    item_ids: Sequence[int],
    created_at: datetime,
    key: str = TOP_STORIES_KEY,
) -> None:
    """Replace every row for `key` with the given ordering (zero-based)."""
    await session.execute(delete(ListEntry).where(ListEntry.key == key))
    session.add_all(
        ListEntry(key=key, item_id=item_id, ordering=ordering, created_at=created_at)
        for ordering, item_id in enumerate(item_ids)
    )
    await session.flush()


# ============================================================
# Config
# ============================================================


async def get_config(session: AsyncSession, key: str) -> str | None:
    entry = await session.get(ConfigEntry, key)
    return entry.value if entry else None


async def set_config(session: AsyncSession, key: str, value: str) -> None:
    await session.merge(ConfigEntry(key=key, value=value))


# ============================================================
# Bookmarks
# ============================================================


async def add_bookmark(
    session: AsyncSession,
    item_id: int,
    created_at: datetime,
    user_id: str = DEFAULT_USER,
) -> bool:
    """Bookmark an item. Returns False if it was already bookmarked."""
    if await is_bookmarked(session, item_id, user_id):
        return False
    session.add(Bookmark(item_id=item_id, user_id=user_id, created_at=created_at))
    await session.flush()
    return True


async def remove_bookmark(session: AsyncSession, item_id: int, user_id: str = DEFAULT_USER) -> bool:
    """Drop a bookmark. Returns False if there was none."""
    result = await session.execute(
        delete(Bookmark).where(Bookmark.item_id == item_id, Bookmark.user_id == user_id)
    )
    return result.rowcount > 0


async def is_bookmarked(session: AsyncSession, item_id: int, user_id: str = DEFAULT_USER) -> bool:
    result = await session.execute(
        select(Bookmark.id).where(Bookmark.item_id == item_id, Bookmark.user_id == user_id)
    )
    return result.first() is not None


async def list_bookmarked_ids(session: AsyncSession, user_id: str = DEFAULT_USER) -> list[int]:
    """Bookmarked item ids, most recently bookmarked first."""
    result = await session.execute(
        select(Bookmark.item_id)
        .where(Bookmark.user_id == user_id)
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
    )
    return list(result.scalars().all())
