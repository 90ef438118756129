"""Tests for the rank snapshotter."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from hnstore.models import ItemMetric, ListEntry
from hnstore.services import repository
from hnstore.services.snapshot import RankSnapshotter, save_rank
from hnstore.stores.postgres import get_session

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


async def _rank_values(item_id: int) -> list[int]:
    async with get_session() as session:
        result = await session.execute(
            select(ItemMetric.value).where(ItemMetric.item_id == item_id).order_by(ItemMetric.id)
        )
        return list(result.scalars().all())


async def _snapshot_rows() -> list[tuple[int, int]]:
    async with get_session() as session:
        result = await session.execute(
            select(ListEntry.item_id, ListEntry.ordering)
            .where(ListEntry.key == "top_stories")
            .order_by(ListEntry.ordering)
        )
        return [tuple(row) for row in result.all()]


async def _save(ids: list[int], minutes: int, **kwargs):
    async with get_session() as session:
        return await save_rank(session, ids, T0 + timedelta(minutes=minutes), **kwargs)


@pytest.mark.asyncio
async def test_saves_rank_when_none_exist(db):
    stats = await _save([40], 0)

    assert stats.rank_records_written == 1
    assert await _rank_values(40) == [1]


@pytest.mark.asyncio
async def test_unchanged_rank_writes_nothing(db):
    await _save([40], 0)
    stats = await _save([40], 1)

    assert stats.rank_records_written == 0
    assert await _rank_values(40) == [1]


@pytest.mark.asyncio
async def test_rank_history_is_change_compressed(db):
    await _save([40], 0)
    await _save([40], 1)
    await _save([41, 40], 2)
    await _save([40, 41], 3)

    assert await _rank_values(40) == [1, 2, 1]
    assert await _rank_values(41) == [1, 2]


@pytest.mark.asyncio
async def test_snapshot_rows_are_replaced_not_merged(db):
    await _save([10, 11], 0)
    assert await _snapshot_rows() == [(10, 0), (11, 1)]

    await _save([12], 1)
    assert await _snapshot_rows() == [(12, 0)]


@pytest.mark.asyncio
async def test_snapshot_is_capped_to_limit(db):
    stats = await _save([1, 2, 3, 4, 5], 0, limit=3)

    assert stats.listed == 3
    assert await _snapshot_rows() == [(1, 0), (2, 1), (3, 2)]
    assert await _rank_values(4) == []


@pytest.mark.asyncio
async def test_failed_cycle_rolls_back_everything(db, monkeypatch: pytest.MonkeyPatch):
    await _save([1, 2], 0)

    async def boom(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(repository, "insert_rank_record", boom)
    with pytest.raises(RuntimeError):
        await _save([3, 1, 2], 1)

    assert await _snapshot_rows() == [(1, 0), (2, 1)]
    assert await _rank_values(3) == []


@pytest.mark.asyncio
async def test_snapshotter_cycle_reads_top_list(db, gateway, store):
    gateway.lists["top"] = [7, 8, 9]
    snapshotter = RankSnapshotter(store, limit=2, clock=lambda: T0)

    stats = await snapshotter.run_cycle()

    assert stats.listed == 2
    assert await _snapshot_rows() == [(7, 0), (8, 1)]


@pytest.mark.asyncio
async def test_snapshotter_loop_survives_failed_cycles(db, gateway, store):
    minutes = iter(range(10))
    snapshotter = RankSnapshotter(
        store,
        interval_seconds=0,
        clock=lambda: T0 + timedelta(minutes=next(minutes)),
    )
    gateway.lists["top"] = [5]
    gateway.failing_lists.add("top")

    await snapshotter.run(max_cycles=2)
    assert await _rank_values(5) == []

    gateway.failing_lists.clear()
    await snapshotter.run(max_cycles=2)
    assert await _rank_values(5) == [1]
