from datetime import datetime, timedelta, timezone

import pytest

from hnstore.schemas import Comment, Story, parse_item
from hnstore.services import repository
from hnstore.stores.postgres import get_session


@pytest.mark.asyncio
async def test_put_item_upserts_by_id(db):
    story = parse_item(
        {"type": "story", "id": 8863, "by": "dhouston", "title": "My YC app", "score": 104, "time": 1175714200}
    )
    async with get_session() as session:
        await repository.put_item(session, story)

    updated = story.model_copy(update={"score": 111, "kids": [9224]})
    async with get_session() as session:
        await repository.put_item(session, updated)

    async with get_session() as session:
        record = await repository.get_item_record(session, 8863)

    assert record.type == "story"
    assert record.username == "dhouston"
    assert record.score == 111
    assert repository.record_to_item(record) == updated


@pytest.mark.asyncio
async def test_comment_record_keeps_parent(db):
    comment = parse_item({"type": "comment", "id": 9224, "by": "BrandonM", "parent": 8863, "text": "hi", "time": 1175727286})
    async with get_session() as session:
        await repository.put_item(session, comment)
    async with get_session() as session:
        record = await repository.get_item_record(session, 9224)

    assert record.parent_id == 8863
    assert record.body == "hi"
    assert isinstance(repository.record_to_item(record), Comment)


@pytest.mark.asyncio
async def test_config_round_trip(db):
    async with get_session() as session:
        assert await repository.get_config(session, "backfill_ptr") is None
        await repository.set_config(session, "backfill_ptr", "10")

    async with get_session() as session:
        await repository.set_config(session, "backfill_ptr", "20")

    async with get_session() as session:
        assert await repository.get_config(session, "backfill_ptr") == "20"


def test_parse_item_rejects_deleted_and_unknown_types():
    assert parse_item(None) is None
    assert parse_item({"id": 1, "type": "comment", "deleted": True, "time": 1}) is None
    assert parse_item({"id": 2, "type": "poll", "by": "x", "time": 1}) is None
    assert isinstance(parse_item({"id": 3, "type": "story", "by": "x", "title": "t", "time": 1}), Story)


@pytest.mark.asyncio
async def test_bookmarks_are_idempotent_and_newest_first(db):
    t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
    async with get_session() as session:
        assert await repository.add_bookmark(session, 10, t0)
        assert await repository.add_bookmark(session, 11, t0 + timedelta(minutes=1))
        assert not await repository.add_bookmark(session, 10, t0 + timedelta(minutes=2))

    async with get_session() as session:
        assert await repository.list_bookmarked_ids(session) == [11, 10]
        assert await repository.is_bookmarked(session, 10)
        assert await repository.remove_bookmark(session, 10)
        assert not await repository.remove_bookmark(session, 10)

    async with get_session() as session:
        assert not await repository.is_bookmarked(session, 10)
        assert await repository.list_bookmarked_ids(session) == [11]
