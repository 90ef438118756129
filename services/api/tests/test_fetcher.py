import pytest

from hnstore.services.fetcher import ItemFetcher


@pytest.mark.asyncio
async def test_get_many_empty(cache):
    assert await ItemFetcher(cache).get_many([]) == {}


@pytest.mark.asyncio
async def test_get_many_collapses_duplicates_and_drops_absent(gateway, cache):
    gateway.add_story(1)
    gateway.add_job(2)

    items = await ItemFetcher(cache).get_many([1, 2, 1, 99, 2])

    assert set(items) == {1, 2}
    assert items[2].type == "job"
    assert sorted(gateway.calls) == [1, 2, 99]


@pytest.mark.asyncio
async def test_get_many_omits_transient_failures(gateway, cache):
    gateway.add_story(1)
    gateway.add_story(2)
    gateway.failing_ids.add(2)

    items = await ItemFetcher(cache).get_many([1, 2])

    assert list(items) == [1]


@pytest.mark.asyncio
async def test_get_many_respects_concurrency_ceiling(gateway, cache):
    for i in range(1, 41):
        gateway.add_story(i)

    items = await ItemFetcher(cache, concurrency=5).get_many(list(range(1, 41)))

    assert len(items) == 40
    assert 1 <= gateway.max_in_flight <= 5


@pytest.mark.asyncio
async def test_store_get_ordered_reprojects_request_order(gateway, store):
    for i in (3, 1, 2):
        gateway.add_story(i)

    items = await store.get_ordered([3, 404, 1, 2, 3])

    assert [item.id for item in items] == [3, 1, 2]


def test_fetcher_rejects_zero_concurrency(cache):
    with pytest.raises(ValueError):
        ItemFetcher(cache, concurrency=0)
