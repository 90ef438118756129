"""Tests for descendant/ancestor traversal."""

import pytest

from hnstore.services.fetcher import ItemFetcher
from hnstore.services.hn_client import UpstreamError
from hnstore.services.traversal import TreeWalker


@pytest.mark.asyncio
async def test_descendants_of_leaf_is_empty(gateway, store):
    gateway.add_story(1)

    assert await store.descendants(1) == {}


@pytest.mark.asyncio
async def test_descendants_of_missing_root_is_empty(store):
    assert await store.descendants(12345) == {}


@pytest.mark.asyncio
async def test_descendants_of_chain(gateway, store):
    gateway.add_story(1, kids=[2])
    gateway.add_comment(2, parent=1, kids=[3])
    gateway.add_comment(3, parent=2, kids=[4])
    gateway.add_comment(4, parent=3)

    assert set(await store.descendants(1)) == {2, 3, 4}


@pytest.mark.asyncio
async def test_descendants_breadth_first_tree(gateway, store):
    gateway.add_story(1, kids=[2, 3])
    gateway.add_comment(2, parent=1, kids=[4, 5])
    gateway.add_comment(3, parent=1)
    gateway.add_comment(4, parent=2)
    gateway.add_comment(5, parent=2, kids=[6])
    gateway.add_comment(6, parent=5)

    result = await store.descendants(1)

    assert set(result) == {2, 3, 4, 5, 6}
    assert result[6].parent == 5


@pytest.mark.asyncio
async def test_descendants_skips_unavailable_children(gateway, store):
    gateway.add_story(1, kids=[2, 3, 4])
    gateway.add_comment(2, parent=1, kids=[5])
    gateway.add_comment(3, parent=1, kids=[6])
    gateway.add_comment(5, parent=2)
    gateway.add_comment(6, parent=3)
    gateway.failing_ids.add(3)  # transient: 3 and its subtree are missing

    assert set(await store.descendants(1)) == {2, 5}


@pytest.mark.asyncio
async def test_descendants_root_failure_propagates(gateway, store):
    gateway.add_story(1, kids=[2])
    gateway.failing_ids.add(1)

    with pytest.raises(UpstreamError):
        await store.descendants(1)


@pytest.mark.asyncio
async def test_descendants_terminates_on_self_referential_kids(gateway, store):
    gateway.add_story(1, kids=[1, 2])
    gateway.add_comment(2, parent=1, kids=[2, 1])

    assert set(await store.descendants(1)) == {2}


@pytest.mark.asyncio
async def test_descendants_never_exceeds_cap(gateway, cache):
    gateway.add_story(1, kids=list(range(2, 12)))
    for i in range(2, 12):
        gateway.add_comment(i, parent=1, kids=[100 + i])
        gateway.add_comment(100 + i, parent=i)
    walker = TreeWalker(ItemFetcher(cache), cap=15)

    result = await walker.descendants(1)

    assert len(result) == 15
    assert set(range(2, 12)) <= set(result)


@pytest.mark.asyncio
async def test_ancestors_of_nested_comment(gateway, store):
    gateway.add_story(1, kids=[2])
    gateway.add_comment(2, parent=1, kids=[3])
    gateway.add_comment(3, parent=2)

    result = await store.ancestors(3)

    assert set(result) == {1, 2}
    assert result[1].type == "story"


@pytest.mark.asyncio
async def test_ancestors_of_story_is_empty(gateway, store):
    gateway.add_story(1)

    assert await store.ancestors(1) == {}


@pytest.mark.asyncio
async def test_ancestors_stop_at_missing_parent(gateway, store):
    gateway.add_comment(3, parent=2)
    gateway.add_comment(2, parent=1)  # story 1 was deleted upstream

    assert set(await store.ancestors(3)) == {2}


@pytest.mark.asyncio
async def test_ancestors_respect_cap(gateway, cache):
    gateway.add_story(1)
    for i in range(2, 10):
        gateway.add_comment(i, parent=i - 1)
    walker = TreeWalker(ItemFetcher(cache), cap=3)

    assert set(await walker.ancestors(9)) == {8, 7, 6}


@pytest.mark.asyncio
async def test_descendants_under_cap_are_a_breadth_first_prefix(gateway, cache):
    # 2 and 3 are gone upstream; the cap must be filled with their siblings
    # before anything from the next level.
    gateway.add_story(1, kids=[2, 3, 4, 5, 6])
    for i in (4, 5, 6):
        gateway.add_comment(i, parent=1, kids=[10 + i])
        gateway.add_comment(10 + i, parent=i)
    walker = TreeWalker(ItemFetcher(cache), cap=3)

    assert set(await walker.descendants(1)) == {4, 5, 6}
