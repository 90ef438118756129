"""Shared fixtures: an in-memory upstream, a controllable clock, a SQLite database."""

import asyncio
from datetime import datetime, timezone

import pytest

from hnstore.schemas import Comment, Item, Job, RecentChanges, Story
from hnstore.services.cache import ItemCache, MemoryCacheBackend
from hnstore.services.fetcher import ItemFetcher
from hnstore.services.hn_client import UpstreamError
from hnstore.services.item_store import ItemStore
from hnstore.services.traversal import TreeWalker
from hnstore.stores.postgres import close_db, create_tables, init_db

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeGateway:
    """Upstream stand-in with call accounting."""

    def __init__(self) -> None:
        self.items: dict[int, Item] = {}
        self.lists: dict[str, list[int]] = {}
        self.max_id = 0
        self.updates = RecentChanges()
        self.failing_ids: set[int] = set()
        self.failing_lists: set[str] = set()
        self.calls: list[int] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def add_story(self, item_id: int, kids: list[int] | None = None) -> Story:
        story = Story(id=item_id, by="pg", title=f"Story {item_id}", time=T0, kids=kids or [])
        self.items[item_id] = story
        return story

    def add_comment(self, item_id: int, parent: int, kids: list[int] | None = None) -> Comment:
        comment = Comment(id=item_id, by="dang", parent=parent, text=f"c{item_id}", time=T0, kids=kids or [])
        self.items[item_id] = comment
        return comment

    def add_job(self, item_id: int) -> Job:
        job = Job(id=item_id, title=f"Job {item_id}", time=T0)
        self.items[item_id] = job
        return job

    async def fetch_item(self, item_id: int) -> Item | None:
        self.calls.append(item_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if item_id in self.failing_ids:
                raise UpstreamError(f"item {item_id} timed out")
            return self.items.get(item_id)
        finally:
            self.in_flight -= 1

    async def fetch_list(self, name: str) -> list[int]:
        if name in self.failing_lists:
            raise UpstreamError(f"list {name} timed out")
        return list(self.lists.get(name, []))

    async def fetch_max_id(self) -> int:
        return self.max_id

    async def fetch_updates(self) -> RecentChanges:
        return self.updates


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(gateway: FakeGateway, clock: FakeClock) -> ItemCache:
    return ItemCache(gateway, backend=MemoryCacheBackend(), ttl_seconds=300, clock=clock)


@pytest.fixture
def store(gateway: FakeGateway, cache: ItemCache) -> ItemStore:
    fetcher = ItemFetcher(cache, concurrency=50)
    walker = TreeWalker(fetcher, cap=10_000)
    return ItemStore(gateway=gateway, cache=cache, fetcher=fetcher, walker=walker)


@pytest.fixture
async def db():
    """Fresh in-memory SQLite database with all tables."""
    await init_db("sqlite+aiosqlite:///:memory:")
    await create_tables()
    yield
    await close_db()
