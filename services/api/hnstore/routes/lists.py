"""Ranked list endpoints.

GET /v1/lists/{name}?limit=30 - items of a ranked list, in rank order
GET /v1/updates               - recently changed items and profiles

Lists are read live from the upstream on every request. The rank
snapshotter's persisted ordering is history only and is never served here.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query

from hnstore.schemas import Item, RecentChanges
from hnstore.services.item_store import ItemStore, get_item_store

router = APIRouter()

ListName = Literal["top", "new", "best", "ask", "show", "job"]


@router.get("/lists/{name}", response_model=list[Item])
async def get_list(
    name: ListName,
    limit: int = Query(default=30, ge=1, le=50),
    store: ItemStore = Depends(get_item_store),
) -> list[Item]:
    ids = await store.get_list(name)
    return await store.get_ordered(ids[:limit])


@router.get("/updates", response_model=RecentChanges)
async def get_updates(store: ItemStore = Depends(get_item_store)) -> RecentChanges:
    return await store.get_updates()
