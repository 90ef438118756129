"""Bookmark endpoints.

GET    /v1/bookmarks?limit=50 - bookmarked items, most recent first
PUT    /v1/bookmarks/{id}     - bookmark an item (idempotent)
DELETE /v1/bookmarks/{id}     - remove a bookmark (idempotent)

Only items that resolve upstream can be bookmarked. Bookmarks whose item has
since been deleted upstream are skipped when listing.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from hnstore.schemas import BookmarkStatus, Item
from hnstore.schemas.common import error_body
from hnstore.services import repository
from hnstore.services.item_store import ItemStore, get_item_store
from hnstore.services.snapshot import utc_now
from hnstore.stores.postgres import get_session

router = APIRouter()

ItemId = Annotated[int, Path(description="Upstream item id", gt=0)]


@router.get("", response_model=list[Item])
async def list_bookmarks(
    limit: int = Query(default=50, ge=1, le=50),
    store: ItemStore = Depends(get_item_store),
) -> list[Item]:
    async with get_session() as session:
        ids = await repository.list_bookmarked_ids(session)
    return await store.get_ordered(ids[:limit])


@router.put("/{item_id}", response_model=BookmarkStatus)
async def add_bookmark(
    item_id: ItemId,
    store: ItemStore = Depends(get_item_store),
) -> BookmarkStatus:
    if await store.get(item_id) is None:
        raise HTTPException(
            status_code=404,
            detail=error_body("ITEM_NOT_FOUND", f"Item {item_id} not found", {"item_id": item_id}),
        )
    async with get_session() as session:
        await repository.add_bookmark(session, item_id, utc_now())
    return BookmarkStatus(item_id=item_id, bookmarked=True)


@router.delete("/{item_id}", response_model=BookmarkStatus)
async def remove_bookmark(item_id: ItemId) -> BookmarkStatus:
    async with get_session() as session:
        await repository.remove_bookmark(session, item_id)
    return BookmarkStatus(item_id=item_id, bookmarked=False)
