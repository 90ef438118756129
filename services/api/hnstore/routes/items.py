"""Item endpoints.

GET /v1/items/{id}              - single item
GET /v1/items?ids=1,2,3         - several items, request order kept, absent ids skipped
GET /v1/items/{id}/children     - direct replies, in upstream order
GET /v1/items/{id}/descendants  - whole comment subtree below an item
GET /v1/items/{id}/ancestors    - parent chain up to the story
GET /v1/items/{id}/rank         - front-page rank history, newest first
GET /v1/items/{id}/bookmark     - whether the item is bookmarked

Routers are thin: call the item store for everything.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from hnstore.schemas import BookmarkStatus, Item, RankPoint
from hnstore.schemas.common import error_body
from hnstore.services import repository
from hnstore.services.item_store import ItemStore, get_item_store
from hnstore.stores.postgres import get_session

router = APIRouter()

MAX_IDS_PER_REQUEST = 500

ItemId = Annotated[int, Path(description="Upstream item id", gt=0)]


def _parse_ids(raw: str) -> list[int]:
    ids: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if not (part.isascii() and part.isdigit()) or int(part) <= 0:
            raise HTTPException(
                status_code=422,
                detail=error_body("INVALID_IDS", f"Not a positive item id: {part!r}"),
            )
        ids.append(int(part))
    if len(ids) > MAX_IDS_PER_REQUEST:
        raise HTTPException(
            status_code=422,
            detail=error_body(
                "TOO_MANY_IDS",
                f"At most {MAX_IDS_PER_REQUEST} ids per request",
                {"count": len(ids)},
            ),
        )
    return ids


def _not_found(item_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=error_body("ITEM_NOT_FOUND", f"Item {item_id} not found", {"item_id": item_id}),
    )


def _in_tree_order(items: dict[int, Item]) -> list[Item]:
    # Traversal results are unordered; sort by id (roughly creation order) for stable output.
    return [items[i] for i in sorted(items)]


@router.get("", response_model=list[Item])
async def get_items(
    ids: str = Query(description="Comma-separated item ids", examples=["8863,2921983"]),
    store: ItemStore = Depends(get_item_store),
) -> list[Item]:
    return await store.get_ordered(_parse_ids(ids))


@router.get("/{item_id}", response_model=Item)
async def get_item(
    item_id: ItemId,
    store: ItemStore = Depends(get_item_store),
) -> Item:
    item = await store.get(item_id)
    if item is None:
        raise _not_found(item_id)
    return item


@router.get("/{item_id}/children", response_model=list[Item])
async def get_children(
    item_id: ItemId,
    store: ItemStore = Depends(get_item_store),
) -> list[Item]:
    children = await store.children(item_id)
    if children is None:
        raise _not_found(item_id)
    return children


@router.get("/{item_id}/descendants", response_model=list[Item])
async def get_descendants(
    item_id: ItemId,
    store: ItemStore = Depends(get_item_store),
) -> list[Item]:
    return _in_tree_order(await store.descendants(item_id))


@router.get("/{item_id}/ancestors", response_model=list[Item])
async def get_ancestors(
    item_id: ItemId,
    store: ItemStore = Depends(get_item_store),
) -> list[Item]:
    return _in_tree_order(await store.ancestors(item_id))


@router.get("/{item_id}/rank", response_model=list[RankPoint])
async def get_rank_history(item_id: ItemId) -> list[RankPoint]:
    async with get_session() as session:
        records = await repository.get_rank_history(session, item_id)
    return [RankPoint(value=r.value, created_at=r.created_at) for r in records]


@router.get("/{item_id}/bookmark", response_model=BookmarkStatus)
async def get_bookmark_status(item_id: ItemId) -> BookmarkStatus:
    async with get_session() as session:
        bookmarked = await repository.is_bookmarked(session, item_id)
    return BookmarkStatus(item_id=item_id, bookmarked=bookmarked)
