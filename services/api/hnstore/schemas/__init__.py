"""Pydantic schemas for items and API responses."""

from hnstore.schemas.common import ErrorDetail, ErrorResponse
from hnstore.schemas.items import (
    BookmarkStatus,
    Comment,
    Item,
    Job,
    RankPoint,
    RecentChanges,
    Story,
    StoreStats,
    item_to_json,
    parse_item,
)

__all__ = [
    "BookmarkStatus",
    "Comment",
    "ErrorDetail",
    "ErrorResponse",
    "Item",
    "Job",
    "RankPoint",
    "RecentChanges",
    "Story",
    "StoreStats",
    "item_to_json",
    "parse_item",
]
