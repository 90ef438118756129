"""Item schemas: the tagged union returned by the upstream and served by the store.

Upstream payloads carry a `type` discriminator. Only story, comment and job are
modeled; anything else (poll, pollopt) is treated as not found by the gateway.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class _ItemBase(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int = Field(gt=0)
    time: datetime

    def child_ids(self) -> list[int]:
        """Ids of direct replies, in ranked display order."""
        return []

    def parent_id(self) -> int | None:
        return None


class Story(_ItemBase):
    """A story."""

    type: Literal["story"] = "story"
    by: str
    title: str
    score: int = 0
    descendants: int = 0  # total comment count
    kids: list[int] = Field(default_factory=list)
    url: str | None = None
    text: str | None = None  # HTML

    def child_ids(self) -> list[int]:
        return list(self.kids)


class Comment(_ItemBase):
    """A comment. `parent` is either another comment or the story."""

    type: Literal["comment"] = "comment"
    by: str
    parent: int
    text: str = ""  # HTML
    kids: list[int] = Field(default_factory=list)

    def child_ids(self) -> list[int]:
        return list(self.kids)

    def parent_id(self) -> int | None:
        return self.parent


class Job(_ItemBase):
    """A job posting."""

    type: Literal["job"] = "job"
    title: str
    by: str | None = None
    score: int = 0
    url: str | None = None
    text: str | None = None  # HTML


Item = Annotated[Union[Story, Comment, Job], Field(discriminator="type")]

_item_adapter: TypeAdapter[Item] = TypeAdapter(Item)


def parse_item(payload: Any) -> Item | None:
    """Parse an upstream item payload.

    Returns None for payloads that do not resolve to a live item of a known
    type: null bodies, deleted items, and unsupported types.
    """
    if not isinstance(payload, dict):
        return None
    if payload.get("deleted"):
        return None
    try:
        return _item_adapter.validate_python(payload)
    except ValidationError:
        return None


def item_to_json(item: Item) -> dict[str, Any]:
    """JSON-safe dict for an item (round-trips through parse_item)."""
    return item.model_dump(mode="json")


class RecentChanges(BaseModel):
    """Items and profiles the upstream reports as recently changed."""

    items: list[int] = Field(default_factory=list)
    profiles: list[str] = Field(default_factory=list)


class RankPoint(BaseModel):
    """One entry of an item's rank history."""

    value: int
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}


class BookmarkStatus(BaseModel):
    item_id: int = Field(alias="itemId")
    bookmarked: bool

    model_config = {"populate_by_name": True}


class StoreStats(BaseModel):
    """Progress of the background writers."""

    backfill_cursor: int = Field(alias="backfillCursor", description="Highest item id swept by the backfill")

    model_config = {"populate_by_name": True}
