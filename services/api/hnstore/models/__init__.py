"""SQLAlchemy ORM models.

Models represent database tables:
- items: durable copies of upstream items
- item_metrics: append-only, change-compressed metric history (rank)
- list_entries: latest persisted ordering per ranked list
- config: key/value settings such as the backfill cursor
- bookmarked_items: items a user saved for later
"""

from hnstore.models.bookmark import DEFAULT_USER, Bookmark
from hnstore.models.config_entry import ConfigEntry
from hnstore.models.item import ItemRecord
from hnstore.models.item_metric import METRIC_RANK, ItemMetric
from hnstore.models.list_entry import ListEntry

__all__ = ["Bookmark", "ConfigEntry", "DEFAULT_USER", "ItemMetric", "ItemRecord", "ListEntry", "METRIC_RANK"]
