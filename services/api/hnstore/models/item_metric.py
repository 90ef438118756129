"""Item metric model.

Append-only history of per-item metrics. The only metric written today is
"rank": one row each time an item's position on the front page changes.
Rows are never updated or deleted.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hnstore.stores.postgres import Base

METRIC_RANK = "rank"


class ItemMetric(Base):
    """A metric value for an item as of `created_at`."""

    __tablename__ = "item_metrics"
    __table_args__ = (
        Index("ix_item_metrics_item_metric_created", "item_id", "metric", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    item_id: Mapped[int] = mapped_column(BigInteger)
    metric: Mapped[str] = mapped_column(String(50), default=METRIC_RANK)
    value: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<ItemMetric {self.item_id} {self.metric}={self.value}>"
