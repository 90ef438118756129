"""Item model.

Durable copy of an upstream item (story, comment or job). The raw upstream
JSON is kept in `original` and is what the store rehydrates from; the other
columns are denormalized for querying.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from hnstore.stores.postgres import Base


class ItemRecord(Base):
    """Upstream item, upserted by id."""

    __tablename__ = "items"

    # Upstream id (assigned by Hacker News, never generated locally)
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)

    type: Mapped[str] = mapped_column(String(20), index=True)  # story, comment, job
    original: Mapped[str] = mapped_column(Text)

    descendants: Mapped[int | None] = mapped_column(Integer)
    username: Mapped[str | None] = mapped_column(String(100), index=True)
    score: Mapped[int | None] = mapped_column(Integer)
    title: Mapped[str | None] = mapped_column(Text)
    url: Mapped[str | None] = mapped_column(Text)
    body: Mapped[str | None] = mapped_column(Text)
    parent_id: Mapped[int | None] = mapped_column(BigInteger, index=True)
    time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<ItemRecord {self.id} {self.type}>"
