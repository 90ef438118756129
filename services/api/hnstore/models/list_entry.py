"""List entry model.

Latest persisted ordering of a ranked list (e.g. "top_stories"). All rows for
a key are replaced together on every snapshot cycle.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hnstore.stores.postgres import Base


class ListEntry(Base):
    __tablename__ = "list_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(String(50), index=True)
    item_id: Mapped[int] = mapped_column(BigInteger)
    ordering: Mapped[int] = mapped_column(Integer)  # zero-based
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
