"""Bookmarked item model.

One row per (user, item). There is no account system: every request acts as
DEFAULT_USER, the column only keeps the table ready for more than one user.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hnstore.stores.postgres import Base

DEFAULT_USER = "default"


class Bookmark(Base):
    __tablename__ = "bookmarked_items"
    __table_args__ = (UniqueConstraint("user_id", "item_id", name="uq_bookmarked_items_user_item"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    item_id: Mapped[int] = mapped_column(BigInteger, index=True)
    user_id: Mapped[str] = mapped_column(String(100), default=DEFAULT_USER)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
