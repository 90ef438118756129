"""add_bookmarked_items

Revision ID: 7d2b4f6e8a31
Revises: 3e5f7a9c1b20
Create Date: 2026-10-20
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "7d2b4f6e8a31"
down_revision: Union[str, Sequence[str], None] = "3e5f7a9c1b20"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "bookmarked_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "item_id", name="uq_bookmarked_items_user_item"),
    )
    op.create_index(op.f("ix_bookmarked_items_item_id"), "bookmarked_items", ["item_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_bookmarked_items_item_id"), table_name="bookmarked_items")
    op.drop_table("bookmarked_items")
