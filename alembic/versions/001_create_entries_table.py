"""Create entries table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the `entries` table holding every catalog entry.
How:   Integer autoincrement key (never reused on SQLite thanks to
       AUTOINCREMENT), TEXT columns, and a timezone-aware created_at.

Rollback: downgrade() drops the table and every entry in it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("ingredients", sa.Text(), nullable=False),
        sa.Column("recipe", sa.Text(), nullable=False),
        # Absolute URL or a site-relative path such as /uploads/lime-1718000000000.png
        sa.Column("image_ref", sa.Text(), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    # The list endpoint always orders by created_at DESC
    op.create_index(
        "idx_entries_created_at",
        "entries",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_entries_created_at", table_name="entries")
    op.drop_table("entries")
