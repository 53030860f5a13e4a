"""
Catalog Manager - Entry SQLAlchemy Model
==========================================

What:  ORM model representing the `entries` table.
Who:   Used by EntryService for CRUD operations and by Alembic for schema management.

Table Design:
    - Integer primary key with AUTOINCREMENT on SQLite: ids only grow and are
      never handed out again after a delete
    - image_ref: either "/uploads/<file>" or an external URL, NULL when absent
    - comment: NULL when absent, never an empty string
    - created_at: set once at insert, never updated

    Index on created_at DESC serves the only listing query
    (newest first, ties broken by id DESC).
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


# SQLite INTEGER keys are signed 64-bit
MIN_ENTRY_ID = -(2 ** 63)
MAX_ENTRY_ID = 2 ** 63 - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entry(Base):
    """
    A catalog entry (for the seed data, a cocktail).

    Lifecycle:
        1. Created by POST /api/entries (id and created_at assigned here)
        2. Mutable fields fully replaced by PUT /api/entries/{id}
        3. Permanently removed by DELETE /api/entries/{id}
    """

    __tablename__ = "entries"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)
    ingredients: Mapped[str] = mapped_column(Text, nullable=False)
    recipe: Mapped[str] = mapped_column(Text, nullable=False)

    image_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_entries_created_at", created_at.desc()),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Entry(id={self.id}, name='{self.name}', created_at='{self.created_at}')>"
