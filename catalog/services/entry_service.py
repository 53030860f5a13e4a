"""
Catalog Manager - Entry Service (the Store)
=============================================

What:  Durable, queryable set of entries: list, get, create, replace, remove.
Why:   Keeps validation and persistence rules out of the HTTP layer.
How:   Each operation is one SQL statement on the session it is given; the
       per-request transaction in get_db_session commits or rolls back.
Who:   Called by the /api/entries route handlers and by the startup seed step.

Error translation:
    row missing (None / rowcount 0)  → NotFoundError    (404)
    required field missing or blank  → ValidationError  (400, before any SQL)
    SQLAlchemyError                  → StorageError     (500, driver message kept)
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.exceptions import NotFoundError, StorageError, ValidationError
from catalog.models.entry import Entry
from catalog.schemas.entry import EntryPayload, EntryResponse

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "ingredients", "recipe")
OPTIONAL_FIELDS = ("image_ref", "comment")

# Starter entries inserted into an empty table on first startup
SEED_ENTRIES: List[Dict[str, Optional[str]]] = [
    {
        "name": "Hot Rüuski",
        "ingredients": "Wodka, Peat Moss, Pine Tar",
        "recipe": "Take your ingredients, mix, serve",
        "image_ref": None,
        "comment": "A couple of these, you'll forget all your problems!",
    },
    {
        "name": "Cold Soul",
        "ingredients": "Wodka, Ice, Herbs",
        "recipe": "Gather your ingredients, combine, shake, serve over ice",
        "image_ref": None,
        "comment": "Have one or six of these, and discuss the future!",
    },
]


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def normalize_entry_fields(payload: EntryPayload) -> Dict[str, Any]:
    """
    Validate required fields and normalize optional ones.

    Returns:
        Column values for an INSERT or UPDATE. Required values are kept
        exactly as submitted; blank optional values become None.

    Raises:
        ValidationError naming every missing required field.
    """
    missing = [field for field in REQUIRED_FIELDS if _is_blank(getattr(payload, field))]
    if missing:
        raise ValidationError(
            message="Name, ingredients, and recipe are required",
            fields=missing,
        )

    values: Dict[str, Any] = {field: getattr(payload, field) for field in REQUIRED_FIELDS}
    for field in OPTIONAL_FIELDS:
        value = getattr(payload, field)
        values[field] = None if _is_blank(value) else value
    return values


def _storage_error(exc: SQLAlchemyError, operation: str, **context: Any) -> StorageError:
    error = StorageError.from_driver(exc, operation, **context)
    logger.error("Storage failure during %s: %s", operation, error.message)
    return error


class EntryService:
    """
    Store operations for entries.

    Stateless: the session is passed into every call, which keeps each
    operation testable against a throwaway SQLite database.
    """

    async def list_entries(self, db: AsyncSession) -> List[EntryResponse]:
        """Every entry, newest first; entries created in the same instant by id DESC."""
        try:
            result = await db.execute(
                select(Entry).order_by(Entry.created_at.desc(), Entry.id.desc())
            )
            entries = result.scalars().all()
        except SQLAlchemyError as e:
            raise _storage_error(e, "list")
        return [EntryResponse.model_validate(entry) for entry in entries]

    async def get_entry(self, db: AsyncSession, entry_id: int) -> EntryResponse:
        try:
            result = await db.execute(select(Entry).where(Entry.id == entry_id))
            entry = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise _storage_error(e, "get", entry_id=entry_id)

        if entry is None:
            raise NotFoundError(resource_id=entry_id)
        return EntryResponse.model_validate(entry)

    async def create_entry(self, db: AsyncSession, payload: EntryPayload) -> EntryResponse:
        """
        Insert a new entry.

        Validation runs first, so an invalid payload never reaches the
        session. id and created_at are assigned during the flush.
        """
        values = normalize_entry_fields(payload)
        entry = Entry(**values)
        try:
            db.add(entry)
            await db.flush()
        except SQLAlchemyError as e:
            raise _storage_error(e, "create")

        logger.info("Entry created: id=%s name=%r", entry.id, entry.name)
        return EntryResponse.model_validate(entry)

    async def replace_entry(
        self, db: AsyncSession, entry_id: int, payload: EntryPayload
    ) -> None:
        """
        Overwrite every mutable field of an entry (not a merge).

        id and created_at are never part of the UPDATE.
        """
        values = normalize_entry_fields(payload)
        try:
            result = await db.execute(
                update(Entry)
                .where(Entry.id == entry_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            raise _storage_error(e, "replace", entry_id=entry_id)

        if result.rowcount == 0:
            raise NotFoundError(resource_id=entry_id)
        logger.info("Entry replaced: id=%s", entry_id)

    async def remove_entry(self, db: AsyncSession, entry_id: int) -> None:
        # Uploaded images referenced by the entry stay on disk
        try:
            result = await db.execute(
                delete(Entry)
                .where(Entry.id == entry_id)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            raise _storage_error(e, "remove", entry_id=entry_id)

        if result.rowcount == 0:
            raise NotFoundError(resource_id=entry_id)
        logger.info("Entry removed: id=%s", entry_id)

    async def count_entries(self, db: AsyncSession) -> int:
        try:
            result = await db.execute(select(func.count(Entry.id)))
        except SQLAlchemyError as e:
            raise _storage_error(e, "count")
        return result.scalar() or 0

    async def seed_initial_entries(self, db: AsyncSession) -> int:
        """
        Insert SEED_ENTRIES when the table is empty.

        Returns:
            Number of entries inserted (0 when the table already had rows).
        """
        if await self.count_entries(db) > 0:
            return 0
        try:
            db.add_all([Entry(**values) for values in SEED_ENTRIES])
            await db.flush()
        except SQLAlchemyError as e:
            raise _storage_error(e, "seed")
        logger.info("Seeded %d initial entries", len(SEED_ENTRIES))
        return len(SEED_ENTRIES)


# Stateless, so one shared instance serves every request
entry_service = EntryService()
