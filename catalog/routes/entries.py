"""
Catalog Manager - Entry Route Handlers
========================================

What:  CRUD endpoints under /api/entries.
How:   Thin handlers: parse the request, delegate to EntryService, return JSON.
       Errors are raised as CatalogError subclasses and formatted by the
       global handlers in main.py.

    GET    /api/entries        → 200 [Entry, ...]
    GET    /api/entries/{id}   → 200 Entry             | 404
    POST   /api/entries        → 200 Entry             | 400
    PUT    /api/entries/{id}   → 200 {"message": ...}  | 400 | 404
    DELETE /api/entries/{id}   → 200 {"message": ...}  | 404
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database import get_db_session
from catalog.exceptions import NotFoundError
from catalog.models.entry import MAX_ENTRY_ID, MIN_ENTRY_ID
from catalog.schemas.entry import (
    EntryList,
    EntryPayload,
    EntryResponse,
    ErrorResponse,
    MessageResponse,
)
from catalog.services.entry_service import entry_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Entries"])

_NOT_FOUND = {404: {"description": "Entry not found", "model": ErrorResponse}}
_BAD_REQUEST = {400: {"description": "Missing required field", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Storage fault", "model": ErrorResponse}}


def _parse_entry_id(entry_id: str) -> int:
    """
    Path ids are taken as strings so a non-numeric id is a plain 404,
    the same answer an unknown numeric id gets. So is an id outside the
    64-bit key range, which the driver would refuse to bind.
    """
    try:
        parsed = int(entry_id)
    except ValueError:
        raise NotFoundError(resource_id=entry_id)
    if not MIN_ENTRY_ID <= parsed <= MAX_ENTRY_ID:
        raise NotFoundError(resource_id=entry_id)
    return parsed


@router.get(
    "/entries",
    response_model=EntryList,
    responses=_SERVER_ERROR,
    summary="List all entries, newest first",
)
async def list_entries(db: AsyncSession = Depends(get_db_session)) -> EntryList:
    return await entry_service.list_entries(db)


@router.get(
    "/entries/{entry_id}",
    response_model=EntryResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Get a single entry by id",
)
async def get_entry(
    entry_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> EntryResponse:
    return await entry_service.get_entry(db, _parse_entry_id(entry_id))


@router.post(
    "/entries",
    response_model=EntryResponse,
    responses={**_BAD_REQUEST, **_SERVER_ERROR},
    summary="Create an entry",
    description=(
        "Creates an entry from name, ingredients and recipe (all required) plus "
        "optional imageRef and comment. Empty optional fields are stored as null."
    ),
)
async def create_entry(
    payload: EntryPayload,
    db: AsyncSession = Depends(get_db_session),
) -> EntryResponse:
    return await entry_service.create_entry(db, payload)


@router.put(
    "/entries/{entry_id}",
    response_model=MessageResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Replace every mutable field of an entry",
)
async def update_entry(
    entry_id: str,
    payload: EntryPayload,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await entry_service.replace_entry(db, _parse_entry_id(entry_id), payload)
    return MessageResponse(message="Entry updated successfully")


@router.delete(
    "/entries/{entry_id}",
    response_model=MessageResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Delete an entry",
)
async def delete_entry(
    entry_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await entry_service.remove_entry(db, _parse_entry_id(entry_id))
    return MessageResponse(message="Entry deleted successfully")
