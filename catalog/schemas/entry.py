"""
Catalog Manager - Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the JSON contract between the API and its clients.
Why:   The wire names (`imageRef`, `createdAt`, ...) are fixed; Python code uses
       snake_case attributes and the aliases carry the wire names.
Who:   Used by route handlers as request/response types and by the UI client
       to parse API responses.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class EntryPayload(BaseModel):
    """
    Body of POST /api/entries and PUT /api/entries/{id}.

    Every field is optional at the schema level on purpose: a missing required
    field must produce our 400 ValidationError (raised by the service) rather
    than FastAPI's automatic 422.
    """
    name: Optional[str] = Field(default=None, description="Entry name (required)")
    ingredients: Optional[str] = Field(default=None, description="Ingredients (required)")
    recipe: Optional[str] = Field(default=None, description="Recipe (required)")
    image_ref: Optional[str] = Field(
        default=None,
        alias="imageRef",
        description="Upload path returned by /api/upload, or an external image URL",
    )
    comment: Optional[str] = Field(default=None, description="Free-form comment")

    model_config = {"populate_by_name": True, "extra": "ignore"}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class EntryResponse(BaseModel):
    """
    Full representation of an entry, as returned by every entry endpoint.

    createdAt is always rendered as UTC with microseconds and a trailing "Z",
    so a freshly created entry and the same entry re-read from the database
    serialize identically (SQLite hands timestamps back without tzinfo).
    """
    id: int = Field(description="Store-assigned identifier")
    name: str
    ingredients: str
    recipe: str
    image_ref: Optional[str] = Field(default=None, alias="imageRef")
    comment: Optional[str] = None
    created_at: datetime = Field(alias="createdAt")

    model_config = {"from_attributes": True, "populate_by_name": True}

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.isoformat(timespec="microseconds") + "Z"


class MessageResponse(BaseModel):
    """Confirmation body for PUT and DELETE."""
    message: str


class UploadResponse(BaseModel):
    """Body of a successful POST /api/upload; filePath is usable directly as imageRef."""
    file_path: str = Field(alias="filePath")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """
    Error body shared by every endpoint.

    Example:
        {"error": "Name, ingredients, and recipe are required", "request_id": "1a2b3c4d"}
    """
    error: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float


EntryList = List[EntryResponse]
