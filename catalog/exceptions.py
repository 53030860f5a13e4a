"""
Catalog Manager - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for each failure the API can report.
How:   Each exception carries a human-readable message and an optional context
       dict. Global exception handlers (registered in main.py) turn them into
       JSON bodies of the form {"error": "<message>", "request_id": "..."}.
Who:   Raised by services and routes; caught by the global handlers.

Exception Hierarchy:
    CatalogError (base)
    ├── ValidationError       → 400 Bad Request
    ├── UploadRejectedError   → 400 Bad Request
    ├── NotFoundError         → 404 Not Found
    ├── StorageError          → 500 Internal Server Error (message passed through)
    ├── FileStorageError      → 500 Internal Server Error
    └── ApiRequestError       (UI client side: a failed call to the API)
"""

from typing import Any, Dict, Optional, Sequence


class CatalogError(Exception):
    """
    Base exception for all catalog errors.

    Attributes:
        message:  Human-readable description, returned as the `error` field
        context:  Additional debug info, logged but not returned
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatalogError):
    """
    Raised when an entry payload is missing a required field.

    When:    name, ingredients or recipe absent, null or blank; malformed body.
    HTTP:    400 Bad Request. Checked before anything reaches the Store.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        fields: Optional[Sequence[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if fields:
            ctx["fields"] = list(fields)
        super().__init__(message=message, context=ctx)
        self.fields = list(fields or [])


class UploadRejectedError(CatalogError):
    """
    Raised when an image upload cannot be accepted.

    When:    No file part, MIME type other than JPEG/PNG, or file over the size ceiling.
    HTTP:    400 Bad Request. Nothing is written to the uploads directory.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Upload rejected",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CatalogError):
    """
    Raised when no entry has the requested id.

    SQLAlchemy reports a missing row as None or as a zero rowcount; the
    service layer converts both into this exception.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Entry",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StorageError(CatalogError):
    """
    Raised when the underlying database fails.

    The driver's message is kept as the error message so the caller sees
    what went wrong (e.g. "no such table: entries").
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A storage error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

    @classmethod
    def from_driver(cls, exc: Exception, operation: str, **context: Any) -> "StorageError":
        """Build from a SQLAlchemy error; DBAPIError keeps the driver exception on .orig."""
        original = getattr(exc, "orig", None)
        message = str(original) if original is not None else str(exc)
        return cls(message=message, context={"operation": operation, **context})


class FileStorageError(CatalogError):
    """Raised when an accepted upload could not be written to disk."""

    status_code = 500

    def __init__(
        self,
        message: str = "Failed to save uploaded image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ApiRequestError(CatalogError):
    """
    Raised by the UI's API client when a request does not succeed.

    Carries the HTTP status (None for transport failures) and the server's
    `error` string. The UI turns it into a notification; it never reaches
    the global handlers.
    """

    def __init__(
        self,
        message: str = "Request failed",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.status_code = status_code
