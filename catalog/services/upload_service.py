"""
Catalog Manager - Upload Service
==================================

What:  Validates and stores uploaded entry images.
How:   Checks the declared MIME type and the size ceiling, derives a sanitized
       unique filename, and writes the bytes with aiofiles.
Who:   Called by POST /api/upload (and indirectly by the UI form, through the API).

Filename rule:
    "My Drink!.png"  →  "My_Drink_-1718000000000.png"

    1. Drop any directory part of the client-supplied name
    2. Split off the extension (kept verbatim)
    3. Replace every character outside [A-Za-z0-9_-] in the base with "_"
    4. Append "-<token>" where token is a millisecond timestamp that is
       strictly increasing inside the process

    Files are opened in exclusive-create mode, so even a token clash with a
    file from an earlier process run never overwrites anything: the next
    token is tried instead.

Validation always runs before the write, so a rejected upload leaves the
uploads directory untouched. Files are never deleted by the application.
"""

import logging
import re
import time
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from catalog.config import settings
from catalog.exceptions import FileStorageError, UploadRejectedError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {"image/jpeg", "image/png"}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")

# Attempts before giving up on finding a free name
_MAX_NAME_ATTEMPTS = 5


class UniqueTokenClock:
    """
    Millisecond timestamps that never repeat within one process.

    When two calls land in the same millisecond (or the wall clock steps
    back) the token is bumped to last + 1.
    """

    def __init__(self):
        self._last = 0

    def next_token(self) -> int:
        token = max(int(time.time() * 1000), self._last + 1)
        self._last = token
        return token


def sanitize_base_name(original_filename: str) -> Tuple[str, str]:
    """
    Split a client filename into a safe base and its original extension.

    >>> sanitize_base_name("../My Drink!.png")
    ('My_Drink_', '.png')
    """
    name = Path(original_filename.replace("\\", "/")).name
    ext = Path(name).suffix
    base = name[: len(name) - len(ext)] if ext else name
    return _UNSAFE_CHARS.sub("_", base), ext


def build_filename(original_filename: str, token: int) -> str:
    base, ext = sanitize_base_name(original_filename)
    return f"{base}-{token}{ext}"


class UploadService:
    """
    Image upload validation and storage.

    Args:
        uploads_dir: Override the target directory (used in tests).
        max_size:    Override the size ceiling in bytes.
        url_prefix:  Public path prefix the uploads directory is served under.
    """

    def __init__(
        self,
        uploads_dir: Optional[str] = None,
        max_size: Optional[int] = None,
        url_prefix: Optional[str] = None,
    ):
        self.uploads_dir = Path(uploads_dir or settings.uploads_dir).resolve()
        self.max_size = max_size or settings.max_upload_size
        self.url_prefix = (url_prefix or settings.uploads_url_prefix).rstrip("/")
        self.clock = UniqueTokenClock()

    def ensure_directory(self) -> Path:
        """Create the uploads directory if it is absent (idempotent)."""
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        return self.uploads_dir

    def validate_mime_type(self, content_type: Optional[str]) -> str:
        # "image/png; charset=binary" style parameters are ignored
        mime_type = (content_type or "").split(";", 1)[0].strip().lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise UploadRejectedError(
                message="Only JPEG and PNG images are allowed",
                context={"content_type": content_type},
            )
        return mime_type

    def validate_size(self, size: int) -> None:
        if size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise UploadRejectedError(
                message=f"File too large. Maximum size is {max_mb:g}MB",
                context={"size": size, "max_size": self.max_size},
            )

    def public_path(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    async def store(self, original_filename: str, content: bytes) -> str:
        """
        Write already-validated content under a fresh unique name.

        Returns:
            Public path of the stored file, e.g. "/uploads/lime-1718000000000.png".

        Raises:
            FileStorageError when the directory or file cannot be written.
        """
        self.ensure_directory()

        for _ in range(_MAX_NAME_ATTEMPTS):
            filename = build_filename(original_filename, self.clock.next_token())
            target = self.uploads_dir / filename
            try:
                async with aiofiles.open(target, "xb") as f:
                    await f.write(content)
            except FileExistsError:
                logger.debug("Upload name taken, retrying: %s", filename)
                continue
            except OSError as e:
                logger.error("Failed to store upload at %s: %s", target, e)
                raise FileStorageError(
                    message="Failed to save uploaded image. Please try again.",
                    context={"path": str(target), "os_error": str(e)},
                )

            logger.info("Upload stored: %s (%d bytes)", filename, len(content))
            return self.public_path(filename)

        raise FileStorageError(
            message="Failed to save uploaded image. Please try again.",
            context={"reason": "no free filename", "original": original_filename},
        )

    async def validate_and_store(
        self,
        original_filename: str,
        content_type: Optional[str],
        content: bytes,
    ) -> str:
        """Full upload pipeline: MIME check, size check, then the write."""
        self.validate_mime_type(content_type)
        self.validate_size(len(content))
        return await self.store(original_filename, content)


# ── Singleton Instance ────────────────────────────────────────────────────
upload_service = UploadService()


def get_upload_service() -> UploadService:
    """FastAPI dependency; tests override it with a temp-directory instance."""
    return upload_service
