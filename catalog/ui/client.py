"""
Catalog Manager - API Client for the UI
=========================================

What:  Async HTTP client for the /api endpoints, used by the UI controller.
Why:   The presentation layer consumes exactly the JSON contract any other
       client would; it never touches services or the database.
How:   Wraps an httpx.AsyncClient. Inside the server the UI routes build one
       on httpx.ASGITransport (no network hop); pointed at a base URL it
       drives a remote server just the same.

Failures:
    non-2xx response   → ApiRequestError(status_code, server's `error` text)
    transport failure  → ApiRequestError(None, description)
"""

import logging
from typing import Any, List, Optional

import httpx

from catalog.exceptions import ApiRequestError
from catalog.schemas.entry import EntryResponse

logger = logging.getLogger(__name__)

ENTRIES_PATH = "/api/entries"
UPLOAD_PATH = "/api/upload"


class CatalogClient:
    """
    Thin async wrapper over the catalog API.

    Args:
        http: A configured httpx.AsyncClient (base_url set). The caller owns
              its lifecycle; use `async with` on the httpx client.
    """

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def _request(self, method: str, url: str, fallback: str, **kwargs: Any) -> Any:
        try:
            response = await self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("API %s %s failed: %s", method, url, e)
            raise ApiRequestError(message=fallback, context={"error": str(e)})

        if response.is_success:
            return response.json()

        message = fallback
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
        except ValueError:
            pass
        logger.info("API %s %s -> %d: %s", method, url, response.status_code, message)
        raise ApiRequestError(message=message, status_code=response.status_code)

    async def list_entries(self) -> List[EntryResponse]:
        data = await self._request("GET", ENTRIES_PATH, "Failed to load entries")
        return [EntryResponse.model_validate(item) for item in data]

    async def get_entry(self, entry_id: int) -> EntryResponse:
        data = await self._request("GET", f"{ENTRIES_PATH}/{entry_id}", "Failed to load entry")
        return EntryResponse.model_validate(data)

    async def create_entry(self, payload: dict) -> EntryResponse:
        data = await self._request("POST", ENTRIES_PATH, "Failed to create entry", json=payload)
        return EntryResponse.model_validate(data)

    async def update_entry(self, entry_id: int, payload: dict) -> str:
        data = await self._request(
            "PUT", f"{ENTRIES_PATH}/{entry_id}", "Failed to update entry", json=payload
        )
        return data.get("message", "")

    async def delete_entry(self, entry_id: int) -> str:
        data = await self._request("DELETE", f"{ENTRIES_PATH}/{entry_id}", "Failed to delete entry")
        return data.get("message", "")

    async def upload_image(
        self, filename: str, content: bytes, content_type: Optional[str]
    ) -> str:
        """Upload one image; returns the filePath to use as imageRef."""
        files = {"image": (filename, content, content_type or "application/octet-stream")}
        data = await self._request("POST", UPLOAD_PATH, "Failed to upload image", files=files)
        return data["filePath"]
