"""
Catalog Manager - UI Controller
=================================

What:  The user-facing flows: load, submit (create or update), confirm delete.
How:   Each method takes an AppState and returns the next AppState. Every
       successful mutation is followed by a full re-fetch of the collection;
       nothing is patched locally.

Failure policy:
    Any ApiRequestError becomes an error notification. The entries already in
    the state are kept as they were, and a failed submit keeps the form
    contents so the user can correct and resend.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from catalog.exceptions import ApiRequestError
from catalog.ui.client import CatalogClient
from catalog.ui.state import (
    AppState,
    FormValues,
    cancel_delete,
    cancel_edit,
    notify,
    with_entries,
    with_form,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageUpload:
    """A local file chosen in the form's file input."""
    filename: str
    content: bytes
    content_type: Optional[str] = None


class CatalogController:
    def __init__(self, client: CatalogClient):
        self.client = client

    async def load(self, state: AppState) -> AppState:
        """Fetch the whole collection once and put it into the state."""
        try:
            entries = await self.client.list_entries()
        except ApiRequestError as e:
            logger.warning("Loading entries failed: %s", e.message)
            return notify(state, "Error loading entries", "error")
        return with_entries(state, entries)

    async def upload_image(self, image: ImageUpload) -> str:
        """Upload a chosen file; the returned path replaces any typed image URL."""
        return await self.client.upload_image(image.filename, image.content, image.content_type)

    async def submit(
        self,
        state: AppState,
        form: FormValues,
        image: Optional[ImageUpload] = None,
    ) -> AppState:
        """
        Save the form: update when an edit is active, create otherwise.

        A chosen image is uploaded first. If the save then fails, the uploaded
        path is kept in the form so a resubmit does not upload it again.
        """
        uploaded_ref: Optional[str] = None
        try:
            if image is not None:
                uploaded_ref = await self.upload_image(image)
            payload = form.to_payload(uploaded_ref)

            if state.editing_id is not None:
                await self.client.update_entry(state.editing_id, payload)
                message = "Entry updated successfully!"
            else:
                await self.client.create_entry(payload)
                message = "Entry added successfully!"
        except ApiRequestError as e:
            kept = replace(form, image_ref=uploaded_ref) if uploaded_ref else form
            return notify(with_form(state, kept), f"Error saving entry: {e.message}", "error")

        refreshed = await self.load(cancel_edit(state))
        if refreshed.notification is not None and refreshed.notification.kind == "error":
            return refreshed
        return notify(refreshed, message)

    async def confirm_delete(self, state: AppState) -> AppState:
        """Second half of the two-step delete; does nothing unless a delete was requested."""
        if state.delete_id is None:
            return state

        try:
            await self.client.delete_entry(state.delete_id)
        except ApiRequestError as e:
            return notify(cancel_delete(state), f"Error deleting entry: {e.message}", "error")

        refreshed = await self.load(cancel_delete(state))
        if refreshed.notification is not None and refreshed.notification.kind == "error":
            return refreshed
        return notify(refreshed, "Entry deleted successfully!")
