"""
Catalog Manager - UI Application State
========================================

What:  The complete state of one rendering of the catalog page.
Why:   Every UI function receives the state it works on and returns a new
       one. Nothing is kept in module globals, so two browser requests can
       never see each other's edit or delete selection.
How:   Frozen dataclasses plus pure transition functions built on
       dataclasses.replace.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from catalog.schemas.entry import EntryResponse


@dataclass(frozen=True)
class Notification:
    """Transient message shown above the list ("success" or "error")."""
    message: str
    kind: str = "success"


@dataclass(frozen=True)
class FormValues:
    """Contents of the create/edit form, as plain strings."""
    name: str = ""
    ingredients: str = ""
    recipe: str = ""
    image_ref: str = ""
    comment: str = ""

    @classmethod
    def from_entry(cls, entry: EntryResponse) -> "FormValues":
        return cls(
            name=entry.name,
            ingredients=entry.ingredients,
            recipe=entry.recipe,
            image_ref=entry.image_ref or "",
            comment=entry.comment or "",
        )

    def to_payload(self, image_ref: Optional[str] = None) -> dict:
        """
        JSON body for create/update, using the wire field names.

        An uploaded image path (image_ref argument) wins over the typed URL.
        Empty optional fields are sent as null.
        """
        ref = image_ref or self.image_ref.strip() or None
        return {
            "name": self.name,
            "ingredients": self.ingredients,
            "recipe": self.recipe,
            "imageRef": ref,
            "comment": self.comment.strip() or None,
        }


@dataclass(frozen=True)
class AppState:
    entries: Tuple[EntryResponse, ...] = ()
    editing_id: Optional[int] = None
    delete_id: Optional[int] = None
    expanded_card_id: Optional[int] = None
    search_query: str = ""
    form: FormValues = field(default_factory=FormValues)
    notification: Optional[Notification] = None

    def find(self, entry_id: Optional[int]) -> Optional[EntryResponse]:
        if entry_id is None:
            return None
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None


# ── Transitions ───────────────────────────────────────────────────────────

def with_entries(state: AppState, entries) -> AppState:
    """
    Replace the collection after a fetch.

    Selections pointing at entries that no longer exist are dropped.
    """
    new = replace(state, entries=tuple(entries))
    if new.editing_id is not None and new.find(new.editing_id) is None:
        new = replace(new, editing_id=None, form=FormValues())
    if new.find(new.delete_id) is None:
        new = replace(new, delete_id=None)
    if new.find(new.expanded_card_id) is None:
        new = replace(new, expanded_card_id=None)
    return new


def begin_edit(state: AppState, entry_id: int) -> AppState:
    """Populate the form from the in-memory copy of the entry (no refetch)."""
    entry = state.find(entry_id)
    if entry is None:
        return state
    return replace(state, editing_id=entry.id, form=FormValues.from_entry(entry))


def cancel_edit(state: AppState) -> AppState:
    return replace(state, editing_id=None, form=FormValues())


def request_delete(state: AppState, entry_id: int) -> AppState:
    """First half of the two-step delete: remember which entry to confirm."""
    if state.find(entry_id) is None:
        return state
    return replace(state, delete_id=entry_id)


def cancel_delete(state: AppState) -> AppState:
    return replace(state, delete_id=None)


def toggle_card(state: AppState, entry_id: int) -> AppState:
    expanded = None if state.expanded_card_id == entry_id else entry_id
    return replace(state, expanded_card_id=expanded)


def with_search(state: AppState, query: Optional[str]) -> AppState:
    """Set the search text; filtering happens at render over the fetched entries."""
    return replace(state, search_query=query or "")


def with_form(state: AppState, form: FormValues) -> AppState:
    return replace(state, form=form)


def notify(state: AppState, message: str, kind: str = "success") -> AppState:
    return replace(state, notification=Notification(message=message, kind=kind))
