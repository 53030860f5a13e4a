"""Client-side search over an already-fetched entry collection."""

from typing import Iterable, List, Optional

from catalog.schemas.entry import EntryResponse


def matches(entry: EntryResponse, term: str) -> bool:
    """True when the lowercased term occurs in name, ingredients, recipe or comment."""
    haystacks = [entry.name, entry.ingredients, entry.recipe]
    if entry.comment:
        haystacks.append(entry.comment)
    return any(term in text.lower() for text in haystacks)


def filter_entries(
    entries: Iterable[EntryResponse], query: Optional[str]
) -> List[EntryResponse]:
    """
    Case-insensitive substring filter; a blank query returns everything.

    Order of the input collection is preserved.
    """
    term = (query or "").strip().lower()
    if not term:
        return list(entries)
    return [entry for entry in entries if matches(entry, term)]
