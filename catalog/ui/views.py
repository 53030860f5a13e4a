"""
Catalog Manager - UI View Models and Rendering
================================================

What:  Turns an AppState into view models and renders them to HTML.
How:   build_page_view() is pure data shaping; render_page() hands the view to
       a Jinja2 environment created with autoescape=True. Escaping happens
       there, at the render boundary, for every user-supplied string.

Image references are additionally restricted to http(s) URLs and
site-relative paths, since escaping alone does not neutralise a
"javascript:" URL in a src attribute.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlencode, urlsplit

from fastapi.templating import Jinja2Templates
from jinja2 import Environment, FileSystemLoader

from catalog.ui.search import filter_entries
from catalog.ui.state import AppState, FormValues, Notification

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(
    env=Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=True)
)


@dataclass(frozen=True)
class EntryCardView:
    id: int
    name: str
    ingredients: str
    recipe: str
    image_url: Optional[str]
    comment: Optional[str]
    created_at: str
    expanded: bool
    edit_url: str
    delete_url: str
    toggle_url: str


@dataclass(frozen=True)
class EntryFormView:
    title: str
    submit_label: str
    editing_id: Optional[int]
    values: FormValues
    cancel_url: Optional[str]


@dataclass(frozen=True)
class DeleteConfirmView:
    entry_id: int
    name: str
    action_url: str
    cancel_url: str


@dataclass(frozen=True)
class PageView:
    cards: Tuple[EntryCardView, ...]
    form: EntryFormView
    search_query: str
    total: int
    notification: Optional[Notification]
    confirm: Optional[DeleteConfirmView]


def safe_image_url(image_ref: Optional[str]) -> Optional[str]:
    """Return the reference if it is an http(s) URL or a site-relative path."""
    if not image_ref:
        return None
    ref = image_ref.strip()
    if ref.startswith("/") and not ref.startswith("//"):
        return ref
    if urlsplit(ref).scheme.lower() in {"http", "https"}:
        return ref
    return None


def page_url(search_query: str = "", **params: Optional[int]) -> str:
    """Link back to the page, keeping the current search."""
    query = {"q": search_query} if search_query else {}
    query.update({key: value for key, value in params.items() if value is not None})
    return "/?" + urlencode(query) if query else "/"


def build_card(state: AppState, entry) -> EntryCardView:
    q = state.search_query
    expanded = state.expanded_card_id == entry.id
    return EntryCardView(
        id=entry.id,
        name=entry.name,
        ingredients=entry.ingredients,
        recipe=entry.recipe,
        image_url=safe_image_url(entry.image_ref),
        comment=entry.comment,
        created_at=entry.created_at.strftime("%Y-%m-%d %H:%M"),
        expanded=expanded,
        edit_url=page_url(q, edit=entry.id),
        delete_url=page_url(q, delete=entry.id),
        toggle_url=page_url(q, expanded=None if expanded else entry.id),
    )


def build_page_view(state: AppState) -> PageView:
    visible = filter_entries(state.entries, state.search_query)

    editing = state.editing_id is not None
    form = EntryFormView(
        title="Edit Entry" if editing else "Add New Entry",
        submit_label="Update Entry" if editing else "Add Entry",
        editing_id=state.editing_id,
        values=state.form,
        cancel_url=page_url(state.search_query) if editing else None,
    )

    confirm = None
    target = state.find(state.delete_id)
    if target is not None:
        confirm = DeleteConfirmView(
            entry_id=target.id,
            name=target.name,
            action_url=f"/ui/entries/{target.id}/delete",
            cancel_url=page_url(state.search_query),
        )

    return PageView(
        cards=tuple(build_card(state, entry) for entry in visible),
        form=form,
        search_query=state.search_query,
        total=len(state.entries),
        notification=state.notification,
        confirm=confirm,
    )


def render_page(view: PageView) -> str:
    return templates.get_template("index.html").render(page=view)
