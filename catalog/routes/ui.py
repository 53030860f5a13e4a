"""
Catalog Manager - UI Route Handlers
=====================================

What:  HTML pages for the browser.
How:   Each request builds an AppState from its query/form parameters, runs
       the controller against the API through an in-process httpx transport,
       and renders the resulting state.

    GET  /                          list (+ ?q= search, ?edit=, ?delete=, ?expanded=, ?notice=)
    POST /ui/entries                create or update from the form (optional image file)
    POST /ui/entries/{id}/delete    the confirmation step of a delete

A successful mutation answers 303 back to / with the notification in the
query string, so a browser reload never repeats it. A failed one re-renders
the page directly, keeping the form contents.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import AsyncIterator, Optional, Union
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse

from catalog.config import settings
from catalog.middleware.request_id import request_id_var
from catalog.ui.client import CatalogClient
from catalog.ui.controller import CatalogController, ImageUpload
from catalog.ui.state import (
    AppState,
    FormValues,
    begin_edit,
    notify,
    request_delete,
    toggle_card,
    with_search,
)
from catalog.ui.views import build_page_view, templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["UI"], include_in_schema=False)


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        return None


@asynccontextmanager
async def api_controller(request: Request) -> AsyncIterator[CatalogController]:
    """A controller whose client calls this same application in-process."""
    transport = httpx.ASGITransport(app=request.app)
    headers = {"X-Request-ID": request_id_var.get("")} if request_id_var.get("") else {}
    async with httpx.AsyncClient(
        transport=transport,
        base_url=str(request.base_url),
        headers=headers,
    ) as http:
        yield CatalogController(CatalogClient(http))


def _render(request: Request, state: AppState) -> HTMLResponse:
    return templates.TemplateResponse(request, "index.html", {"page": build_page_view(state)})


def _finish(request: Request, state: AppState) -> Union[HTMLResponse, RedirectResponse]:
    notification = state.notification
    if notification is None or notification.kind == "error":
        return _render(request, state)

    query = {"q": state.search_query} if state.search_query else {}
    query["notice"] = notification.message
    return RedirectResponse("/?" + urlencode(query), status_code=303)


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    q: str = "",
    edit: Optional[str] = None,
    delete: Optional[str] = None,
    expanded: Optional[str] = None,
    notice: Optional[str] = None,
    kind: str = "success",
) -> HTMLResponse:
    async with api_controller(request) as controller:
        state = await controller.load(with_search(AppState(), q))

    edit_id = _optional_int(edit)
    if edit_id is not None:
        state = begin_edit(state, edit_id)
    delete_id = _optional_int(delete)
    if delete_id is not None:
        state = request_delete(state, delete_id)
    expanded_id = _optional_int(expanded)
    if expanded_id is not None:
        state = toggle_card(state, expanded_id)
    if notice and state.notification is None:
        state = notify(state, notice, "error" if kind == "error" else "success")

    return _render(request, state)


@router.post("/ui/entries", response_model=None)
async def submit_entry(
    request: Request,
    editing_id: str = Form(default=""),
    q: str = Form(default=""),
    name: str = Form(default=""),
    ingredients: str = Form(default=""),
    recipe: str = Form(default=""),
    image_ref: str = Form(default=""),
    comment: str = Form(default=""),
    image: Optional[UploadFile] = File(default=None),
) -> Union[HTMLResponse, RedirectResponse]:
    form = FormValues(
        name=name,
        ingredients=ingredients,
        recipe=recipe,
        image_ref=image_ref,
        comment=comment,
    )

    upload = None
    if image is not None and image.filename:
        try:
            # One byte over the ceiling is enough for the API to reject it
            content = await image.read(settings.max_upload_size + 1)
            upload = ImageUpload(
                filename=image.filename,
                content=content,
                content_type=image.content_type,
            )
        finally:
            await image.close()

    async with api_controller(request) as controller:
        state = await controller.load(with_search(AppState(), q))
        state = replace(state, editing_id=_optional_int(editing_id), form=form)
        state = await controller.submit(state, form, upload)

    return _finish(request, state)


@router.post("/ui/entries/{entry_id}/delete", response_model=None)
async def confirm_delete(
    request: Request,
    entry_id: str,
    q: str = Form(default=""),
) -> Union[HTMLResponse, RedirectResponse]:
    async with api_controller(request) as controller:
        state = await controller.load(with_search(AppState(), q))
        # Set directly: an id missing from the fetched list must still reach the API's 404
        state = replace(state, delete_id=_optional_int(entry_id))
        state = await controller.confirm_delete(state)

    return _finish(request, state)
