"""
Catalog Manager - UI Tests
============================

What:  Search, state transitions, view building and escaping, the controller
       flows, and the HTML routes end to end.
How:   Pure functions are tested directly; the controller runs against a
       CatalogClient whose httpx client talks to the test app in-process.

What we test:
    ✅ Search is case-insensitive, covers the comment, blank query shows all
    ✅ Selections are dropped when their entry disappears
    ✅ User text is escaped on render; unsafe image URLs are not rendered
    ✅ A failed save keeps the form and the previous entries
    ✅ Create, update and delete through the HTML form routes
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from catalog.exceptions import ApiRequestError
from catalog.schemas.entry import EntryResponse
from catalog.ui.client import CatalogClient
from catalog.ui.controller import CatalogController, ImageUpload
from catalog.ui.search import filter_entries
from catalog.ui.state import (
    AppState,
    FormValues,
    begin_edit,
    cancel_edit,
    request_delete,
    toggle_card,
    with_entries,
    with_search,
)
from catalog.ui.views import build_page_view, page_url, render_page, safe_image_url


def make_entry(entry_id, name="Mule", comment=None, **overrides):
    values = {
        "id": entry_id,
        "name": name,
        "ingredients": "Ginger beer, lime",
        "recipe": "Build over ice",
        "image_ref": None,
        "comment": comment,
        "created_at": datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return EntryResponse(**values)


# ══════════════════════════════════════════════════════════════════════════
# Search
# ══════════════════════════════════════════════════════════════════════════

class TestSearch:

    def setup_method(self):
        self.entries = [
            make_entry(1, "Hot Rüuski", comment="Forget all your problems"),
            make_entry(2, "Cold Soul", comment="Discuss the FUTURE"),
        ]

    def test_comment_only_match_is_case_insensitive(self):
        result = filter_entries(self.entries, "future")

        assert [e.id for e in result] == [2]

    def test_blank_query_returns_everything(self):
        assert filter_entries(self.entries, "") == self.entries
        assert filter_entries(self.entries, "   ") == self.entries
        assert filter_entries(self.entries, None) == self.entries

    def test_no_match_returns_empty(self):
        assert filter_entries(self.entries, "tequila") == []

    def test_entries_without_comment_are_searchable(self):
        entries = [make_entry(3, "Plain", comment=None)]

        assert filter_entries(entries, "ginger") == entries


# ══════════════════════════════════════════════════════════════════════════
# State
# ══════════════════════════════════════════════════════════════════════════

class TestStateTransitions:

    def test_begin_edit_copies_entry_into_form(self):
        state = with_entries(AppState(), [make_entry(1, comment="note")])

        editing = begin_edit(state, 1)

        assert editing.editing_id == 1
        assert editing.form.name == "Mule"
        assert editing.form.comment == "note"
        assert state.editing_id is None

    def test_begin_edit_unknown_id_is_ignored(self):
        state = with_entries(AppState(), [make_entry(1)])

        assert begin_edit(state, 99) is state

    def test_cancel_edit_clears_form(self):
        state = begin_edit(with_entries(AppState(), [make_entry(1)]), 1)

        cleared = cancel_edit(state)

        assert cleared.editing_id is None
        assert cleared.form == FormValues()

    def test_refetch_drops_stale_selections(self):
        state = with_entries(AppState(), [make_entry(1), make_entry(2)])
        state = request_delete(toggle_card(begin_edit(state, 1), 1), 1)

        refreshed = with_entries(state, [make_entry(2)])

        assert refreshed.editing_id is None
        assert refreshed.delete_id is None
        assert refreshed.expanded_card_id is None

    def test_toggle_card_twice_collapses(self):
        state = with_entries(AppState(), [make_entry(1)])

        assert toggle_card(toggle_card(state, 1), 1).expanded_card_id is None

    def test_with_search_keeps_entries_and_selection(self):
        state = begin_edit(with_entries(AppState(), [make_entry(1)]), 1)

        searched = with_search(state, "mule")

        assert searched.search_query == "mule"
        assert searched.entries == state.entries
        assert searched.editing_id == 1
        assert with_search(searched, None).search_query == ""

    def test_uploaded_path_wins_over_typed_url(self):
        form = FormValues(name="a", ingredients="b", recipe="c", image_ref="https://x/y.png")

        assert form.to_payload("/uploads/y-1.png")["imageRef"] == "/uploads/y-1.png"
        assert form.to_payload()["imageRef"] == "https://x/y.png"
        assert FormValues().to_payload()["comment"] is None


# ══════════════════════════════════════════════════════════════════════════
# Views
# ══════════════════════════════════════════════════════════════════════════

class TestViews:

    @pytest.mark.parametrize(
        "ref, expected",
        [
            ("/uploads/a-1.png", "/uploads/a-1.png"),
            ("https://example.com/a.png", "https://example.com/a.png"),
            ("javascript:alert(1)", None),
            ("//evil.example/a.png", None),
            ("", None),
            (None, None),
        ],
    )
    def test_safe_image_url(self, ref, expected):
        assert safe_image_url(ref) == expected

    def test_page_url_keeps_search(self):
        assert page_url("lime", edit=3) == "/?q=lime&edit=3"
        assert page_url() == "/"

    def test_user_text_is_escaped(self):
        hostile = make_entry(
            1,
            name="<script>alert('x')</script>",
            comment="<img src=x onerror=alert(1)>",
        )
        state = with_entries(AppState(), [hostile])

        html = render_page(build_page_view(state))

        assert "<script>alert" not in html
        assert "&lt;script&gt;" in html
        assert "<img src=x" not in html

    def test_empty_list_shows_placeholder(self):
        html = render_page(build_page_view(AppState()))

        assert "No entries found." in html

    def test_search_filters_cards(self):
        state = AppState(search_query="soul")
        state = with_entries(state, [make_entry(1, "Hot Rüuski"), make_entry(2, "Cold Soul")])

        view = build_page_view(state)

        assert [card.id for card in view.cards] == [2]
        assert view.total == 2

    def test_edit_mode_labels(self):
        state = begin_edit(with_entries(AppState(), [make_entry(1)]), 1)

        view = build_page_view(state)

        assert view.form.title == "Edit Entry"
        assert view.form.submit_label == "Update Entry"
        assert view.form.cancel_url == "/"

    def test_delete_confirmation_names_entry(self):
        state = request_delete(with_entries(AppState(), [make_entry(4, "Cold Soul")]), 4)

        view = build_page_view(state)

        assert view.confirm.name == "Cold Soul"
        assert view.confirm.action_url == "/ui/entries/4/delete"


# ══════════════════════════════════════════════════════════════════════════
# Controller
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def controller(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield CatalogController(CatalogClient(http))


class TestController:

    @pytest.mark.asyncio
    async def test_submit_creates_and_refetches(self, controller):
        form = FormValues(name="Cold Soul", ingredients="Wodka, Ice", recipe="Shake")

        state = await controller.submit(AppState(), form)

        assert state.notification.message == "Entry added successfully!"
        assert [e.name for e in state.entries] == ["Cold Soul"]
        assert state.form == FormValues()

    @pytest.mark.asyncio
    async def test_submit_updates_when_editing(self, controller):
        state = await controller.submit(
            AppState(), FormValues(name="Old", ingredients="a", recipe="b")
        )
        state = begin_edit(state, state.entries[0].id)

        state = await controller.submit(state, FormValues(name="New", ingredients="a", recipe="b"))

        assert state.notification.message == "Entry updated successfully!"
        assert [e.name for e in state.entries] == ["New"]
        assert state.editing_id is None

    @pytest.mark.asyncio
    async def test_failed_save_keeps_form_and_entries(self, controller):
        state = await controller.submit(
            AppState(), FormValues(name="Keep", ingredients="a", recipe="b")
        )
        before = state.entries
        broken = FormValues(name="No recipe", ingredients="a", recipe="")

        state = await controller.submit(state, broken)

        assert state.notification.kind == "error"
        assert "Name, ingredients, and recipe are required" in state.notification.message
        assert state.form == broken
        assert state.entries == before

    @pytest.mark.asyncio
    async def test_upload_then_create(self, controller, sample_png_bytes):
        form = FormValues(name="Pic", ingredients="a", recipe="b", image_ref="https://x/y.png")
        image = ImageUpload(filename="pic.png", content=sample_png_bytes, content_type="image/png")

        state = await controller.submit(AppState(), form, image)

        assert state.entries[0].image_ref.startswith("/uploads/pic-")

    @pytest.mark.asyncio
    async def test_rejected_upload_saves_nothing(self, controller):
        form = FormValues(name="Pic", ingredients="a", recipe="b")
        image = ImageUpload(filename="doc.pdf", content=b"%PDF", content_type="application/pdf")

        state = await controller.submit(AppState(), form, image)

        assert state.notification.kind == "error"
        assert "Only JPEG and PNG images are allowed" in state.notification.message
        assert state.entries == ()

    @pytest.mark.asyncio
    async def test_confirm_delete(self, controller):
        state = await controller.submit(
            AppState(), FormValues(name="Gone", ingredients="a", recipe="b")
        )
        state = request_delete(state, state.entries[0].id)

        state = await controller.confirm_delete(state)

        assert state.entries == ()
        assert state.delete_id is None
        assert state.notification.message == "Entry deleted successfully!"

    @pytest.mark.asyncio
    async def test_confirm_delete_without_request_is_a_no_op(self, controller):
        state = AppState()

        assert await controller.confirm_delete(state) is state

    @pytest.mark.asyncio
    async def test_load_failure_keeps_previous_entries(self):
        client = AsyncMock(spec=CatalogClient)
        client.list_entries.side_effect = ApiRequestError(message="boom", status_code=500)
        previous = with_entries(AppState(), [make_entry(1)])

        state = await CatalogController(client).load(previous)

        assert state.entries == previous.entries
        assert state.notification.message == "Error loading entries"


# ══════════════════════════════════════════════════════════════════════════
# HTML routes
# ══════════════════════════════════════════════════════════════════════════

class TestUiRoutes:

    @pytest.mark.asyncio
    async def test_index_renders(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "No entries found." in response.text

    @pytest.mark.asyncio
    async def test_form_post_creates_entry(self, test_client):
        response = await test_client.post(
            "/ui/entries",
            data={"name": "Cold Soul", "ingredients": "Wodka", "recipe": "Shake", "comment": "Icy"},
            follow_redirects=True,
        )

        assert response.status_code == 200
        assert "Entry added successfully!" in response.text
        entries = (await test_client.get("/api/entries")).json()
        assert [e["name"] for e in entries] == ["Cold Soul"]
        assert entries[0]["comment"] == "Icy"

    @pytest.mark.asyncio
    async def test_form_post_with_image(self, test_client, sample_jpeg_bytes):
        response = await test_client.post(
            "/ui/entries",
            data={"name": "Pic", "ingredients": "a", "recipe": "b"},
            files={"image": ("photo.jpg", sample_jpeg_bytes, "image/jpeg")},
            follow_redirects=True,
        )

        assert response.status_code == 200
        entry = (await test_client.get("/api/entries")).json()[0]
        assert entry["imageRef"].startswith("/uploads/photo-")

    @pytest.mark.asyncio
    async def test_edit_link_prefills_form(self, test_client, cold_soul):
        created = (await test_client.post("/api/entries", json=cold_soul)).json()

        response = await test_client.get(f"/?edit={created['id']}")

        assert "Edit Entry" in response.text
        assert 'value="Cold Soul"' in response.text

    @pytest.mark.asyncio
    async def test_search_query_filters_page(self, test_client):
        await test_client.post("/api/entries", json={"name": "Alpha", "ingredients": "a", "recipe": "a"})
        await test_client.post(
            "/api/entries",
            json={"name": "Beta", "ingredients": "b", "recipe": "b", "comment": "Smoky Finish"},
        )

        response = await test_client.get("/?q=smoky")

        assert "Beta" in response.text
        assert "Alpha" not in response.text

    @pytest.mark.asyncio
    async def test_delete_flow(self, test_client, cold_soul):
        created = (await test_client.post("/api/entries", json=cold_soul)).json()

        confirm_page = await test_client.get(f"/?delete={created['id']}")
        assert 'id="delete-entry-name"' in confirm_page.text

        response = await test_client.post(
            f"/ui/entries/{created['id']}/delete", follow_redirects=True
        )

        assert "Entry deleted successfully!" in response.text
        assert (await test_client.get("/api/entries")).json() == []

    @pytest.mark.asyncio
    async def test_successful_post_redirects_with_notice(self, test_client):
        response = await test_client.post(
            "/ui/entries",
            data={"q": "soul", "name": "Cold Soul", "ingredients": "Wodka", "recipe": "Shake"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/?q=soul&notice=Entry+added+successfully%21"

    @pytest.mark.asyncio
    async def test_failed_post_rerenders_with_form_kept(self, test_client):
        response = await test_client.post(
            "/ui/entries",
            data={"name": "Half done", "ingredients": "Wodka", "recipe": ""},
        )

        assert response.status_code == 200
        assert "Error saving entry: Name, ingredients, and recipe are required" in response.text
        assert 'value="Half done"' in response.text
        assert (await test_client.get("/api/entries")).json() == []

    @pytest.mark.asyncio
    async def test_delete_of_out_of_range_id_reports_not_found(self, test_client):
        response = await test_client.post("/ui/entries/99999999999999999999/delete")

        assert response.status_code == 200
        assert "Error deleting entry: Entry not found" in response.text

    @pytest.mark.asyncio
    async def test_search_param_reaches_the_page(self, test_client):
        response = await test_client.get("/?q=Smoky")

        assert 'value="Smoky"' in response.text
