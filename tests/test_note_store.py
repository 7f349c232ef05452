import json

import httpx
import pytest

from notegraph.core.exceptions import DataUnavailableException
from notegraph.db.note_store import InMemoryNoteStore
from notegraph.db.repositories.note_repository import SupabaseNoteStore
from notegraph.models.note import NoteRecord


def make_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="http://supabase.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_notes_queries_user_rows():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[
            {"id": 1, "title": "A", "tags": ["x"], "outgoing_links": ["B"], "description": "see [[B]]"},
            {"id": 2, "title": "B", "tags": None, "outgoing_links": None, "description": None},
        ])

    async with make_client(handler) as client:
        notes = await SupabaseNoteStore(client).fetch_notes_for_user("user-1")

    assert seen["path"] == "/rest/v1/notes"
    assert seen["params"]["user_id"] == "eq.user-1"
    assert seen["params"]["select"] == "id,title,tags,outgoing_links,description"
    assert notes[0] == NoteRecord(id="1", title="A", tags=["x"], outgoing_links=["B"], description="see [[B]]")
    assert notes[1].tags == [] and notes[1].outgoing_links == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(401, json={"message": "JWT expired"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"unexpected": "object"}),
        httpx.Response(200, json=[{"title": ["not", "a", "string"]}]),
    ],
)
async def test_fetch_failures_become_data_unavailable(response):
    async with make_client(lambda request: response) as client:
        with pytest.raises(DataUnavailableException):
            await SupabaseNoteStore(client).fetch_notes_for_user("user-1")


@pytest.mark.asyncio
async def test_transport_errors_propagate_for_retry():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(httpx.ConnectError):
            await SupabaseNoteStore(client).fetch_notes_for_user("user-1")


@pytest.mark.asyncio
async def test_update_note_patches_row():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["params"] = dict(request.url.params)
        seen["body"] = json.loads(request.content)
        return httpx.Response(204)

    note = NoteRecord(id="n1", title="A", outgoing_links=["New"], description="[[New]]")
    async with make_client(handler) as client:
        await SupabaseNoteStore(client, table="my_notes").update_note("user-1", note)

    assert seen["method"] == "PATCH"
    assert seen["params"] == {"id": "eq.n1", "user_id": "eq.user-1"}
    assert seen["body"]["outgoing_links"] == ["New"]


@pytest.mark.asyncio
async def test_in_memory_store_returns_copies():
    store = InMemoryNoteStore({"u": [NoteRecord(id="1", title="A")]})
    notes = await store.fetch_notes_for_user("u")
    notes[0].title = "changed"

    assert (await store.fetch_notes_for_user("u"))[0].title == "A"
    assert await store.fetch_notes_for_user("someone-else") == []


def test_in_memory_store_loads_json(tmp_path):
    path = tmp_path / "notes.json"
    path.write_text(json.dumps([{"id": "1", "title": "A", "outgoing_links": ["B"]}]), encoding="utf-8")
    store = InMemoryNoteStore.from_json_file(path, "u")
    assert store.notes_by_user["u"][0].outgoing_links == ["B"]


def test_in_memory_store_rejects_bad_json(tmp_path):
    path = tmp_path / "notes.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(DataUnavailableException):
        InMemoryNoteStore.from_json_file(path, "u")
