import pytest
from fastapi.testclient import TestClient

from notegraph.api import router as router_module
from notegraph.core.exceptions import DataUnavailableException
from notegraph.db.note_store import InMemoryNoteStore
from notegraph.main import app
from notegraph.models.note import NoteRecord
from notegraph.services.session_store import GraphSessionStore

HEADERS = {"X-User-ID": "user-1"}

NOTES = [
    NoteRecord(id="A", title="A", tags=["start"], outgoing_links=["B"], description="see [[B]]"),
    NoteRecord(id="B", title="B", description="no links"),
    NoteRecord(id="C", title="C", outgoing_links=["Nonexistent"], description="see [[Nonexistent]]"),
]


class UnavailableStore:
    async def fetch_notes_for_user(self, user_id: str):
        raise DataUnavailableException("Note store failed to fetch notes (HTTP 500).")

    async def update_note(self, user_id, note):
        raise DataUnavailableException()


@pytest.fixture
def client():
    store = InMemoryNoteStore({"user-1": [note.model_copy() for note in NOTES]})
    sessions = GraphSessionStore()
    app.dependency_overrides[router_module.get_note_store] = lambda: store
    app.dependency_overrides[router_module.get_sessions] = lambda: sessions
    yield TestClient(app)
    app.dependency_overrides = {}


def test_load_graph_returns_laid_out_graph(client):
    response = client.get("/graph", params={"seed": 1}, headers=HEADERS)
    assert response.status_code == 200

    data = response.json()
    assert {node["id"] for node in data["nodes"]} == {"A", "B", "C"}
    assert data["edges"] == [{"source_id": "A", "target_id": "B"}]
    assert data["unresolved_links"] == [{"source_id": "C", "target_title": "Nonexistent"}]


def test_queries_need_a_loaded_graph(client):
    response = client.get("/graph/search", params={"q": "a"}, headers=HEADERS)
    assert response.status_code == 404


def test_connected_and_search_queries(client):
    client.get("/graph", headers=HEADERS)

    connected = client.get("/graph/nodes/A/connected", params={"degrees": 1}, headers=HEADERS)
    assert connected.json() == {"node_ids": ["A", "B"]}

    isolated = client.get("/graph/nodes/C/connected", headers=HEADERS)
    assert isolated.json() == {"node_ids": ["C"]}

    missing = client.get("/graph/nodes/nope/connected", headers=HEADERS)
    assert missing.json() == {"node_ids": []}

    search = client.get("/graph/search", params={"q": "START"}, headers=HEADERS)
    assert search.json() == {"node_ids": ["A"]}

    empty = client.get("/graph/search", params={"q": ""}, headers=HEADERS)
    assert empty.json() == {"node_ids": []}


def test_node_at_position_hits_node_center(client):
    graph = client.get("/graph", params={"seed": 4}, headers=HEADERS).json()
    node = next(n for n in graph["nodes"] if n["id"] == "B")
    viewport = {"width": 800, "height": 600}
    transform = {"a": 1.5, "d": 1.5, "tx": -40, "ty": 25}
    point = {
        "x": 1.5 * (400 + node["x"]) - 40,
        "y": 1.5 * (300 + node["y"]) + 25,
    }

    hit = client.post(
        "/graph/node-at-position",
        json={"point": point, "transform": transform, "viewport": viewport},
        headers=HEADERS,
    )
    assert hit.json() == {"node_id": "B"}

    hidden = client.post(
        "/graph/node-at-position",
        json={"point": point, "transform": transform, "viewport": viewport, "visible_node_ids": ["A"]},
        headers=HEADERS,
    )
    assert hidden.json() == {"node_id": None}


def test_closing_session_discards_graph(client):
    client.get("/graph", headers=HEADERS)
    assert client.delete("/graph/session", headers=HEADERS).status_code == 204
    assert client.get("/graph/search", params={"q": "A"}, headers=HEADERS).status_code == 404


def test_store_failure_is_retryable_503(client):
    app.dependency_overrides[router_module.get_note_store] = lambda: UnavailableStore()
    response = client.get("/graph", headers=HEADERS)

    assert response.status_code == 503
    assert response.json()["retryable"] is True


def test_missing_user_header_is_rejected(client):
    assert client.get("/graph").status_code == 422


def test_rename_to_blank_title_is_bad_request(client):
    response = client.post("/links/rename", json={"old_title": "B", "new_title": ""}, headers=HEADERS)
    assert response.status_code == 400
    assert response.json()["message"] == "New note title cannot be empty."


def test_parse_and_link_routes(client):
    parsed = client.post("/links/parse", json={"text": "[[B]] and [[C|see c]]"})
    assert [link["target_title"] for link in parsed.json()] == ["B", "C"]

    backlinks = client.get("/links/backlinks", params={"title": "B"}, headers=HEADERS)
    assert [note["id"] for note in backlinks.json()] == ["A"]

    renamed = client.post("/links/rename", json={"old_title": "B", "new_title": "Bee"}, headers=HEADERS)
    assert renamed.json() == {"updated": 1}

    suggestions = client.get("/links/suggestions", params={"partial": "b"}, headers=HEADERS)
    assert suggestions.json() == ["B"]


def test_note_by_title_route(client):
    found = client.get("/links/by-title", params={"title": "B"}, headers=HEADERS)
    assert found.status_code == 200
    assert found.json()["id"] == "B"

    missing = client.get("/links/by-title", params={"title": "Nonexistent"}, headers=HEADERS)
    assert missing.status_code == 404
    assert missing.json()["message"] == "No note titled 'Nonexistent'."


def test_notes_exist_route(client):
    response = client.get("/links/exists", params=[("titles", "A"), ("titles", "Nonexistent")], headers=HEADERS)
    assert response.json() == {"A": True, "Nonexistent": False}

    assert client.get("/links/exists", headers=HEADERS).json() == {}
