# notegraph/api/router.py
import httpx
from fastapi import APIRouter, Depends, status, Response, Header, Query, Request
from notegraph.core.config import settings
from notegraph.core.exceptions import InvalidInputException, NoteNotFoundException
from notegraph.core.limiter import limiter
from notegraph.db.client import get_http_client
from notegraph.db.note_store import NoteStore
from notegraph.db.repositories.note_repository import SupabaseNoteStore
from notegraph.models.geometry import HitTestRequest
from notegraph.models.graph import GraphData, NodeHit, NodeIdSet
from notegraph.models.note import Link, NoteRecord, ParseRequest, RenameRequest, RenameResult
from notegraph.services.graph_query import apply_search_filter, get_connected_nodes, get_node_at_position
from notegraph.services.graph_service import GraphService
from notegraph.services.link_parser import parse_links
from notegraph.services.link_service import LinkService
from notegraph.services.session_store import GraphSessionStore

router = APIRouter()

graph_sessions = GraphSessionStore(
    max_sessions=settings.MAX_GRAPH_SESSIONS,
    ttl_seconds=settings.GRAPH_SESSION_TTL_SECONDS,
)

# Dependency to extract the User ID from a header
def get_user_id(x_user_id: str = Header(..., description="Id of the user whose notes are graphed.")) -> str:
    if not x_user_id.strip():
        raise InvalidInputException("X-User-ID header is required.")
    return x_user_id

def get_note_store(client: httpx.AsyncClient = Depends(get_http_client)) -> NoteStore:
    return SupabaseNoteStore(client, table=settings.SUPABASE_NOTES_TABLE)

def get_sessions() -> GraphSessionStore:
    return graph_sessions

def get_service(store: NoteStore = Depends(get_note_store)) -> GraphService:
    return GraphService(store)

def get_link_service(store: NoteStore = Depends(get_note_store)) -> LinkService:
    return LinkService(store)

@router.get("/graph", response_model=GraphData, tags=["Graph"])
@limiter.limit("30/minute")
async def load_graph(
    request: Request,
    seed: int | None = Query(default=None, description="Seed for reproducible layouts."),
    user_id: str = Depends(get_user_id),
    service: GraphService = Depends(get_service),
    sessions: GraphSessionStore = Depends(get_sessions)
):
    """Builds and lays out the user's note graph, replacing any open session."""
    graph = await service.load_graph(user_id, seed=seed)
    sessions.put(user_id, graph)
    return graph

@router.delete("/graph/session", status_code=status.HTTP_204_NO_CONTENT, tags=["Graph"])
async def close_graph_session(
    user_id: str = Depends(get_user_id),
    sessions: GraphSessionStore = Depends(get_sessions)
):
    sessions.discard(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/graph/node-at-position", response_model=NodeHit, tags=["Graph Queries"])
@limiter.limit("600/minute")
async def node_at_position(
    request: Request,
    hit_test: HitTestRequest,
    user_id: str = Depends(get_user_id),
    sessions: GraphSessionStore = Depends(get_sessions)
):
    graph = sessions.get(user_id)
    visible = set(hit_test.visible_node_ids) if hit_test.visible_node_ids is not None else None
    node_id = get_node_at_position(hit_test.point, graph, hit_test.transform, hit_test.viewport, visible)
    return NodeHit(node_id=node_id)

@router.get("/graph/nodes/{node_id}/connected", response_model=NodeIdSet, tags=["Graph Queries"])
async def connected_nodes(
    node_id: str,
    degrees: int = Query(default=1, ge=0, le=10),
    user_id: str = Depends(get_user_id),
    sessions: GraphSessionStore = Depends(get_sessions)
):
    graph = sessions.get(user_id)
    return NodeIdSet(node_ids=sorted(get_connected_nodes(node_id, graph, degrees)))

@router.get("/graph/search", response_model=NodeIdSet, tags=["Graph Queries"])
async def search_graph(
    q: str = Query(default=""),
    user_id: str = Depends(get_user_id),
    sessions: GraphSessionStore = Depends(get_sessions)
):
    graph = sessions.get(user_id)
    return NodeIdSet(node_ids=sorted(apply_search_filter(q, graph)))

@router.post("/links/parse", response_model=list[Link], tags=["Links"])
async def parse_note_links(parse_request: ParseRequest):
    return parse_links(parse_request.text, parse_request.source_title)

@router.get("/links/backlinks", response_model=list[NoteRecord], tags=["Links"])
async def backlinks(
    title: str = Query(..., min_length=1),
    user_id: str = Depends(get_user_id),
    service: LinkService = Depends(get_link_service)
):
    return await service.get_backlinks(user_id, title)

@router.get("/links/by-title", response_model=NoteRecord, tags=["Links"])
async def note_by_title(
    title: str = Query(..., min_length=1),
    user_id: str = Depends(get_user_id),
    service: LinkService = Depends(get_link_service)
):
    """Resolves a clicked link to the note it points at."""
    note = await service.get_note_by_title(user_id, title)
    if note is None:
        raise NoteNotFoundException(f"No note titled '{title}'.")
    return note

@router.get("/links/exists", response_model=dict[str, bool], tags=["Links"])
async def notes_exist(
    titles: list[str] = Query(default=[]),
    user_id: str = Depends(get_user_id),
    service: LinkService = Depends(get_link_service)
):
    return await service.check_notes_exist(user_id, titles)

@router.get("/links/suggestions", response_model=list[str], tags=["Links"])
@limiter.limit("120/minute")
async def title_suggestions(
    request: Request,
    partial: str = Query(default=""),
    user_id: str = Depends(get_user_id),
    service: LinkService = Depends(get_link_service)
):
    return await service.get_title_suggestions(user_id, partial)

@router.post("/links/rename", response_model=RenameResult, tags=["Links"])
@limiter.limit("10/minute")
async def rename_links(
    request: Request,
    rename_request: RenameRequest,
    user_id: str = Depends(get_user_id),
    service: LinkService = Depends(get_link_service)
):
    """Points every link to `old_title` at `new_title` after a note is renamed."""
    updated = await service.update_links_on_rename(user_id, rename_request.old_title, rename_request.new_title)
    return RenameResult(updated=updated)
