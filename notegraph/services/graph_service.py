# notegraph/services/graph_service.py
import asyncio
import logging

import httpx

from notegraph.core.exceptions import DataUnavailableException
from notegraph.db.note_store import NoteStore
from notegraph.models.graph import GraphData, GraphEdge, GraphNode, UnresolvedLink
from notegraph.models.layout import LayoutSettings
from notegraph.models.note import NoteRecord
from notegraph.services.layout import run_force_layout
from notegraph.services.link_parser import dedupe_targets

logger = logging.getLogger(__name__)

def construct_graph(notes: list[NoteRecord]) -> GraphData:
    """
    One node per note and one edge per stored link whose target title matches
    a note exactly. Links to missing titles are reported, not drawn.
    """
    title_to_id: dict[str, str] = {}
    for note in notes:
        # Notes arrive newest first, so the oldest note keeps a shared title.
        title_to_id[note.title] = note.id

    edges: list[GraphEdge] = []
    unresolved: list[UnresolvedLink] = []
    for note in notes:
        for target_title in dedupe_targets(note.outgoing_links):
            target_id = title_to_id.get(target_title)
            if target_id is None:
                unresolved.append(UnresolvedLink(source_id=note.id, target_title=target_title))
                continue
            edges.append(GraphEdge(source_id=note.id, target_id=target_id))

    degree: dict[str, int] = {}
    for edge in edges:
        degree[edge.source_id] = degree.get(edge.source_id, 0) + 1
        if edge.target_id != edge.source_id:
            degree[edge.target_id] = degree.get(edge.target_id, 0) + 1

    nodes = [
        GraphNode(
            id=note.id,
            title=note.title,
            tags=list(note.tags),
            connection_count=degree.get(note.id, 0),
        )
        for note in notes
    ]
    return GraphData(nodes=nodes, edges=edges, unresolved_links=unresolved)

class GraphService:
    def __init__(self, store: NoteStore, retry_delay: float = 0.5):
        self.store = store
        self.retry_delay = retry_delay

    async def fetch_notes(self, user_id: str) -> list[NoteRecord]:
        return await self._call_store(self.store.fetch_notes_for_user, user_id)

    async def save_note(self, user_id: str, note: NoteRecord) -> None:
        await self._call_store(self.store.update_note, user_id, note)

    async def _call_store(self, func, *args):
        try:
            return await self._with_retry(func, *args, delay=self.retry_delay)
        except httpx.HTTPError as exc:
            logger.error("Note store call %s failed: %s", func.__name__, exc)
            raise DataUnavailableException(f"Note store unavailable: {exc}") from exc

    async def build_note_graph(self, user_id: str) -> GraphData:
        notes = await self.fetch_notes(user_id)
        graph = construct_graph(notes)
        if graph.unresolved_links:
            logger.info(
                "Graph for %s: %d link(s) point at missing notes",
                user_id, len(graph.unresolved_links),
            )
        return graph

    async def load_graph(
        self,
        user_id: str,
        layout_settings: LayoutSettings | None = None,
        seed: int | None = None,
    ) -> GraphData:
        """Builds the graph and positions it before handing it to the viewer."""
        graph = await self.build_note_graph(user_id)
        return await asyncio.to_thread(run_force_layout, graph, layout_settings, seed)

    async def _with_retry(self, func, *args, retries: int = 3, delay: float = 0.5, **kwargs):
        for attempt in range(retries):
            try:
                return await func(*args, **kwargs)
            except httpx.TransportError as exc:
                if attempt + 1 == retries:
                    raise
                logger.warning("Note store unreachable (%s); retrying", exc)
                await asyncio.sleep(delay * (attempt + 1))
