# notegraph/services/interaction.py
import logging
from enum import Enum

from notegraph.core.layout_config import LOCAL_GRAPH_DEGREES, SELECTION_DEGREES
from notegraph.models.geometry import Point, ViewportSize, ViewTransform
from notegraph.models.graph import GraphData
from notegraph.services.graph_query import (
    apply_search_filter,
    get_connected_nodes,
    get_node_at_position,
)

logger = logging.getLogger(__name__)


class InteractionState(str, Enum):
    IDLE = "idle"
    NODE_SELECTED = "node_selected"
    LOCAL_GRAPH = "local_graph"


class GraphInteraction:
    """
    Selection, local-graph and search state for one viewing session.

    Idle -> NodeSelected on a node tap; tapping the selected node again or
    empty space returns to Idle. Local graph mode needs a selection and
    narrows hit-testing to the selection's 2-degree neighbourhood.
    """

    def __init__(self, graph: GraphData):
        self.graph = graph
        self.state = InteractionState.IDLE
        self.selected_node_id: str | None = None
        self.neighborhood_ids: set[str] = set()
        self.search_query = ""
        self.search_matches: set[str] = set()

    @property
    def highlighted_node_ids(self) -> set[str]:
        if self.search_query.strip():
            return set(self.search_matches)
        return set(self.neighborhood_ids)

    @property
    def visible_node_ids(self) -> set[str] | None:
        """Nodes eligible for hit-testing; None means all of them."""
        if self.state is InteractionState.LOCAL_GRAPH:
            return set(self.neighborhood_ids)
        return None

    def tap(self, point: Point, transform: ViewTransform, viewport: ViewportSize) -> str | None:
        node_id = get_node_at_position(
            point, self.graph, transform, viewport, self.visible_node_ids
        )
        if node_id is None:
            self.clear_selection()
        else:
            self.select(node_id)
        return node_id

    def select(self, node_id: str) -> None:
        if node_id not in self.graph.node_ids():
            logger.debug("Ignoring selection of unknown node %s", node_id)
            return

        if node_id == self.selected_node_id:
            self.clear_selection()
            return

        self.selected_node_id = node_id
        if self.state is not InteractionState.LOCAL_GRAPH:
            self.state = InteractionState.NODE_SELECTED
        self._refresh_neighborhood()

    def clear_selection(self) -> None:
        self.state = InteractionState.IDLE
        self.selected_node_id = None
        self.neighborhood_ids = set()

    def toggle_local_graph(self) -> InteractionState:
        if self.state is InteractionState.LOCAL_GRAPH:
            self.state = InteractionState.NODE_SELECTED
        elif self.state is InteractionState.NODE_SELECTED:
            self.state = InteractionState.LOCAL_GRAPH
        else:
            logger.debug("Local graph mode needs a selected node")
            return self.state
        self._refresh_neighborhood()
        return self.state

    def search(self, query: str) -> set[str]:
        self.search_query = query or ""
        self.search_matches = apply_search_filter(self.search_query, self.graph)
        return set(self.search_matches)

    def _refresh_neighborhood(self) -> None:
        degrees = LOCAL_GRAPH_DEGREES if self.state is InteractionState.LOCAL_GRAPH else SELECTION_DEGREES
        self.neighborhood_ids = get_connected_nodes(self.selected_node_id, self.graph, degrees)
