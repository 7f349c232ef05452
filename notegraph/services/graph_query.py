# notegraph/services/graph_query.py
import logging
import math
from collections import deque

from notegraph.core.layout_config import (
    BASE_NODE_RADIUS,
    CONNECTION_RADIUS_MULTIPLIER,
    DETERMINANT_EPSILON,
    MAX_COORDINATE,
    MAX_NODE_RADIUS,
    MAX_RADIUS_MULTIPLIER,
    MAX_SEARCH_QUERY_LENGTH,
    MIN_NODE_RADIUS,
)
from notegraph.models.geometry import Point, ViewportSize, ViewTransform
from notegraph.models.graph import GraphData, GraphNode

logger = logging.getLogger(__name__)


def is_valid_position(point: Point) -> bool:
    return point.is_finite() and abs(point.x) <= MAX_COORDINATE and abs(point.y) <= MAX_COORDINATE


def is_valid_transform(transform: ViewTransform) -> bool:
    if not all(math.isfinite(entry) for entry in transform.entries()):
        return False
    determinant = transform.determinant
    return math.isfinite(determinant) and abs(determinant) >= DETERMINANT_EPSILON


def is_valid_node_id(node_id: str | None) -> bool:
    return bool(node_id and node_id.strip())


def graph_to_screen(point: Point, transform: ViewTransform) -> Point | None:
    if not is_valid_position(point) or not is_valid_transform(transform):
        return None
    result = Point(
        x=transform.a * point.x + transform.c * point.y + transform.tx,
        y=transform.b * point.x + transform.d * point.y + transform.ty,
    )
    return result if is_valid_position(result) else None


def screen_to_graph(point: Point, transform: ViewTransform) -> Point | None:
    """Map a screen point back through the inverse of the view transform."""
    if not is_valid_position(point) or not is_valid_transform(transform):
        return None
    det = transform.determinant
    sx = point.x - transform.tx
    sy = point.y - transform.ty
    result = Point(
        x=(transform.d * sx - transform.c * sy) / det,
        y=(-transform.b * sx + transform.a * sy) / det,
    )
    return result if is_valid_position(result) else None


def node_radius(node: GraphNode, scale_factor: float = 1.0) -> float:
    """Rendered radius, growing with the node's connection count."""
    if not math.isfinite(scale_factor) or scale_factor <= 0:
        scale_factor = 1.0
    if node.connection_count < 0:
        multiplier = 1.0
    else:
        multiplier = 1.0 + node.connection_count * CONNECTION_RADIUS_MULTIPLIER
        multiplier = min(max(multiplier, 1.0), MAX_RADIUS_MULTIPLIER)
    radius = BASE_NODE_RADIUS * multiplier * scale_factor
    return min(max(radius, MIN_NODE_RADIUS), MAX_NODE_RADIUS)


def node_center(node: GraphNode, viewport: ViewportSize) -> Point:
    """Node positions are stored relative to the middle of the canvas."""
    center = viewport.center
    return Point(x=center.x + node.x, y=center.y + node.y)


def get_node_at_position(
    point: Point,
    graph: GraphData,
    transform: ViewTransform,
    viewport: ViewportSize,
    visible_node_ids: set[str] | None = None,
) -> str | None:
    """
    Return the id of the node whose rendered circle contains the screen
    point, or None.

    Gesture noise (degenerate transforms, out-of-range points, empty graphs)
    yields None rather than an error. Where circles overlap the first node in
    graph order wins.
    """
    if viewport.width <= 0 or viewport.height <= 0:
        logger.debug("Hit test skipped: invalid viewport %s", viewport)
        return None
    if not graph.nodes:
        logger.debug("Hit test skipped: graph has no nodes")
        return None

    graph_point = screen_to_graph(point, transform)
    if graph_point is None:
        logger.debug("Hit test skipped: cannot map %s through %s", point, transform)
        return None

    for node in graph.nodes:
        if not is_valid_node_id(node.id):
            continue
        if visible_node_ids is not None and node.id not in visible_node_ids:
            continue
        if not (math.isfinite(node.x) and math.isfinite(node.y)):
            continue

        center = node_center(node, viewport)
        distance = math.hypot(graph_point.x - center.x, graph_point.y - center.y)
        if distance <= node_radius(node):
            return node.id

    return None


def build_adjacency(graph: GraphData) -> dict[str, set[str]]:
    # Links are directional, but neighbourhoods ignore direction on purpose:
    # a note is related to both what it links to and what links to it.
    adjacency: dict[str, set[str]] = {node.id: set() for node in graph.nodes}
    for edge in graph.edges:
        if not edge.source_id or not edge.target_id:
            continue
        adjacency.setdefault(edge.source_id, set()).add(edge.target_id)
        adjacency.setdefault(edge.target_id, set()).add(edge.source_id)
    return adjacency


def get_connected_nodes(node_id: str, graph: GraphData, degrees: int = 1) -> set[str]:
    """Breadth-first neighbourhood of `node_id` up to `degrees` hops, start included."""
    if not is_valid_node_id(node_id) or degrees < 0:
        return set()
    if node_id not in graph.node_ids():
        return set()

    adjacency = build_adjacency(graph)
    connected = {node_id}
    frontier = deque([(node_id, 0)])
    while frontier:
        current, depth = frontier.popleft()
        if depth == degrees:
            continue
        for neighbor in adjacency.get(current, ()):
            if neighbor not in connected:
                connected.add(neighbor)
                frontier.append((neighbor, depth + 1))
    return connected


def apply_search_filter(query: str | None, graph: GraphData) -> set[str]:
    """
    Ids of nodes whose title or any tag contains `query`, ignoring case.

    An empty query matches nothing; callers treat that as "no filter".
    """
    if not query or not query.strip():
        return set()
    if len(query) > MAX_SEARCH_QUERY_LENGTH:
        logger.debug("Search query truncated to %d characters", MAX_SEARCH_QUERY_LENGTH)
        query = query[:MAX_SEARCH_QUERY_LENGTH]

    needle = query.lower()
    return {
        node.id
        for node in graph.nodes
        if is_valid_node_id(node.id)
        and (needle in node.title.lower() or any(needle in tag.lower() for tag in node.tags))
    }
