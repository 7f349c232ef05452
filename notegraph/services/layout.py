# notegraph/services/layout.py
import logging
import math
import random
from itertools import combinations

from notegraph.core.exceptions import InternalConsistencyException
from notegraph.core.layout_config import COINCIDENT_JITTER
from notegraph.models.graph import GraphData
from notegraph.models.layout import LayoutSettings

logger = logging.getLogger(__name__)


class ForceLayout:
    """
    Fixed-iteration force-directed layout.

    Positions and velocities live in parallel lists indexed like
    `graph.nodes`; results are copied back onto the nodes once the last
    iteration finishes.
    """

    def __init__(self, settings: LayoutSettings | None = None, seed: int | None = None):
        self.settings = settings or LayoutSettings()
        self.rng = random.Random(seed)

    def run(self, graph: GraphData) -> GraphData:
        edge_pairs = self._resolve_edges(graph)
        xs, ys = self._initial_positions(len(graph.nodes))
        vxs = [0.0] * len(xs)
        vys = [0.0] * len(xs)

        for _ in range(self.settings.iterations):
            self._apply_repulsion(xs, ys, vxs, vys)
            self._apply_attraction(edge_pairs, xs, ys, vxs, vys)
            self._integrate(xs, ys, vxs, vys)

        for index, node in enumerate(graph.nodes):
            node.x, node.y = xs[index], ys[index]
            node.vx, node.vy = vxs[index], vys[index]

        logger.debug(
            "Laid out %d nodes and %d edges over %d iterations",
            len(graph.nodes), len(edge_pairs), self.settings.iterations,
        )
        return graph

    def _initial_positions(self, count: int) -> tuple[list[float], list[float]]:
        spread = self.settings.spread
        xs = [(self.rng.random() - 0.5) * spread for _ in range(count)]
        ys = [(self.rng.random() - 0.5) * spread for _ in range(count)]
        return xs, ys

    @staticmethod
    def _resolve_edges(graph: GraphData) -> list[tuple[int, int]]:
        index_by_id = {node.id: index for index, node in enumerate(graph.nodes)}
        pairs = []
        for edge in graph.edges:
            source = index_by_id.get(edge.source_id)
            target = index_by_id.get(edge.target_id)
            if source is None or target is None:
                raise InternalConsistencyException(
                    f"Edge {edge.source_id} -> {edge.target_id} references a node missing from the graph."
                )
            pairs.append((source, target))
        return pairs

    def _apply_repulsion(self, xs, ys, vxs, vys) -> None:
        strength = self.settings.repulsion_strength
        cutoff = self.settings.repulsion_cutoff
        for i, j in combinations(range(len(xs)), 2):
            dx = xs[j] - xs[i]
            dy = ys[j] - ys[i]
            distance = math.hypot(dx, dy)

            if distance == 0:
                if self.settings.jitter_coincident:
                    self._separate(i, j, vxs, vys)
                continue
            if distance >= cutoff:
                continue

            force = strength / (distance * distance)
            fx = dx / distance * force
            fy = dy / distance * force
            vxs[i] -= fx
            vys[i] -= fy
            vxs[j] += fx
            vys[j] += fy

    def _separate(self, i: int, j: int, vxs, vys) -> None:
        angle = self.rng.uniform(0.0, 2 * math.pi)
        fx = math.cos(angle) * COINCIDENT_JITTER
        fy = math.sin(angle) * COINCIDENT_JITTER
        vxs[i] -= fx
        vys[i] -= fy
        vxs[j] += fx
        vys[j] += fy

    def _apply_attraction(self, edge_pairs, xs, ys, vxs, vys) -> None:
        strength = self.settings.attraction_strength
        min_distance = self.settings.min_distance
        for source, target in edge_pairs:
            dx = xs[target] - xs[source]
            dy = ys[target] - ys[source]
            distance = math.hypot(dx, dy)
            if distance <= min_distance:
                continue

            force = (distance - min_distance) * strength
            fx = dx / distance * force
            fy = dy / distance * force
            vxs[source] += fx
            vys[source] += fy
            vxs[target] -= fx
            vys[target] -= fy

    def _integrate(self, xs, ys, vxs, vys) -> None:
        damping = self.settings.damping
        for index in range(len(xs)):
            xs[index] += vxs[index]
            ys[index] += vys[index]
            vxs[index] *= damping
            vys[index] *= damping


def run_force_layout(
    graph: GraphData,
    settings: LayoutSettings | None = None,
    seed: int | None = None,
) -> GraphData:
    return ForceLayout(settings, seed).run(graph)


def distance_summary(graph: GraphData) -> tuple[float, float]:
    """Mean edge length and mean distance between unlinked node pairs."""
    positions = {node.id: (node.x, node.y) for node in graph.nodes}
    linked = {frozenset((edge.source_id, edge.target_id)) for edge in graph.edges}

    edge_lengths = [
        math.dist(positions[edge.source_id], positions[edge.target_id])
        for edge in graph.edges
        if edge.source_id != edge.target_id
    ]
    pair_distances = [
        math.dist(positions[a.id], positions[b.id])
        for a, b in combinations(graph.nodes, 2)
        if frozenset((a.id, b.id)) not in linked
    ]

    def _mean(values: list[float]) -> float:
        return sum(values) / len(values) if values else 0.0

    return _mean(edge_lengths), _mean(pair_distances)
