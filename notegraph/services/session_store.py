# notegraph/services/session_store.py
import logging
import time
from collections import OrderedDict

from notegraph.core.exceptions import GraphSessionNotFoundException
from notegraph.models.graph import GraphData

logger = logging.getLogger(__name__)

class GraphSessionStore:
    """
    Holds the last laid-out graph per user until the viewer closes it.

    Sessions idle for longer than `ttl_seconds` expire, and once
    `max_sessions` are open the least recently used one is evicted.
    """

    def __init__(self, max_sessions: int = 100, ttl_seconds: float = 1800.0, clock=time.monotonic):
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._graphs: OrderedDict[str, tuple[GraphData, float]] = OrderedDict()

    def put(self, user_id: str, graph: GraphData) -> None:
        self._evict_expired()
        self._graphs[user_id] = (graph, self._clock())
        self._graphs.move_to_end(user_id)
        while len(self._graphs) > self.max_sessions:
            evicted, _ = self._graphs.popitem(last=False)
            logger.info("Evicted graph session for %s (limit %d)", evicted, self.max_sessions)

    def get(self, user_id: str) -> GraphData:
        self._evict_expired()
        entry = self._graphs.get(user_id)
        if entry is None:
            raise GraphSessionNotFoundException()
        graph, _ = entry
        self._graphs[user_id] = (graph, self._clock())
        self._graphs.move_to_end(user_id)
        return graph

    def discard(self, user_id: str) -> bool:
        return self._graphs.pop(user_id, None) is not None

    def _evict_expired(self) -> None:
        now = self._clock()
        # Entries are kept in last-used order, so expired ones sit at the front.
        while self._graphs:
            user_id, (_, last_used) = next(iter(self._graphs.items()))
            if now - last_used <= self.ttl_seconds:
                break
            del self._graphs[user_id]
            logger.debug("Graph session for %s expired", user_id)

    def __len__(self) -> int:
        self._evict_expired()
        return len(self._graphs)
