import pytest

from notegraph.core.exceptions import GraphSessionNotFoundException
from notegraph.models.graph import GraphData
from notegraph.services.session_store import GraphSessionStore


def empty_graph() -> GraphData:
    return GraphData(nodes=[], edges=[])


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_idle_sessions_expire():
    clock = FakeClock()
    sessions = GraphSessionStore(ttl_seconds=60, clock=clock)
    sessions.put("u1", empty_graph())

    clock.now = 59
    assert sessions.get("u1") is not None

    # Reading refreshes the session, so it lives another full minute.
    clock.now = 118
    assert sessions.get("u1") is not None

    clock.now = 179
    with pytest.raises(GraphSessionNotFoundException):
        sessions.get("u1")
    assert len(sessions) == 0


def test_least_recently_used_session_is_evicted_at_capacity():
    sessions = GraphSessionStore(max_sessions=2, clock=FakeClock())
    sessions.put("u1", empty_graph())
    sessions.put("u2", empty_graph())
    sessions.get("u1")
    sessions.put("u3", empty_graph())

    assert len(sessions) == 2
    sessions.get("u1")
    sessions.get("u3")
    with pytest.raises(GraphSessionNotFoundException):
        sessions.get("u2")


def test_discard_reports_whether_a_session_existed():
    sessions = GraphSessionStore()
    sessions.put("u1", empty_graph())
    assert sessions.discard("u1") is True
    assert sessions.discard("u1") is False
