# notegraph/models/graph.py
from pydantic import BaseModel, Field

class GraphNode(BaseModel):
    id: str
    title: str
    tags: list[str] = Field(default_factory=list)
    connection_count: int = 0
    x: float = 0.0
    y: float = 0.0
    vx: float = Field(default=0.0, repr=False)
    vy: float = Field(default=0.0, repr=False)

class GraphEdge(BaseModel):
    source_id: str
    target_id: str

class UnresolvedLink(BaseModel):
    """A stored link whose target title matches no note."""
    source_id: str
    target_title: str

class GraphData(BaseModel):
    nodes: list[GraphNode]
    edges: list[GraphEdge]
    unresolved_links: list[UnresolvedLink] = Field(default_factory=list)

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> GraphNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)

class NodeIdSet(BaseModel):
    node_ids: list[str]

class NodeHit(BaseModel):
    node_id: str | None = None
