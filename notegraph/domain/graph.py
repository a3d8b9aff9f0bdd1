"""Graph domain models."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from notegraph.domain.note import Note

EdgeType = Literal["same-category", "same-tag", "similar-content", "temporal"]
ClusterKind = Literal["category", "tag"]
ViewMode = Literal["force", "radial", "hierarchical"]


class GraphNode(BaseModel):
    """A note placed in the relationship graph.

    Positions and velocities are not stored here; the layout engine keeps them
    in its own per-id state, which is discarded on every rebuild.

    Attributes:
        id: Note ID
        note: The underlying read-only note
        degree: Number of incident edges in the full multigraph
        cluster_id: ID of the category cluster the node belongs to
        is_selected: Node is the currently open note
        is_highlighted: Node is a neighbour of the hovered node
        is_pinned: Note is marked as pinned in its metadata
    """

    id: str
    note: Note
    degree: int = Field(default=0, ge=0)
    cluster_id: str = ""
    is_selected: bool = False
    is_highlighted: bool = False
    is_pinned: bool = False

    @property
    def category(self) -> str:
        return self.note.category

    @property
    def tags(self) -> tuple[str, ...]:
        return self.note.tags


class GraphEdge(BaseModel):
    """An inferred, typed relationship between two notes."""

    source_id: str
    target_id: str
    type: EdgeType
    strength: float = Field(gt=0.0, le=1.0)
    distance: float = Field(gt=0.0)  # preferred link length in px
    is_highlighted: bool = False

    @model_validator(mode="after")
    def _no_self_loops(self) -> "GraphEdge":
        if self.source_id == self.target_id:
            raise ValueError(f"Edge endpoints must differ, got {self.source_id!r} twice")
        return self

    def touches(self, node_id: str) -> bool:
        return node_id in (self.source_id, self.target_id)

    def other_end(self, node_id: str) -> str:
        return self.target_id if self.source_id == node_id else self.source_id


class Graph(BaseModel):
    """A multigraph of notes. Parallel edges between a pair are allowed."""

    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edges_touching(self, node_id: str) -> list[GraphEdge]:
        return [edge for edge in self.edges if edge.touches(node_id)]

    def neighbors(self, node_id: str) -> set[str]:
        """IDs at the other end of every edge touching the node."""
        return {edge.other_end(node_id) for edge in self.edges_touching(node_id)}


class ClusterInfo(BaseModel):
    """A named, coloured group of notes used for legends and radial anchoring."""

    id: str
    name: str
    kind: ClusterKind
    color: str
    size: int


class LayoutState(BaseModel):
    """Simulation state of a single node at a point in time."""

    node_id: str
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None and self.fy is not None


class GraphStats(BaseModel):
    """Live counts shown next to the graph.

    Node, edge and cluster counts describe the full graph; the visible counts
    describe what is left after filtering.
    """

    node_count: int = 0
    edge_count: int = 0
    cluster_count: int = 0
    visible_node_count: int = 0
    visible_edge_count: int = 0
