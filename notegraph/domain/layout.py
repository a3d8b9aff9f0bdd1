"""Serializable snapshot of a laid-out graph."""

from pydantic import BaseModel

from notegraph.domain.graph import ClusterInfo, GraphEdge, GraphStats, ViewMode


class LayoutNode(BaseModel):
    """A visible node with its position and visual encoding."""

    id: str
    title: str
    category: str
    tags: list[str]
    content_type: str
    degree: int
    cluster_id: str
    color: str
    radius: float
    x: float
    y: float
    is_selected: bool = False
    is_pinned: bool = False


class GraphLayout(BaseModel):
    """What a client needs to draw the current graph view."""

    view_mode: ViewMode
    settled: bool
    ticks: int
    nodes: list[LayoutNode] = []
    edges: list[GraphEdge] = []
    clusters: list[ClusterInfo] = []
    stats: GraphStats = GraphStats()
