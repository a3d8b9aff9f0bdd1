"""Render-ready description of a laid-out graph."""

from collections import defaultdict

from pydantic import BaseModel

from notegraph.domain.graph import EdgeType, Graph, GraphNode, LayoutState
from notegraph.interaction.highlighter import VisualOverlay

EDGE_COLORS: dict[EdgeType, str] = {
    "same-category": "#10B981",
    "same-tag": "#8B5CF6",
    "similar-content": "#F59E0B",
    "temporal": "#6B7280",
}
FALLBACK_EDGE_COLOR = "#94A3B8"
FALLBACK_NODE_COLOR = "#94A3B8"
LABEL_OFFSET = 30.0


class SceneNode(BaseModel):
    id: str
    label: str
    x: float
    y: float
    radius: float
    fill: str
    stroke: str
    stroke_width: float
    opacity: float = 1.0


class SceneEdge(BaseModel):
    source_id: str
    target_id: str
    type: EdgeType
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float
    opacity: float


class SceneLabel(BaseModel):
    text: str
    x: float
    y: float


class RenderScene(BaseModel):
    """Everything a renderer needs to draw the graph, in viewport coordinates."""

    width: float
    height: float
    background: str = "#ffffff"
    edges: list[SceneEdge] = []
    nodes: list[SceneNode] = []
    labels: list[SceneLabel] = []


def node_radius(degree: int) -> float:
    """Visual radius: grows with degree, clamped to 6..20 px."""
    return float(max(6, min(20, max(degree, 1) * 2 + 6)))


def edge_width(strength: float) -> float:
    return max(1.0, strength * 3)


def node_stroke(node: GraphNode) -> tuple[str, float]:
    if node.is_selected:
        return "#EF4444", 3.0
    if node.is_highlighted:
        return "#F59E0B", 3.0
    return "#ffffff", 1.0


def cluster_labels(graph: Graph, states: dict[str, LayoutState]) -> list[SceneLabel]:
    """One label per category, placed above the centroid of its members."""
    members: dict[str, list[LayoutState]] = defaultdict(list)
    for node in graph.nodes:
        state = states.get(node.id)
        if state is not None:
            members[node.category].append(state)

    labels = []
    for category, category_states in members.items():
        x = sum(state.x for state in category_states) / len(category_states)
        y = sum(state.y for state in category_states) / len(category_states)
        labels.append(SceneLabel(text=category, x=x, y=y - LABEL_OFFSET))
    return labels


def build_scene(
    graph: Graph,
    states: dict[str, LayoutState],
    *,
    width: float,
    height: float,
    category_colors: dict[str, str],
    overlay: VisualOverlay | None = None,
) -> RenderScene:
    """Combine graph, layout positions and interaction overlay into a scene.

    Nodes without a layout state are skipped, and so are edges touching them.

    Args:
        graph: The visible graph
        states: Layout state per node ID
        width: Viewport width
        height: Viewport height
        category_colors: Fill colour per category
        overlay: Current highlight overlay, if any

    Returns:
        RenderScene with edges drawn beneath nodes
    """
    edges = []
    for position, edge in enumerate(graph.edges):
        source = states.get(edge.source_id)
        target = states.get(edge.target_id)
        if source is None or target is None:
            continue
        opacity = 0.6
        if overlay is not None and position < len(overlay.edge_opacity):
            opacity = overlay.edge_opacity[position]
        edges.append(
            SceneEdge(
                source_id=edge.source_id,
                target_id=edge.target_id,
                type=edge.type,
                x1=source.x,
                y1=source.y,
                x2=target.x,
                y2=target.y,
                color=EDGE_COLORS.get(edge.type, FALLBACK_EDGE_COLOR),
                width=edge_width(edge.strength),
                opacity=opacity,
            )
        )

    nodes = []
    for node in graph.nodes:
        state = states.get(node.id)
        if state is None:
            continue
        stroke, stroke_width = node_stroke(node)
        opacity = overlay.node_opacity.get(node.id, 1.0) if overlay is not None else 1.0
        nodes.append(
            SceneNode(
                id=node.id,
                label=node.note.title or node.id,
                x=state.x,
                y=state.y,
                radius=node_radius(node.degree),
                fill=category_colors.get(node.category, FALLBACK_NODE_COLOR),
                stroke=stroke,
                stroke_width=stroke_width,
                opacity=opacity,
            )
        )

    return RenderScene(
        width=width,
        height=height,
        edges=edges,
        nodes=nodes,
        labels=cluster_labels(graph, states),
    )
