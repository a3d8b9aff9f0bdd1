"""Pointer-driven emphasis of a node's neighbourhood."""

import logging
from collections.abc import Callable

from pydantic import BaseModel

from notegraph.domain.graph import Graph
from notegraph.domain.note import Note

logger = logging.getLogger(__name__)

FOCUS_OPACITY = 1.0
DIMMED_NODE_OPACITY = 0.3
DEFAULT_EDGE_OPACITY = 0.6
FOCUS_EDGE_OPACITY = 0.8
DIMMED_EDGE_OPACITY = 0.1


class VisualOverlay(BaseModel):
    """Opacity of every node (by ID) and edge (by position in the edge list)."""

    node_opacity: dict[str, float] = {}
    edge_opacity: list[float] = []
    hovered_node_id: str | None = None


class InteractionHighlighter:
    """Translates pointer events into a reversible visual overlay.

    Only visual flags on nodes and edges are touched; simulation state is left
    alone.
    """

    def __init__(self, graph: Graph, on_node_click: Callable[[Note], None] | None = None):
        """Initialize the highlighter for a rendered graph.

        Args:
            graph: The graph being displayed
            on_node_click: Receives the note of a clicked node, e.g. to open it
        """
        self.graph = graph
        self.on_node_click = on_node_click
        self.overlay = self._default_overlay()

    @property
    def selected_node_id(self) -> str | None:
        for node in self.graph.nodes:
            if node.is_selected:
                return node.id
        return None

    def pointer_enter(self, node_id: str) -> VisualOverlay:
        """Emphasize the node and its neighbours, dim everything else."""
        if self.graph.get_node(node_id) is None:
            return self.overlay

        neighbours = self.graph.neighbors(node_id)
        focus = neighbours | {node_id}
        for node in self.graph.nodes:
            node.is_highlighted = node.id in neighbours

        edge_opacity = []
        for edge in self.graph.edges:
            edge.is_highlighted = edge.touches(node_id)
            edge_opacity.append(FOCUS_EDGE_OPACITY if edge.is_highlighted else DIMMED_EDGE_OPACITY)

        self.overlay = VisualOverlay(
            node_opacity={
                node.id: FOCUS_OPACITY if node.id in focus else DIMMED_NODE_OPACITY
                for node in self.graph.nodes
            },
            edge_opacity=edge_opacity,
            hovered_node_id=node_id,
        )
        return self.overlay

    def pointer_leave(self) -> VisualOverlay:
        """Restore default opacities."""
        for node in self.graph.nodes:
            node.is_highlighted = False
        for edge in self.graph.edges:
            edge.is_highlighted = False
        self.overlay = self._default_overlay()
        return self.overlay

    def click(self, node_id: str) -> bool:
        """Toggle selection of a node and hand its note to the editor.

        Returns:
            Whether the node is selected after the click
        """
        clicked = self.graph.get_node(node_id)
        if clicked is None:
            return False

        now_selected = not clicked.is_selected
        for node in self.graph.nodes:
            node.is_selected = False
        clicked.is_selected = now_selected

        if self.on_node_click is not None:
            self.on_node_click(clicked.note)
        logger.debug(f"Node {node_id} {'selected' if now_selected else 'deselected'}")
        return now_selected

    def _default_overlay(self) -> VisualOverlay:
        return VisualOverlay(
            node_opacity={node.id: FOCUS_OPACITY for node in self.graph.nodes},
            edge_opacity=[DEFAULT_EDGE_OPACITY] * len(self.graph.edges),
        )
