"""Orchestration of the complete note-to-layout pipeline."""

import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone

from notegraph.clustering.analyzer import ClusterAnalyzer
from notegraph.clustering.palettes import CATEGORY10, SET3, Palette
from notegraph.domain.filters import FilterCriteria
from notegraph.domain.graph import ClusterInfo, Graph, GraphNode, GraphStats, ViewMode
from notegraph.domain.layout import GraphLayout, LayoutNode
from notegraph.domain.note import Note
from notegraph.domain.sharing import ExportedImage, ShareConfiguration
from notegraph.filtering.engine import Facets, collect_facets, filter_graph, isolated_nodes
from notegraph.ingestion.ingestor import NoteIngestor, RawNote, coerce_notes
from notegraph.ingestion.relationship_extraction import RelationshipDetector
from notegraph.interaction.highlighter import InteractionHighlighter
from notegraph.layout.engine import LayoutEngine, LayoutPhase, LayoutSettings
from notegraph.rendering.base import GraphRenderer
from notegraph.rendering.scene import RenderScene, build_scene, node_radius

logger = logging.getLogger(__name__)


class GraphOrchestrator:
    """Owns the current graph and rebuilds it whenever an input changes.

    Any change to notes, filters, view mode or the open note tears down the
    graph and its layout engine and builds new ones from scratch. Only
    explicit pins are carried over, by node ID.
    """

    def __init__(
        self,
        *,
        width: float,
        height: float,
        view_mode: ViewMode = "force",
        criteria: FilterCriteria | None = None,
        selected_note_id: str | None = None,
        layout_settings: LayoutSettings | None = None,
        renderer: GraphRenderer | None = None,
        on_node_click: Callable[[Note], None] | None = None,
        category_palette: Palette = CATEGORY10,
        tag_palette: Palette = SET3,
        seed: int | None = 0,
    ):
        """Initialize the orchestrator with an empty note set.

        Args:
            width: Viewport width in px
            height: Viewport height in px
            view_mode: Initial layout mode
            criteria: Initial filter criteria
            selected_note_id: ID of the note currently open in the editor
            layout_settings: Physics constants for every layout engine
            renderer: Renderer used by export_image()
            on_node_click: Receives the note of a clicked node
            category_palette: Colours for category clusters
            tag_palette: Colours for tag clusters
            seed: Seed for layout jitter
        """
        self.width = width
        self.height = height
        self.view_mode: ViewMode = view_mode
        self.criteria = criteria or FilterCriteria()
        self.selected_note_id = selected_note_id
        self.layout_settings = layout_settings or LayoutSettings()
        self.renderer = renderer
        self.on_node_click = on_node_click
        self.seed = seed

        self.detector = RelationshipDetector()
        self.cluster_analyzer = ClusterAnalyzer(
            category_palette=category_palette, tag_palette=tag_palette
        )

        self.notes: list[Note] = []
        self.graph = Graph()
        self.visible = Graph()
        self.clusters: list[ClusterInfo] = []
        self.engine: LayoutEngine | None = None
        self.highlighter = InteractionHighlighter(self.visible, on_node_click)

    def set_notes(self, notes: Iterable[RawNote]) -> Graph:
        self.notes = coerce_notes(notes)
        return self.rebuild()

    def set_filters(self, criteria: FilterCriteria) -> Graph:
        self.criteria = criteria
        return self.rebuild()

    def set_view_mode(self, view_mode: ViewMode) -> Graph:
        self.view_mode = view_mode
        return self.rebuild()

    def set_selected_note(self, note_id: str | None) -> Graph:
        self.selected_note_id = note_id
        return self.rebuild()

    def rebuild(self) -> Graph:
        """Rebuild graph, clusters, filtered view and layout engine.

        Returns:
            The visible (filtered) graph
        """
        pins = {}
        if self.engine is not None:
            pins = self.engine.pins()
            self.engine.stop()

        ingestor = NoteIngestor(
            include_deleted=self.criteria.include_deleted,
            selected_note_id=self.selected_note_id,
        )
        self.graph = self.detector.build_graph(ingestor.ingest(self.notes))
        self.clusters = self.cluster_analyzer.analyze(self.graph.nodes)
        self.visible = filter_graph(self.graph, self.criteria)

        self.engine = LayoutEngine(
            self.visible,
            width=self.width,
            height=self.height,
            view_mode=self.view_mode,
            settings=self.layout_settings,
            pins=pins,
            seed=self.seed,
        )
        self.engine.start()
        self.highlighter = InteractionHighlighter(self.visible, self.on_node_click)

        stats = self.snapshot()
        logger.info(
            f"Rebuilt graph: {stats.node_count} nodes, {stats.edge_count} edges, "
            f"{stats.cluster_count} clusters ({stats.visible_node_count} nodes visible)"
        )
        return self.visible

    def settle(self, max_ticks: int | None = None) -> int:
        """Run the current layout until it settles; returns the ticks taken."""
        if self.engine is None:
            return 0
        return self.engine.run(max_ticks=max_ticks)

    def snapshot(self) -> GraphStats:
        return GraphStats(
            node_count=len(self.graph.nodes),
            edge_count=len(self.graph.edges),
            cluster_count=len(self.clusters),
            visible_node_count=len(self.visible.nodes),
            visible_edge_count=len(self.visible.edges),
        )

    def facets(self) -> Facets:
        return collect_facets(self.notes)

    def isolated_nodes(self) -> list[GraphNode]:
        return isolated_nodes(self.graph)

    def centroid(self) -> tuple[float, float]:
        """Point to centre the viewport on."""
        if self.engine is None:
            return self.width / 2, self.height / 2
        return self.engine.centroid()

    def share_configuration(self) -> ShareConfiguration:
        stats = self.snapshot()
        return ShareConfiguration(
            filters=self.criteria,
            view_mode=self.view_mode,
            timestamp=datetime.now(timezone.utc),
            stats=stats,
            text=(
                f"Explore {stats.node_count} interconnected notes "
                f"with {stats.edge_count} relationships"
            ),
        )

    def category_colors(self) -> dict[str, str]:
        return {cluster.name: cluster.color for cluster in self.clusters if cluster.kind == "category"}

    def scene(self) -> RenderScene:
        states = self.engine.states() if self.engine is not None else {}
        return build_scene(
            self.visible,
            states,
            width=self.width,
            height=self.height,
            category_colors=self.category_colors(),
            overlay=self.highlighter.overlay,
        )

    def export_image(self, scale: float = 2.0, today: date | None = None) -> ExportedImage:
        """Render the current view through the configured renderer.

        Raises:
            ValueError: If no renderer was configured
        """
        if self.renderer is None:
            raise ValueError("No renderer configured for image export")

        today = today or datetime.now(timezone.utc).date()
        content = self.renderer.render(self.scene(), scale=scale)
        return ExportedImage(
            filename=f"notegraph-{today.isoformat()}.{self.renderer.file_extension}",
            content=content,
            mime_type=self.renderer.mime_type,
        )

    def layout(self) -> GraphLayout:
        """Serializable view of the visible graph at its current positions."""
        engine = self.engine
        states = engine.states() if engine is not None else {}
        colors = self.category_colors()

        nodes = []
        for node in self.visible.nodes:
            state = states.get(node.id)
            if state is None:
                continue
            nodes.append(
                LayoutNode(
                    id=node.id,
                    title=node.note.title or node.id,
                    category=node.category,
                    tags=list(node.tags),
                    content_type=node.note.content_type,
                    degree=node.degree,
                    cluster_id=node.cluster_id,
                    color=colors.get(node.category, ""),
                    radius=node_radius(node.degree),
                    x=state.x,
                    y=state.y,
                    is_selected=node.is_selected,
                    is_pinned=node.is_pinned or state.pinned,
                )
            )

        return GraphLayout(
            view_mode=self.view_mode,
            settled=engine is not None and engine.phase is LayoutPhase.SETTLED,
            ticks=engine.tick_count if engine is not None else 0,
            nodes=nodes,
            edges=self.visible.edges,
            clusters=self.clusters,
            stats=self.snapshot(),
        )
