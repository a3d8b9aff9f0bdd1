from datetime import date, datetime, time, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from loguru import logger

from notegraph.config import settings
from notegraph.domain.filters import FilterCriteria
from notegraph.domain.graph import ViewMode
from notegraph.note_sources.base import NoteSource
from notegraph.orchestrator import GraphOrchestrator
from notegraph.rendering.base import GraphRenderer


def filter_criteria(
    search: str = "",
    categories: list[str] = Query(default=[]),  # noqa: B008
    tags: list[str] = Query(default=[]),  # noqa: B008
    content_types: list[str] = Query(default=[]),  # noqa: B008
    start: date | None = None,
    end: date | None = None,
    min_degree: int = Query(default=0, ge=0),
    include_deleted: bool = False,
) -> FilterCriteria:
    """Build filter criteria from query parameters. Date bounds are whole days."""
    return FilterCriteria(
        search_text=search,
        categories=tuple(categories),
        tags=tuple(tags),
        content_types=tuple(content_types),
        start_date=datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None,
        end_date=datetime.combine(end, time.max, tzinfo=timezone.utc) if end else None,
        min_degree=min_degree,
        include_deleted=include_deleted,
    )


def _build_orchestrator(
    note_source: NoteSource,
    renderer: GraphRenderer | None,
    criteria: FilterCriteria,
    view_mode: ViewMode,
    selected_note_id: str | None,
) -> GraphOrchestrator:
    """Build the graph for one request and let its layout settle."""
    orchestrator = GraphOrchestrator(
        width=settings.viewport_width,
        height=settings.viewport_height,
        view_mode=view_mode,
        criteria=criteria,
        selected_note_id=selected_note_id,
        renderer=renderer,
        seed=settings.layout_seed,
    )
    orchestrator.set_notes(note_source.list_notes())
    orchestrator.settle(max_ticks=settings.max_layout_ticks)
    return orchestrator


def _create_graph_dependency(note_source: NoteSource, renderer: GraphRenderer | None):
    """Create the dependency that builds a settled graph from query parameters."""

    def graph_orchestrator(
        criteria: FilterCriteria = Depends(filter_criteria),  # noqa: B008
        view_mode: ViewMode = "force",
        selected_note_id: str | None = None,
    ) -> GraphOrchestrator:
        try:
            return _build_orchestrator(
                note_source, renderer, criteria, view_mode, selected_note_id
            )
        except Exception as e:
            logger.error(f"Error building graph: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return graph_orchestrator


def _create_note_endpoint(note_source: NoteSource):
    """Create the note lookup endpoint handler."""

    async def get_note(note_id: str):
        note = note_source.get_note(note_id)
        if note is None:
            logger.warning(f"Note not found: {note_id}")
            raise HTTPException(status_code=404, detail="Note not found")
        return note

    return get_note


def _create_export_endpoint(renderer: GraphRenderer | None, graph_dependency):
    """Create the image export endpoint handler."""

    async def export_graph(
        scale: float = Query(default=2.0, gt=0, le=8),
        orchestrator: GraphOrchestrator = Depends(graph_dependency),  # noqa: B008
    ) -> Response:
        if renderer is None:
            raise HTTPException(status_code=501, detail="Image export is not configured")
        try:
            image = orchestrator.export_image(scale=scale)
        except Exception as e:
            logger.error(f"Error exporting graph: {str(e)}")
            raise HTTPException(status_code=500, detail="Error exporting graph") from e

        return Response(
            content=image.content,
            media_type=image.mime_type,
            headers={"Content-Disposition": f'attachment; filename="{image.filename}"'},
        )

    return export_graph


def get_endpoints_router(
    *,
    note_source: NoteSource,
    renderer: GraphRenderer | None = None,
) -> APIRouter:
    router = APIRouter()
    graph_dependency = _create_graph_dependency(note_source, renderer)

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @router.get("/api/graph")
    async def get_graph(orchestrator: GraphOrchestrator = Depends(graph_dependency)):  # noqa: B008
        return orchestrator.layout()

    @router.get("/api/graph/stats")
    async def get_graph_stats(orchestrator: GraphOrchestrator = Depends(graph_dependency)):  # noqa: B008
        return orchestrator.snapshot()

    @router.get("/api/graph/facets")
    async def get_facets(orchestrator: GraphOrchestrator = Depends(graph_dependency)):  # noqa: B008
        return orchestrator.facets()

    @router.get("/api/graph/isolated")
    async def get_isolated_nodes(orchestrator: GraphOrchestrator = Depends(graph_dependency)):  # noqa: B008
        isolated = orchestrator.isolated_nodes()
        return {
            "count": len(isolated),
            "nodes": [{"id": node.id, "title": node.note.title or node.id} for node in isolated],
        }

    @router.get("/api/graph/share")
    async def get_share_configuration(
        orchestrator: GraphOrchestrator = Depends(graph_dependency),  # noqa: B008
    ):
        return orchestrator.share_configuration()

    router.get("/api/graph/export")(_create_export_endpoint(renderer, graph_dependency))
    router.get("/api/notes/{note_id}")(_create_note_endpoint(note_source))

    return router
