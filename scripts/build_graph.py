"""CLI for building the note relationship graph from a notes file and saving the settled layout as JSON"""

import argparse
import sys
from datetime import datetime, time, timezone
from pathlib import Path

from loguru import logger

from notegraph.config import settings
from notegraph.domain.filters import FilterCriteria
from notegraph.note_sources.local import LocalNoteSource
from notegraph.orchestrator import GraphOrchestrator


def _parse_date(value: str | None, end_of_day: bool = False) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if end_of_day and len(value) == 10:
        parsed = datetime.combine(parsed.date(), time.max, tzinfo=timezone.utc)
    return parsed


def main(
    notes_file: str,
    outfile: str,
    view_mode: str = "force",
    criteria: FilterCriteria | None = None,
    max_ticks: int = settings.max_layout_ticks,
) -> None:
    note_source = LocalNoteSource(filepath=Path(notes_file))
    orchestrator = GraphOrchestrator(
        width=settings.viewport_width,
        height=settings.viewport_height,
        view_mode=view_mode,  # type: ignore[arg-type]
        criteria=criteria,
        seed=settings.layout_seed,
    )
    orchestrator.set_notes(note_source.list_notes())
    ticks = orchestrator.settle(max_ticks=max_ticks)

    layout = orchestrator.layout()
    Path(outfile).write_text(layout.model_dump_json(indent=2), encoding="utf-8")

    logger.info("Graph build complete:")
    logger.info(f"  - Nodes: {layout.stats.node_count} ({layout.stats.visible_node_count} visible)")
    logger.info(f"  - Edges: {layout.stats.edge_count} ({layout.stats.visible_edge_count} visible)")
    logger.info(f"  - Clusters: {layout.stats.cluster_count}")
    logger.info(f"  - Layout ticks: {ticks} (settled: {layout.settled})")


if __name__ == "__main__":
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--notes",
        type=str,
        required=False,
        help="JSON file containing the notes",
        default=settings.notes_path,
    )
    parser.add_argument("--out", type=str, required=True, help="Output layout JSON file")
    parser.add_argument(
        "--view-mode",
        type=str,
        choices=["force", "radial", "hierarchical"],
        default="force",
        help="Layout mode",
    )
    parser.add_argument("--search", type=str, default="", help="Free-text search filter")
    parser.add_argument("--category", action="append", default=[], help="Category to include")
    parser.add_argument("--tag", action="append", default=[], help="Tag to include")
    parser.add_argument("--start", type=str, help="Earliest creation date (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, help="Latest creation date (YYYY-MM-DD)")
    parser.add_argument("--min-degree", type=int, default=0, help="Minimum number of connections")
    parser.add_argument(
        "--include-deleted", action="store_true", help="Include soft-deleted notes"
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=settings.max_layout_ticks,
        help="Maximum number of layout steps",
    )

    args = parser.parse_args()

    main(
        notes_file=args.notes,
        outfile=args.out,
        view_mode=args.view_mode,
        criteria=FilterCriteria(
            search_text=args.search,
            categories=tuple(args.category),
            tags=tuple(args.tag),
            start_date=_parse_date(args.start),
            end_date=_parse_date(args.end, end_of_day=True),
            min_degree=args.min_degree,
            include_deleted=args.include_deleted,
        ),
        max_ticks=args.max_ticks,
    )
