"""Filtering the relationship graph down to the visible subgraph."""

from collections.abc import Iterable

from pydantic import BaseModel

from notegraph.domain.filters import FilterCriteria
from notegraph.domain.graph import Graph, GraphNode
from notegraph.domain.note import Note


class Facets(BaseModel):
    """Distinct values available to the filter pickers."""

    categories: list[str] = []
    tags: list[str] = []
    content_types: list[str] = []


def matches_search(note: Note, search_text: str) -> bool:
    """Case-insensitive substring match against title, body, category and tags."""
    needle = search_text.strip().casefold()
    if not needle:
        return True
    return any(needle in field.casefold() for field in note.searchable_fields())


def node_matches(node: GraphNode, criteria: FilterCriteria) -> bool:
    """Evaluate the node predicate, cheapest checks first after search."""
    note = node.note
    if not matches_search(note, criteria.search_text):
        return False
    if criteria.categories and note.category not in criteria.categories:
        return False
    if criteria.tags and not any(tag in criteria.tags for tag in note.tags):
        return False
    if criteria.content_types and note.content_type not in criteria.content_types:
        return False
    if criteria.start_date is not None and note.created_at < criteria.start_date:
        return False
    if criteria.end_date is not None and note.created_at > criteria.end_date:
        return False
    if not criteria.include_deleted and note.is_deleted:
        return False
    return node.degree >= criteria.min_degree


def filter_graph(graph: Graph, criteria: FilterCriteria) -> Graph:
    """Return the subgraph visible under the given criteria.

    The input graph is not modified. Edges are kept only when both endpoints
    survive, so the result never contains a dangling edge. Degrees are not
    recomputed, which makes filtering idempotent. Nodes and edges are copied,
    so highlight and selection flags set on the result stay off the input.

    Args:
        graph: The full relationship graph
        criteria: Filter criteria

    Returns:
        A new Graph with its own node and edge objects; notes are shared
    """
    nodes = [node.model_copy() for node in graph.nodes if node_matches(node, criteria)]
    visible = {node.id for node in nodes}
    edges = [
        edge.model_copy()
        for edge in graph.edges
        if edge.source_id in visible and edge.target_id in visible
    ]
    return Graph(nodes=nodes, edges=edges)


def collect_facets(notes: Iterable[Note]) -> Facets:
    """Distinct categories, tags and content types in order of first appearance."""
    categories: dict[str, None] = {}
    tags: dict[str, None] = {}
    content_types: dict[str, None] = {}
    for note in notes:
        categories.setdefault(note.category)
        content_types.setdefault(note.content_type)
        for tag in note.tags:
            tags.setdefault(tag)
    return Facets(
        categories=list(categories),
        tags=list(tags),
        content_types=list(content_types),
    )


def isolated_nodes(graph: Graph) -> list[GraphNode]:
    """Nodes without any relationship to other notes."""
    return [node for node in graph.nodes if node.degree == 0]
