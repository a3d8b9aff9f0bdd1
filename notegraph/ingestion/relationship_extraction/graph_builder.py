"""Building the note relationship multigraph."""

import logging
from collections import defaultdict
from itertools import combinations

from notegraph.domain.graph import EdgeType, Graph, GraphEdge, GraphNode

from . import analyzer
from .degree import DegreeCalculator

logger = logging.getLogger(__name__)

# (strength, preferred distance in px) per fixed-strength edge type
EDGE_PROFILES: dict[EdgeType, tuple[float, float]] = {
    "same-category": (1.0, 50.0),
    "same-tag": (0.8, 60.0),
    "similar-content": (0.3, 100.0),
}
TEMPORAL_DISTANCE = 80.0

PairKey = tuple[str, str]


def pair_key(first_id: str, second_id: str) -> PairKey:
    """Order-independent key for a node pair."""
    return (first_id, second_id) if first_id <= second_id else (second_id, first_id)


def _profile_edge(source: GraphNode, target: GraphNode, edge_type: EdgeType) -> GraphEdge:
    strength, distance = EDGE_PROFILES[edge_type]
    return GraphEdge(
        source_id=source.id,
        target_id=target.id,
        type=edge_type,
        strength=strength,
        distance=distance,
    )


class RelationshipDetector:
    """Infers typed edges between notes from four independent heuristics.

    The passes always run category, tag, content similarity, temporal: the
    similarity pass only links pairs that no earlier pass has linked.
    """

    def __init__(self) -> None:
        self.degree_calculator = DegreeCalculator()

    def build_graph(self, nodes: list[GraphNode]) -> Graph:
        """Detect all relationships and assign node degrees.

        Args:
            nodes: Freshly ingested nodes

        Returns:
            Graph holding the given nodes and every detected edge
        """
        edges = self.detect(nodes)
        self.degree_calculator.assign(nodes, edges)
        return Graph(nodes=nodes, edges=edges)

    def detect(self, nodes: list[GraphNode]) -> list[GraphEdge]:
        """Run the four detection passes in order.

        Args:
            nodes: Nodes to relate

        Returns:
            List of edges; parallel edges between a pair are kept
        """
        category_edges = self._build_category_edges(nodes)
        tag_edges = self._build_tag_edges(nodes)

        linked_pairs = {pair_key(e.source_id, e.target_id) for e in category_edges + tag_edges}
        similarity_edges = self._build_similarity_edges(nodes, linked_pairs)
        temporal_edges = self._build_temporal_edges(nodes)

        logger.debug(
            f"Detected {len(category_edges)} category, {len(tag_edges)} tag, "
            f"{len(similarity_edges)} similarity and {len(temporal_edges)} temporal edges"
        )
        return category_edges + tag_edges + similarity_edges + temporal_edges

    def _build_category_edges(self, nodes: list[GraphNode]) -> list[GraphEdge]:
        """Link every pair of notes sharing a category."""
        groups: dict[str, list[GraphNode]] = defaultdict(list)
        for node in nodes:
            groups[node.category].append(node)

        return [
            _profile_edge(source, target, "same-category")
            for group in groups.values()
            for source, target in combinations(group, 2)
        ]

    def _build_tag_edges(self, nodes: list[GraphNode]) -> list[GraphEdge]:
        """Link every pair of notes sharing a tag, once per shared tag."""
        groups: dict[str, list[GraphNode]] = defaultdict(list)
        for node in nodes:
            for tag in node.tags:
                groups[tag].append(node)

        return [
            _profile_edge(source, target, "same-tag")
            for group in groups.values()
            for source, target in combinations(group, 2)
        ]

    def _build_similarity_edges(
        self, nodes: list[GraphNode], linked_pairs: set[PairKey]
    ) -> list[GraphEdge]:
        """Link pairs of notes sharing a content token, unless already linked.

        Args:
            nodes: Nodes to relate
            linked_pairs: Pairs that already carry an edge of any type; updated in place

        Returns:
            At most one similarity edge per unlinked pair
        """
        token_index: dict[str, list[GraphNode]] = defaultdict(list)
        for node in nodes:
            for token in analyzer.extract_content_tokens(node.note.text):
                token_index[token].append(node)

        edges = []
        for group in token_index.values():
            if len(group) < 2:
                continue
            for source, target in combinations(group, 2):
                key = pair_key(source.id, target.id)
                if key in linked_pairs:
                    continue
                linked_pairs.add(key)
                edges.append(_profile_edge(source, target, "similar-content"))
        return edges

    def _build_temporal_edges(self, nodes: list[GraphNode]) -> list[GraphEdge]:
        """Link each note to its chronological successor when created within a week."""
        chronological = sorted(nodes, key=lambda node: node.note.created_at)

        edges = []
        for current, successor in zip(chronological, chronological[1:]):
            days = analyzer.days_between(current.note.created_at, successor.note.created_at)
            if not analyzer.is_temporally_close(days):
                continue
            edges.append(
                GraphEdge(
                    source_id=current.id,
                    target_id=successor.id,
                    type="temporal",
                    strength=analyzer.calculate_temporal_strength(days),
                    distance=TEMPORAL_DISTANCE,
                )
            )
        return edges
