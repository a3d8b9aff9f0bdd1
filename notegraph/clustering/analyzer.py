"""Grouping graph nodes into legend clusters."""

import logging
from collections import Counter

from notegraph.clustering.palettes import CATEGORY10, SET3, Palette
from notegraph.domain.graph import ClusterInfo, GraphNode
from notegraph.ingestion.ingestor import category_cluster_id

logger = logging.getLogger(__name__)

MAX_TAG_CLUSTERS = 10
MIN_TAG_CLUSTER_SIZE = 2


def tag_cluster_id(tag: str) -> str:
    return f"tag-{tag}"


class ClusterAnalyzer:
    """Derives category and top-tag clusters from a set of nodes.

    Palettes are passed in explicitly so separate graphs never share colour
    assignment state.
    """

    def __init__(
        self,
        *,
        category_palette: Palette = CATEGORY10,
        tag_palette: Palette = SET3,
        max_tag_clusters: int = MAX_TAG_CLUSTERS,
    ):
        """Initialize the analyzer.

        Args:
            category_palette: Colours cycled over category clusters
            tag_palette: Colours cycled over tag clusters
            max_tag_clusters: Maximum number of tag clusters returned
        """
        self.category_palette = category_palette
        self.tag_palette = tag_palette
        self.max_tag_clusters = max_tag_clusters

    def analyze(self, nodes: list[GraphNode]) -> list[ClusterInfo]:
        """Build the ordered cluster list: categories first, then top tags.

        Args:
            nodes: Nodes of the graph

        Returns:
            List of ClusterInfo objects
        """
        clusters = self.category_clusters(nodes) + self.tag_clusters(nodes)
        logger.debug(f"Derived {len(clusters)} clusters from {len(nodes)} nodes")
        return clusters

    def category_clusters(self, nodes: list[GraphNode]) -> list[ClusterInfo]:
        """One cluster per category, in order of first appearance."""
        sizes = Counter(node.category for node in nodes)
        return [
            ClusterInfo(
                id=category_cluster_id(category),
                name=category,
                kind="category",
                color=self.category_palette.color_for(index),
                size=size,
            )
            for index, (category, size) in enumerate(sizes.items())
        ]

    def tag_clusters(self, nodes: list[GraphNode]) -> list[ClusterInfo]:
        """The most frequent tags carried by at least two notes."""
        counts = Counter(tag for node in nodes for tag in node.tags)
        frequent = [(tag, count) for tag, count in counts.items() if count >= MIN_TAG_CLUSTER_SIZE]
        # sorted() is stable, so ties keep first-seen order
        ranked = sorted(frequent, key=lambda item: item[1], reverse=True)[: self.max_tag_clusters]

        return [
            ClusterInfo(
                id=tag_cluster_id(tag),
                name=tag,
                kind="tag",
                color=self.tag_palette.color_for(index),
                size=count,
            )
            for index, (tag, count) in enumerate(ranked)
        ]

    def category_colors(self, nodes: list[GraphNode]) -> dict[str, str]:
        """Map each category to its cluster colour."""
        return {cluster.name: cluster.color for cluster in self.category_clusters(nodes)}
