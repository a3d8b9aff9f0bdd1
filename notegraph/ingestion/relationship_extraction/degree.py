"""Node degree calculation over the relationship multigraph."""

from collections import Counter

from notegraph.domain.graph import GraphEdge, GraphNode


class DegreeCalculator:
    """Counts incident edges per node, parallel edges included."""

    def calculate(self, edges: list[GraphEdge]) -> Counter[str]:
        """Accumulate degrees in a single pass over the edges.

        Args:
            edges: All edges of the multigraph

        Returns:
            Counter mapping node ID to degree (missing IDs count as 0)
        """
        degrees: Counter[str] = Counter()
        for edge in edges:
            degrees[edge.source_id] += 1
            degrees[edge.target_id] += 1
        return degrees

    def assign(self, nodes: list[GraphNode], edges: list[GraphEdge]) -> None:
        """Store each node's degree on the node.

        Args:
            nodes: Nodes to update
            edges: All edges of the multigraph
        """
        degrees = self.calculate(edges)
        for node in nodes:
            node.degree = degrees[node.id]
