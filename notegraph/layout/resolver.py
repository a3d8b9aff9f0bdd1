"""Resolution of edge endpoints from note IDs to simulation indices."""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from notegraph.domain.graph import GraphEdge

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedLinks:
    """Edges as parallel arrays of node indices, ready for the simulation."""

    source: NDArray[np.intp]
    target: NDArray[np.intp]
    strength: NDArray[np.float64]
    distance: NDArray[np.float64]

    def __len__(self) -> int:
        return len(self.source)


class EdgeResolver:
    """Builds the id -> index table once and resolves edges against it."""

    def __init__(self, node_ids: list[str]):
        """Initialize resolver with the simulation's node order.

        Args:
            node_ids: Node IDs in the order used by the simulation arrays
        """
        self.index = {node_id: position for position, node_id in enumerate(node_ids)}

    def resolve(self, edges: list[GraphEdge]) -> ResolvedLinks:
        """Convert edges to index arrays, dropping edges with unknown endpoints.

        Args:
            edges: Edges referencing node IDs

        Returns:
            ResolvedLinks with one entry per resolvable edge
        """
        sources, targets, strengths, distances = [], [], [], []
        for edge in edges:
            source = self.index.get(edge.source_id)
            target = self.index.get(edge.target_id)
            if source is None or target is None:
                logger.warning(
                    f"Dropping {edge.type} edge with unknown endpoint: "
                    f"{edge.source_id} -> {edge.target_id}"
                )
                continue
            sources.append(source)
            targets.append(target)
            strengths.append(edge.strength)
            distances.append(edge.distance)

        return ResolvedLinks(
            source=np.array(sources, dtype=np.intp),
            target=np.array(targets, dtype=np.intp),
            strength=np.array(strengths, dtype=np.float64),
            distance=np.array(distances, dtype=np.float64),
        )
