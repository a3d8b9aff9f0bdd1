"""Force contributions of the layout simulation.

Every function works on all nodes at once: ``positions`` and ``velocities``
are (N, 2) float arrays updated in place. Pairwise forces are exact passes
over the full N x N distance matrix.
"""

import math

import numpy as np
from numpy.typing import NDArray

from notegraph.layout.resolver import ResolvedLinks

Vectors = NDArray[np.float64]

JIGGLE_SCALE = 1e-6


def jiggle(rng: np.random.Generator, count: int) -> Vectors:
    """Tiny random offsets used to separate coincident nodes."""
    return (rng.random((count, 2)) - 0.5) * JIGGLE_SCALE


def _squared_lengths(delta: Vectors) -> NDArray[np.float64]:
    return np.einsum("...k,...k->...", delta, delta)


def apply_link_force(
    positions: Vectors,
    velocities: Vectors,
    links: ResolvedLinks,
    alpha: float,
    rng: np.random.Generator,
) -> None:
    """Pull or push each edge's endpoints toward the edge's preferred distance.

    The correction is scaled by edge strength and split between the two
    endpoints in inverse proportion to how many links each one has.
    """
    if len(links) == 0:
        return

    source, target = links.source, links.target
    delta = positions[target] + velocities[target] - positions[source] - velocities[source]
    coincident = ~delta.any(axis=1)
    if coincident.any():
        delta[coincident] = jiggle(rng, int(coincident.sum()))

    length = np.sqrt(_squared_lengths(delta))
    factor = (length - links.distance) / length * alpha * links.strength
    delta *= factor[:, np.newaxis]

    count = np.bincount(np.concatenate([source, target]), minlength=len(positions))
    bias = count[source] / (count[source] + count[target])
    np.add.at(velocities, target, -delta * bias[:, np.newaxis])
    np.add.at(velocities, source, delta * (1 - bias)[:, np.newaxis])


def apply_charge_force(
    positions: Vectors,
    velocities: Vectors,
    strengths: NDArray[np.float64],
    alpha: float,
    distance_max: float,
    rng: np.random.Generator,
    distance_min: float = 1.0,
) -> None:
    """Many-body repulsion between every pair of nodes within ``distance_max``.

    Node j moves node i by ``(x_j - x_i) * strength_j * alpha / d^2``; negative
    strengths repel.
    """
    n = len(positions)
    if n < 2:
        return

    delta = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]  # x_j - x_i
    dist2 = _squared_lengths(delta)
    off_diagonal = ~np.eye(n, dtype=bool)

    coincident = off_diagonal & (dist2 == 0)
    if coincident.any():
        delta[coincident] = jiggle(rng, int(coincident.sum()))
        dist2 = _squared_lengths(delta)

    in_range = off_diagonal & (dist2 < distance_max**2)
    dist2 = np.maximum(dist2, distance_min**2)
    weight = np.where(in_range, strengths[np.newaxis, :] * alpha / dist2, 0.0)
    velocities += np.einsum("ij,ijk->ik", weight, delta)


def apply_collision_force(
    positions: Vectors,
    velocities: Vectors,
    radii: NDArray[np.float64],
    strength: float,
    rng: np.random.Generator,
) -> None:
    """Soft non-overlap constraint between nodes treated as circles.

    Overlapping pairs are pushed apart along the line joining their predicted
    positions; the smaller node takes the larger share of the correction.
    """
    n = len(positions)
    if n < 2:
        return

    predicted = positions + velocities
    delta = predicted[:, np.newaxis, :] - predicted[np.newaxis, :, :]  # p_i - p_j
    dist2 = _squared_lengths(delta)
    reach = radii[:, np.newaxis] + radii[np.newaxis, :]
    overlapping = ~np.eye(n, dtype=bool) & (dist2 < reach**2)
    if not overlapping.any():
        return

    coincident = overlapping & (dist2 == 0)
    if coincident.any():
        delta[coincident] = jiggle(rng, int(coincident.sum()))
        dist2 = _squared_lengths(delta)

    length = np.sqrt(dist2)
    safe_length = np.where(overlapping, length, 1.0)
    push = np.where(overlapping, (reach - length) / safe_length * strength, 0.0)

    squared_radii = radii**2
    share = squared_radii[np.newaxis, :] / (squared_radii[:, np.newaxis] + squared_radii[np.newaxis, :])
    velocities += np.einsum("ij,ijk->ik", push * share, delta)


def apply_center_force(positions: Vectors, center: Vectors, strength: float) -> None:
    """Translate all nodes so their centroid moves toward ``center``."""
    if len(positions) == 0:
        return
    positions -= (positions.mean(axis=0) - center) * strength


def apply_anchor_force(
    positions: Vectors,
    velocities: Vectors,
    targets: Vectors,
    alpha: float,
    strength: float,
) -> None:
    """Pull every node toward its own target point."""
    velocities += (targets - positions) * strength * alpha


def compute_anchor_targets(categories: list[str], center: Vectors, radius: float) -> Vectors:
    """Place each category on a ring around ``center`` and map nodes to it.

    Args:
        categories: Category of each node, in simulation order
        center: Viewport centre
        radius: Ring radius in px

    Returns:
        (N, 2) array with the anchor point of each node's category
    """
    ordered = list(dict.fromkeys(categories))
    if not ordered:
        return np.zeros((0, 2))

    step = 2 * math.pi / len(ordered)
    anchors = {
        category: center + radius * np.array([math.cos(index * step), math.sin(index * step)])
        for index, category in enumerate(ordered)
    }
    return np.array([anchors[category] for category in categories], dtype=np.float64)


def phyllotaxis_positions(count: int, center: Vectors, initial_radius: float = 10.0) -> Vectors:
    """Deterministic sunflower arrangement used as the starting layout."""
    index = np.arange(count, dtype=np.float64)
    radius = initial_radius * np.sqrt(0.5 + index)
    angle = index * math.pi * (3 - math.sqrt(5))
    return center + np.column_stack([radius * np.cos(angle), radius * np.sin(angle)])
