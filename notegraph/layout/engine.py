"""Force-directed layout simulation with drag and pin support."""

import asyncio
import logging
from collections.abc import Callable, Mapping
from enum import Enum

import numpy as np
from pydantic import BaseModel, Field

from notegraph.domain.graph import Graph, LayoutState, ViewMode

from . import forces
from .resolver import EdgeResolver

logger = logging.getLogger(__name__)

DEFAULT_ALPHA_MIN = 0.001


class LayoutSettings(BaseModel):
    """Physics constants of the simulation."""

    alpha: float = 1.0
    alpha_min: float = DEFAULT_ALPHA_MIN
    alpha_decay: float = 1 - DEFAULT_ALPHA_MIN ** (1 / 300)
    velocity_decay: float = Field(default=0.4, ge=0.0, le=1.0)
    drag_alpha_target: float = 0.3
    charge_distance_max: float = 300.0
    collision_strength: float = 0.7
    center_strength: float = 1.0
    anchor_strength: float = 0.1
    anchor_radius: float = 150.0


class LayoutPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAGGING = "dragging"
    SETTLED = "settled"
    STOPPED = "stopped"


def charge_strength(degree: int) -> float:
    """Repulsion of a node; hubs repel less so they stay central."""
    return -max(50.0, 100.0 - degree * 10.0)


def collision_radius(degree: int) -> float:
    return max(15.0, degree * 3.0 + 10.0)


class LayoutEngine:
    """Stepped force-directed layout of a single graph.

    The engine is created for one graph and thrown away on the next rebuild.
    The host drives it by calling :meth:`step` once per animation frame (or
    awaiting :meth:`animate`). Pointer drags force-set a node's position and
    keep the simulation warm until released.
    """

    def __init__(
        self,
        graph: Graph,
        *,
        width: float,
        height: float,
        view_mode: ViewMode = "force",
        settings: LayoutSettings | None = None,
        pins: Mapping[str, tuple[float, float]] | None = None,
        seed: int | None = 0,
    ):
        """Initialize the simulation for a graph.

        Args:
            graph: Graph to lay out; its edges are resolved to indices here
            width: Viewport width in px
            height: Viewport height in px
            view_mode: "radial" adds the category anchor force
            settings: Physics constants
            pins: Positions of nodes to keep fixed, by node ID
            seed: Seed for the jitter that separates coincident nodes
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport must have a positive size, got {width}x{height}")
        if view_mode not in ("force", "radial", "hierarchical"):
            raise ValueError(f"Unknown view mode: {view_mode}")

        self.settings = settings or LayoutSettings()
        self.view_mode = view_mode
        self.center = np.array([width / 2, height / 2], dtype=np.float64)
        self.phase = LayoutPhase.IDLE
        self.alpha = self.settings.alpha
        self.alpha_target = 0.0
        self.tick_count = 0

        self._rng = np.random.default_rng(seed)
        self._node_ids = [node.id for node in graph.nodes]
        resolver = EdgeResolver(self._node_ids)
        self._index = resolver.index
        self._links = resolver.resolve(graph.edges)

        degrees = [node.degree for node in graph.nodes]
        self._charges = np.array([charge_strength(d) for d in degrees], dtype=np.float64)
        self._radii = np.array([collision_radius(d) for d in degrees], dtype=np.float64)

        self._anchors = None
        if view_mode == "radial":
            categories = [node.category for node in graph.nodes]
            self._anchors = forces.compute_anchor_targets(
                categories, self.center, self.settings.anchor_radius
            )

        count = len(self._node_ids)
        if count == 1:
            self._positions = self.center.reshape(1, 2).copy()
        else:
            self._positions = forces.phyllotaxis_positions(count, self.center)
        self._velocities = np.zeros((count, 2), dtype=np.float64)
        self._fixed = np.full((count, 2), np.nan)
        self._dragged: str | None = None

        for node_id, (x, y) in (pins or {}).items():
            self.pin(node_id, x, y)

    @property
    def node_count(self) -> int:
        return len(self._node_ids)

    @property
    def is_active(self) -> bool:
        """Whether the host should keep scheduling steps."""
        return self.phase in (LayoutPhase.RUNNING, LayoutPhase.DRAGGING)

    @property
    def dragged_node_id(self) -> str | None:
        return self._dragged

    def start(self) -> bool:
        """Begin the simulation.

        Returns:
            False if there is nothing to lay out, True otherwise
        """
        if self.phase is not LayoutPhase.IDLE:
            return self.is_active
        if self.node_count == 0:
            logger.debug("Empty graph, layout not started")
            return False
        if self.node_count == 1:
            self.phase = LayoutPhase.SETTLED
            return True

        self.phase = LayoutPhase.RUNNING
        logger.debug(f"Layout started for {self.node_count} nodes ({self.view_mode} mode)")
        return True

    def stop(self) -> None:
        """Stop stepping this instance for good."""
        self.phase = LayoutPhase.STOPPED
        self._dragged = None

    def step(self) -> bool:
        """Advance the simulation by one tick.

        Returns:
            True while further steps are wanted
        """
        if not self.is_active:
            return False

        self._tick()
        if self.phase is LayoutPhase.RUNNING and self.alpha < self.settings.alpha_min:
            self.phase = LayoutPhase.SETTLED
            logger.debug(f"Layout settled after {self.tick_count} ticks")
        return self.is_active

    def run(self, max_ticks: int | None = None) -> int:
        """Step until the layout settles or ``max_ticks`` is reached.

        Args:
            max_ticks: Upper bound on the number of steps

        Returns:
            Number of steps taken
        """
        if max_ticks is None and self.phase is LayoutPhase.DRAGGING:
            raise RuntimeError("Cannot run to completion while a node is being dragged")

        self.start()
        ticks = 0
        while self.is_active and (max_ticks is None or ticks < max_ticks):
            self.step()
            ticks += 1
        return ticks

    async def animate(
        self,
        frame_interval: float = 1 / 60,
        on_tick: Callable[["LayoutEngine"], None] | None = None,
        max_ticks: int | None = None,
    ) -> int:
        """Run one step per frame, yielding to the event loop in between.

        Args:
            frame_interval: Seconds to wait between steps
            on_tick: Called after every step, e.g. to redraw
            max_ticks: Upper bound on the number of steps

        Returns:
            Number of steps taken
        """
        self.start()
        ticks = 0
        while self.is_active and (max_ticks is None or ticks < max_ticks):
            self.step()
            ticks += 1
            if on_tick is not None:
                on_tick(self)
            await asyncio.sleep(frame_interval)
        return ticks

    def reheat(self, alpha: float | None = None) -> None:
        """Re-energize a settled layout so it moves again."""
        if self.phase in (LayoutPhase.IDLE, LayoutPhase.STOPPED) or self.node_count < 2:
            return
        self.alpha = self.settings.alpha if alpha is None else alpha
        if self.phase is LayoutPhase.SETTLED:
            self.phase = LayoutPhase.RUNNING

    def start_drag(self, node_id: str) -> bool:
        """Grab a node. It follows the pointer until :meth:`end_drag`.

        Returns:
            False if the node is unknown or the layout is not running
        """
        index = self._index.get(node_id)
        if index is None or self.phase in (LayoutPhase.IDLE, LayoutPhase.STOPPED):
            return False
        if self._dragged is not None and self._dragged != node_id:
            self.end_drag(self._dragged)

        self._dragged = node_id
        self._fixed[index] = self._positions[index]
        self.alpha_target = self.settings.drag_alpha_target
        self.phase = LayoutPhase.DRAGGING
        return True

    def drag_to(self, node_id: str, x: float, y: float) -> bool:
        """Move the dragged node to the pointer position, bypassing integration."""
        if node_id != self._dragged:
            return False
        index = self._index[node_id]
        self._fixed[index] = (x, y)
        self._positions[index] = (x, y)
        self._velocities[index] = 0.0
        return True

    def end_drag(self, node_id: str, *, pin: bool = False) -> bool:
        """Release the dragged node.

        Args:
            node_id: The node being dragged
            pin: Keep the node fixed where it was dropped (double-click gesture)

        Returns:
            False if the node was not being dragged
        """
        if node_id != self._dragged:
            return False
        if not pin:
            self._fixed[self._index[node_id]] = np.nan
        self._dragged = None
        self.alpha_target = 0.0
        if self.phase is LayoutPhase.DRAGGING:
            self.phase = LayoutPhase.RUNNING
        return True

    def pin(self, node_id: str, x: float | None = None, y: float | None = None) -> bool:
        """Fix a node at the given position, or where it currently is."""
        index = self._index.get(node_id)
        if index is None:
            return False
        if x is not None and y is not None:
            self._positions[index] = (x, y)
        self._fixed[index] = self._positions[index]
        self._velocities[index] = 0.0
        return True

    def unpin(self, node_id: str) -> bool:
        """Release a pinned node back to free integration."""
        index = self._index.get(node_id)
        if index is None or node_id == self._dragged:
            return False
        self._fixed[index] = np.nan
        return True

    def is_pinned(self, node_id: str) -> bool:
        index = self._index.get(node_id)
        return index is not None and not np.isnan(self._fixed[index]).any()

    def pins(self) -> dict[str, tuple[float, float]]:
        """Fixed positions of pinned nodes, excluding a node mid-drag."""
        return {
            node_id: (float(self._fixed[index, 0]), float(self._fixed[index, 1]))
            for node_id, index in self._index.items()
            if node_id != self._dragged and not np.isnan(self._fixed[index]).any()
        }

    def state_of(self, node_id: str) -> LayoutState | None:
        index = self._index.get(node_id)
        if index is None:
            return None
        return self._state_at(index)

    def states(self) -> dict[str, LayoutState]:
        """Current layout state of every node, in graph order."""
        return {node_id: self._state_at(index) for node_id, index in self._index.items()}

    def centroid(self) -> tuple[float, float]:
        """Mean node position, or the viewport centre for an empty graph."""
        if self.node_count == 0:
            return float(self.center[0]), float(self.center[1])
        mean = self._positions.mean(axis=0)
        return float(mean[0]), float(mean[1])

    def _state_at(self, index: int) -> LayoutState:
        fx, fy = self._fixed[index]
        pinned = not (np.isnan(fx) or np.isnan(fy))
        return LayoutState(
            node_id=self._node_ids[index],
            x=float(self._positions[index, 0]),
            y=float(self._positions[index, 1]),
            vx=float(self._velocities[index, 0]),
            vy=float(self._velocities[index, 1]),
            fx=float(fx) if pinned else None,
            fy=float(fy) if pinned else None,
        )

    def _tick(self) -> None:
        settings = self.settings
        self.alpha += (self.alpha_target - self.alpha) * settings.alpha_decay
        self.tick_count += 1

        positions, velocities = self._positions, self._velocities
        forces.apply_link_force(positions, velocities, self._links, self.alpha, self._rng)
        forces.apply_charge_force(
            positions,
            velocities,
            self._charges,
            self.alpha,
            settings.charge_distance_max,
            self._rng,
        )
        forces.apply_center_force(positions, self.center, settings.center_strength)
        forces.apply_collision_force(
            positions, velocities, self._radii, settings.collision_strength, self._rng
        )
        if self._anchors is not None:
            forces.apply_anchor_force(
                positions, velocities, self._anchors, self.alpha, settings.anchor_strength
            )

        fixed = ~np.isnan(self._fixed).any(axis=1)
        free = ~fixed
        velocities[free] *= 1 - settings.velocity_decay
        positions[free] += velocities[free]
        positions[fixed] = self._fixed[fixed]
        velocities[fixed] = 0.0
