"""Tests for the force-directed layout engine and its forces."""

import asyncio
import math

import numpy as np
import pytest

from notegraph.domain.graph import Graph, GraphEdge, GraphNode
from notegraph.domain.note import Note
from notegraph.ingestion.relationship_extraction import DegreeCalculator
from notegraph.layout import forces
from notegraph.layout.engine import (
    LayoutEngine,
    LayoutPhase,
    charge_strength,
    collision_radius,
)
from notegraph.layout.resolver import EdgeResolver

WIDTH, HEIGHT = 960, 600


def _edge(source: str, target: str, edge_type: str = "same-category") -> GraphEdge:
    distance = {"same-category": 50.0, "same-tag": 60.0}.get(edge_type, 80.0)
    return GraphEdge(
        source_id=source, target_id=target, type=edge_type, strength=1.0, distance=distance
    )


def _graph(nodes: dict[str, str], edges: list[tuple[str, str]] = ()) -> Graph:
    """Graph from {node_id: category} and (source, target) pairs."""
    graph_nodes = [GraphNode(id=node_id, note=Note(id=node_id, category=category)) for node_id, category in nodes.items()]
    graph_edges = [_edge(source, target) for source, target in edges]
    DegreeCalculator().assign(graph_nodes, graph_edges)
    return Graph(nodes=graph_nodes, edges=graph_edges)


def _distance(engine: LayoutEngine, first: str, second: str) -> float:
    a, b = engine.state_of(first), engine.state_of(second)
    return math.hypot(a.x - b.x, a.y - b.y)


@pytest.fixture
def pair_engine() -> LayoutEngine:
    return LayoutEngine(_graph({"a": "A", "b": "A"}, [("a", "b")]), width=WIDTH, height=HEIGHT)


def test_empty_graph_does_not_start() -> None:
    """Nothing to lay out leaves the engine idle."""
    engine = LayoutEngine(Graph(), width=WIDTH, height=HEIGHT)

    assert engine.start() is False
    assert engine.phase is LayoutPhase.IDLE
    assert engine.run() == 0
    assert engine.states() == {}
    assert engine.centroid() == (480.0, 300.0)


def test_single_node_sits_at_viewport_centre() -> None:
    """A lone node is placed at the centre and needs no simulation."""
    engine = LayoutEngine(_graph({"solo": "A"}), width=WIDTH, height=HEIGHT)

    assert engine.start() is True
    assert engine.phase is LayoutPhase.SETTLED
    assert engine.run() == 0
    state = engine.state_of("solo")
    assert (state.x, state.y) == (480.0, 300.0)


def test_two_linked_nodes_settle(pair_engine: LayoutEngine) -> None:
    """Alpha decays below its minimum in about three hundred ticks."""
    ticks = pair_engine.run()

    assert pair_engine.phase is LayoutPhase.SETTLED
    assert 290 <= ticks <= 310
    assert pair_engine.alpha < pair_engine.settings.alpha_min
    assert not pair_engine.step()
    for state in pair_engine.states().values():
        assert math.isfinite(state.x) and math.isfinite(state.y)


def test_settled_layout_is_centred(pair_engine: LayoutEngine) -> None:
    pair_engine.run()

    x, y = pair_engine.centroid()

    assert x == pytest.approx(480.0, abs=1.0)
    assert y == pytest.approx(300.0, abs=1.0)


def test_linked_nodes_end_closer_than_unlinked_ones() -> None:
    """Links pull their endpoints together while charge pushes strangers apart."""
    engine = LayoutEngine(
        _graph({"a": "A", "b": "A", "c": "B"}, [("a", "b")]), width=WIDTH, height=HEIGHT
    )

    engine.run()

    assert _distance(engine, "a", "b") < _distance(engine, "a", "c")
    assert _distance(engine, "a", "b") < _distance(engine, "b", "c")


def test_same_seed_gives_same_layout() -> None:
    """Runs are reproducible for a fixed seed."""
    graph = _graph({"a": "A", "b": "A", "c": "B", "d": "B"}, [("a", "b"), ("c", "d")])

    first = LayoutEngine(graph, width=WIDTH, height=HEIGHT, seed=7)
    second = LayoutEngine(graph, width=WIDTH, height=HEIGHT, seed=7)
    first.run(max_ticks=50)
    second.run(max_ticks=50)

    assert first.states() == second.states()


def test_drag_requires_a_started_layout(pair_engine: LayoutEngine) -> None:
    assert pair_engine.start_drag("a") is False

    pair_engine.start()

    assert pair_engine.start_drag("missing") is False
    assert pair_engine.start_drag("a") is True


def test_drag_moves_node_and_keeps_simulation_warm(pair_engine: LayoutEngine) -> None:
    """The dragged node follows the pointer and alpha heads for the drag target."""
    pair_engine.start()
    pair_engine.start_drag("a")

    assert pair_engine.phase is LayoutPhase.DRAGGING
    assert pair_engine.dragged_node_id == "a"
    assert pair_engine.drag_to("a", 100.0, 200.0)
    for _ in range(600):
        assert pair_engine.step()

    state = pair_engine.state_of("a")
    assert (state.x, state.y) == (100.0, 200.0)
    assert (state.fx, state.fy) == (100.0, 200.0)
    assert pair_engine.alpha == pytest.approx(0.3, abs=1e-3)
    assert pair_engine.is_active


def test_drag_to_ignores_other_nodes(pair_engine: LayoutEngine) -> None:
    pair_engine.start()
    pair_engine.start_drag("a")

    assert pair_engine.drag_to("b", 1.0, 1.0) is False


def test_cannot_run_to_completion_while_dragging(pair_engine: LayoutEngine) -> None:
    pair_engine.start()
    pair_engine.start_drag("a")

    with pytest.raises(RuntimeError):
        pair_engine.run()
    assert pair_engine.run(max_ticks=3) == 3


def test_release_frees_node_and_lets_layout_cool(pair_engine: LayoutEngine) -> None:
    """Ending a drag without pinning releases the node."""
    pair_engine.start()
    pair_engine.start_drag("a")
    pair_engine.drag_to("a", 100.0, 200.0)

    assert pair_engine.end_drag("a") is True
    assert pair_engine.phase is LayoutPhase.RUNNING
    assert pair_engine.alpha_target == 0.0
    assert not pair_engine.is_pinned("a")
    assert pair_engine.dragged_node_id is None

    pair_engine.run()

    assert pair_engine.phase is LayoutPhase.SETTLED


def test_release_with_pin_keeps_node_fixed(pair_engine: LayoutEngine) -> None:
    """A pinned drop stays where it was dropped as the layout settles."""
    pair_engine.start()
    pair_engine.start_drag("a")
    pair_engine.drag_to("a", 100.0, 200.0)

    assert pair_engine.pins() == {}

    pair_engine.end_drag("a", pin=True)
    pair_engine.run()

    state = pair_engine.state_of("a")
    assert (state.x, state.y) == (100.0, 200.0)
    assert pair_engine.pins() == {"a": (100.0, 200.0)}
    assert pair_engine.unpin("a")
    assert pair_engine.pins() == {}


def test_end_drag_for_wrong_node_is_ignored(pair_engine: LayoutEngine) -> None:
    pair_engine.start()
    pair_engine.start_drag("a")

    assert pair_engine.end_drag("b") is False
    assert pair_engine.phase is LayoutPhase.DRAGGING


def test_drag_can_restart_a_settled_layout(pair_engine: LayoutEngine) -> None:
    pair_engine.run()

    assert pair_engine.start_drag("b") is True
    assert pair_engine.step() is True


def test_initial_pins_hold_position() -> None:
    """Pins handed over from a previous engine are respected."""
    graph = _graph({"a": "A", "b": "A", "c": "B"}, [("a", "b")])
    engine = LayoutEngine(graph, width=WIDTH, height=HEIGHT, pins={"b": (10.0, 20.0), "gone": (0.0, 0.0)})

    engine.run()

    state = engine.state_of("b")
    assert (state.x, state.y) == (10.0, 20.0)
    assert state.vx == 0.0 and state.vy == 0.0
    assert engine.pins() == {"b": (10.0, 20.0)}


def test_stop_ends_stepping_for_good(pair_engine: LayoutEngine) -> None:
    pair_engine.start()
    pair_engine.stop()

    assert pair_engine.phase is LayoutPhase.STOPPED
    assert pair_engine.step() is False
    assert pair_engine.start() is False
    assert pair_engine.start_drag("a") is False


def test_reheat_restarts_settled_layout(pair_engine: LayoutEngine) -> None:
    pair_engine.run()

    pair_engine.reheat()

    assert pair_engine.phase is LayoutPhase.RUNNING
    assert pair_engine.alpha == 1.0


def test_radial_mode_pulls_categories_toward_their_anchors() -> None:
    """Categories are placed on a ring, the first to the right of centre."""
    graph = _graph(
        {"a1": "A", "a2": "A", "b1": "B", "b2": "B"},
        [("a1", "a2"), ("b1", "b2")],
    )
    engine = LayoutEngine(graph, width=WIDTH, height=HEIGHT, view_mode="radial")

    engine.run()

    states = engine.states()
    a_x = (states["a1"].x + states["a2"].x) / 2
    b_x = (states["b1"].x + states["b2"].x) / 2
    assert a_x > 480.0 > b_x


def test_invalid_viewport_or_mode_is_rejected() -> None:
    with pytest.raises(ValueError):
        LayoutEngine(Graph(), width=0, height=HEIGHT)
    with pytest.raises(ValueError):
        LayoutEngine(Graph(), width=WIDTH, height=HEIGHT, view_mode="spiral")


def test_animate_steps_once_per_frame(pair_engine: LayoutEngine) -> None:
    """The async driver calls back after every step."""
    seen: list[int] = []

    ticks = asyncio.run(
        pair_engine.animate(
            frame_interval=0, on_tick=lambda engine: seen.append(engine.tick_count), max_ticks=5
        )
    )

    assert ticks == 5
    assert seen == [1, 2, 3, 4, 5]


def test_edges_to_unknown_nodes_are_dropped() -> None:
    """Resolution skips edges whose endpoint is not in the simulation."""
    resolver = EdgeResolver(["a", "b"])

    links = resolver.resolve([_edge("a", "b"), _edge("a", "ghost"), _edge("ghost", "b")])

    assert len(links) == 1
    assert links.source.tolist() == [0]
    assert links.target.tolist() == [1]


def test_engine_tolerates_edges_outside_graph() -> None:
    graph = Graph(nodes=_graph({"a": "A", "b": "B"}).nodes, edges=[_edge("a", "ghost")])

    engine = LayoutEngine(graph, width=WIDTH, height=HEIGHT)

    assert engine.run(max_ticks=10) == 10


def test_node_sizing_helpers() -> None:
    """Hubs repel less and collide wider."""
    assert charge_strength(0) == -100.0
    assert charge_strength(3) == -70.0
    assert charge_strength(8) == -50.0
    assert collision_radius(0) == 15.0
    assert collision_radius(4) == 22.0


def test_link_force_moves_endpoints_toward_preferred_distance() -> None:
    positions = np.array([[0.0, 0.0], [200.0, 0.0]])
    velocities = np.zeros((2, 2))
    links = EdgeResolver(["a", "b"]).resolve([_edge("a", "b")])

    forces.apply_link_force(positions, velocities, links, 1.0, np.random.default_rng(0))

    np.testing.assert_allclose(velocities, [[75.0, 0.0], [-75.0, 0.0]])


def test_charge_force_repels_nearby_nodes() -> None:
    positions = np.array([[0.0, 0.0], [10.0, 0.0]])
    velocities = np.zeros((2, 2))

    forces.apply_charge_force(
        positions, velocities, np.array([-100.0, -100.0]), 1.0, 300.0, np.random.default_rng(0)
    )

    np.testing.assert_allclose(velocities, [[-10.0, 0.0], [10.0, 0.0]])


def test_charge_force_ignores_distant_nodes() -> None:
    positions = np.array([[0.0, 0.0], [400.0, 0.0]])
    velocities = np.zeros((2, 2))

    forces.apply_charge_force(
        positions, velocities, np.array([-100.0, -100.0]), 1.0, 300.0, np.random.default_rng(0)
    )

    np.testing.assert_array_equal(velocities, np.zeros((2, 2)))


def test_collision_force_separates_overlapping_nodes() -> None:
    positions = np.array([[0.0, 0.0], [20.0, 0.0]])
    velocities = np.zeros((2, 2))

    forces.apply_collision_force(
        positions, velocities, np.array([15.0, 15.0]), 0.7, np.random.default_rng(0)
    )

    np.testing.assert_allclose(velocities, [[-3.5, 0.0], [3.5, 0.0]])


def test_center_force_translates_centroid() -> None:
    positions = np.array([[0.0, 0.0], [10.0, 0.0]])

    forces.apply_center_force(positions, np.array([100.0, 100.0]), 1.0)

    np.testing.assert_allclose(positions, [[95.0, 100.0], [105.0, 100.0]])


def test_anchor_targets_are_spread_on_a_ring() -> None:
    targets = forces.compute_anchor_targets(["A", "B", "A"], np.array([100.0, 100.0]), 150.0)

    np.testing.assert_allclose(targets, [[250.0, 100.0], [-50.0, 100.0], [250.0, 100.0]], atol=1e-9)


def test_coincident_nodes_are_separated() -> None:
    """Jitter breaks ties between nodes at the same spot."""
    positions = np.array([[5.0, 5.0], [5.0, 5.0]])
    velocities = np.zeros((2, 2))

    forces.apply_charge_force(
        positions, velocities, np.array([-100.0, -100.0]), 1.0, 300.0, np.random.default_rng(0)
    )

    assert np.isfinite(velocities).all()
    assert velocities.any()
