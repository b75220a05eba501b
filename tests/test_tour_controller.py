"""Tests for the tour state machine."""

from __future__ import annotations

import pytest

from conceptour.graph import ConceptNode, GraphData, NodeType
from conceptour.tour import TourController, TourIndexError


class Recorder:
    """Collects controller callbacks."""

    def __init__(self, controller: TourController):
        self.focused = []
        self.closed = 0
        self.resets = 0
        self.paths = []
        self.states = 0
        controller.on_focus_node = self.focused.append
        controller.on_close_detail = self._close
        controller.on_reset_view = self._reset
        controller.on_path_changed = self.paths.append
        controller.on_state_changed = self._state

    def _close(self):
        self.closed += 1

    def _reset(self):
        self.resets += 1

    def _state(self):
        self.states += 1


@pytest.fixture
def chain_graph(graph_factory) -> GraphData:
    """Five nodes whose tour order is r, c, x, y, z."""
    return graph_factory(
        [("r", "ROOT", "R"), ("c", "CATEGORY", "C"),
         ("x", "CONCEPT", "X"), ("y", "CONCEPT", "Y"), ("z", "CONCEPT", "Z")],
        [("r", "c"), ("c", "x"), ("c", "y"), ("c", "z")],
    )


class TestStart:
    def test_start_focuses_first_step(self, small_graph):
        controller = TourController(small_graph)
        rec = Recorder(controller)

        assert controller.start() is True
        assert controller.cursor == 0
        assert controller.current_node_id == "r"
        assert rec.focused == ["r"]
        assert rec.paths[-1] == ["r", "c1", "b", "a", "c2", "o"]

    def test_start_on_empty_graph_returns_false(self):
        controller = TourController(GraphData())
        assert controller.start() is False
        assert not controller.is_active

    def test_start_without_graph_returns_false(self):
        assert TourController().start() is False

    def test_start_applies_saved_order(self, small_graph):
        controller = TourController(small_graph)
        controller.start(["o", "r", "gone"])
        assert controller.path == ["o", "r", "c1", "b", "a", "c2"]

    def test_prepare_does_not_activate(self, small_graph):
        controller = TourController(small_graph)
        rec = Recorder(controller)

        controller.prepare()
        assert controller.path == ["r", "c1", "b", "a", "c2", "o"]
        assert not controller.is_active
        assert rec.focused == []

    def test_path_property_is_a_copy(self, small_graph):
        controller = TourController(small_graph)
        controller.prepare()
        controller.path.clear()
        assert len(controller.path) == 6


class TestNavigation:
    def test_next_and_prev(self, small_graph):
        controller = TourController(small_graph)
        rec = Recorder(controller)
        controller.start()

        controller.next()
        controller.next()
        controller.prev()
        assert controller.cursor == 1
        assert rec.focused == ["r", "c1", "b", "c1"]

    def test_prev_at_start_is_noop(self, small_graph):
        controller = TourController(small_graph)
        rec = Recorder(controller)
        controller.start()

        controller.prev()
        assert controller.cursor == 0
        assert rec.focused == ["r"]

    def test_next_past_end_stops(self, small_graph):
        controller = TourController(small_graph)
        rec = Recorder(controller)
        controller.start()
        controller.jump(5)

        controller.next()
        assert not controller.is_active
        assert rec.closed == 1
        assert rec.resets == 1

    def test_navigation_when_inactive_is_noop(self, small_graph):
        controller = TourController(small_graph)
        controller.next()
        controller.prev()
        assert controller.cursor is None

    def test_jump_out_of_range_raises(self, small_graph):
        controller = TourController(small_graph)
        controller.start()
        with pytest.raises(TourIndexError):
            controller.jump(6)
        with pytest.raises(IndexError):
            controller.jump(-1)
        assert controller.cursor == 0

    def test_stop_closes_detail_and_resets_view(self, small_graph):
        controller = TourController(small_graph)
        rec = Recorder(controller)
        controller.start()

        controller.stop()
        assert controller.cursor is None
        assert controller.current_node_id is None
        assert (rec.closed, rec.resets) == (1, 1)

    def test_set_graph_ends_tour(self, small_graph, tour_graph):
        controller = TourController(small_graph)
        controller.start()

        controller.set_graph(tour_graph)
        assert not controller.is_active
        assert controller.path == []
        assert controller.computed_path()[:2] == ["r", "c1"]


class TestNodeClick:
    def test_click_on_path_node_jumps(self, small_graph):
        controller = TourController(small_graph)
        controller.start()

        controller.handle_node_click("c2")
        assert controller.current_node_id == "c2"

    def test_click_outside_path_stops(self, small_graph):
        controller = TourController(small_graph)
        controller.start()

        controller.handle_node_click("elsewhere")
        assert not controller.is_active

    def test_click_while_inactive_is_ignored(self, small_graph):
        controller = TourController(small_graph)
        controller.handle_node_click("c2")
        assert not controller.is_active


class TestNodeDeleted:
    def test_deleting_current_last_step_moves_cursor_back(self, chain_graph):
        controller = TourController(chain_graph)
        rec = Recorder(controller)
        controller.start()
        controller.jump(4)

        assert controller.handle_node_deleted("z") is True
        assert controller.path == ["r", "c", "x", "y"]
        assert controller.cursor == 3
        assert rec.focused[-1] == "y"

    def test_deleting_before_cursor_keeps_current_node(self, chain_graph):
        controller = TourController(chain_graph)
        rec = Recorder(controller)
        controller.start()
        controller.jump(3)
        focus_count = len(rec.focused)

        controller.handle_node_deleted("x")
        assert controller.cursor == 2
        assert controller.current_node_id == "y"
        assert len(rec.focused) == focus_count

    def test_deleting_after_cursor_keeps_cursor(self, chain_graph):
        controller = TourController(chain_graph)
        controller.start()
        controller.jump(1)

        controller.handle_node_deleted("z")
        assert controller.cursor == 1

    def test_deleting_current_mid_path_focuses_successor(self, chain_graph):
        controller = TourController(chain_graph)
        rec = Recorder(controller)
        controller.start()
        controller.jump(2)

        controller.handle_node_deleted("x")
        assert controller.cursor == 2
        assert rec.focused[-1] == "y"

    def test_deleting_last_remaining_node_stops(self, graph_factory):
        controller = TourController(graph_factory([("a", "CONCEPT", "A")], []))
        rec = Recorder(controller)
        controller.start()

        controller.handle_node_deleted("a")
        assert controller.path == []
        assert not controller.is_active
        assert rec.closed == 1

    def test_deleting_while_inactive_updates_prepared_path(self, chain_graph):
        controller = TourController(chain_graph)
        controller.prepare()

        controller.handle_node_deleted("y")
        assert controller.path == ["r", "c", "x", "z"]
        assert controller.cursor is None

    def test_unknown_node_is_ignored(self, chain_graph):
        controller = TourController(chain_graph)
        controller.start()
        assert controller.handle_node_deleted("nope") is False


class TestReplacePath:
    def test_cursor_follows_current_node(self, small_graph):
        controller = TourController(small_graph)
        controller.start()
        controller.jump(3)

        controller.replace_path(["r", "a", "c1", "b", "c2", "o"])
        assert controller.cursor == 1
        assert controller.current_node_id == "a"

    def test_non_permutation_rejected(self, small_graph):
        controller = TourController(small_graph)
        controller.start()

        with pytest.raises(ValueError):
            controller.replace_path(["r", "c1", "b", "a", "c2"])
        with pytest.raises(ValueError):
            controller.replace_path(["r", "c1", "b", "a", "c2", "o", "o"])
        assert controller.path == ["r", "c1", "b", "a", "c2", "o"]

    def test_recomputes_after_graph_change(self, small_graph):
        controller = TourController(small_graph)
        controller.prepare()

        small_graph.add_node(ConceptNode("n", NodeType.CONCEPT, "Aardvark"))
        controller.prepare()
        assert controller.path[-1] == "n"
