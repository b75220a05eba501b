"""Tests for tour path construction."""

from __future__ import annotations

from conceptour.graph import ConceptNode, GraphData, Link, NodeType
from conceptour.sample import sample_graph
from conceptour.tour import (
    TourPathBuilder,
    assign_anchors,
    build_tour_path,
    label_sort_key,
    reconcile_order,
)


class TestBuildTourPath:
    def test_end_to_end_order(self, small_graph):
        """Root, then each category with its members, works first, then orphans."""
        assert build_tour_path(small_graph) == ["r", "c1", "b", "a", "c2", "o"]

    def test_empty_graph(self):
        assert build_tour_path(GraphData()) == []

    def test_deterministic(self):
        assert build_tour_path(sample_graph()) == build_tour_path(sample_graph())

    def test_every_node_exactly_once(self):
        graph = sample_graph()
        path = build_tour_path(graph)
        assert len(path) == len(graph)
        assert set(path) == set(graph.node_ids())

    def test_sample_graph_order(self):
        assert build_tour_path(sample_graph()) == [
            "stoicism",
            "ethics", "meditations", "dichotomy", "virtue", "enchiridion", "apatheia",
            "physics", "ekpyrosis", "logos", "pneuma",
            "logic", "phantasia", "lekta",
            "cynicism",
        ]

    def test_members_sorted_by_distance_first(self, tour_graph):
        assert build_tour_path(tour_graph) == ["r", "c1", "w", "a", "b", "c2", "d", "o"]

    def test_orphans_keep_list_order(self, graph_factory):
        graph = graph_factory(
            [("r", "ROOT", "R"), ("z", "CONCEPT", "Zed"), ("c", "CATEGORY", "C"), ("y", "CONCEPT", "Why")],
            [("r", "c")],
        )
        assert build_tour_path(graph) == ["r", "c", "z", "y"]

    def test_extra_roots_go_last(self, graph_factory):
        graph = graph_factory(
            [("r", "ROOT", "R"), ("r2", "ROOT", "R2"), ("c", "CATEGORY", "C"), ("o", "CONCEPT", "O")],
            [("r", "c")],
        )
        assert build_tour_path(graph) == ["r", "c", "o", "r2"]

    def test_no_root(self, graph_factory):
        graph = graph_factory([("c", "CATEGORY", "C"), ("a", "CONCEPT", "A")], [("c", "a")])
        assert build_tour_path(graph) == ["c", "a"]

    def test_paths_through_root_do_not_leak_between_categories(self, graph_factory):
        """The root is never traversed, so a node only reachable through it stays an orphan."""
        graph = graph_factory(
            [("r", "ROOT", "R"), ("c", "CATEGORY", "C"), ("x", "CONCEPT", "X")],
            [("r", "c"), ("r", "x")],
        )
        assert build_tour_path(graph) == ["r", "c", "x"]
        assert "x" not in assign_anchors(graph)


class TestAssignAnchors:
    def test_nearest_category_wins(self, graph_factory):
        graph = graph_factory(
            [("c1", "CATEGORY", "One"), ("c2", "CATEGORY", "Two"),
             ("m", "CONCEPT", "Middle"), ("x", "CONCEPT", "X")],
            [("c1", "m"), ("m", "x"), ("c2", "x")],
        )
        anchors = assign_anchors(graph)
        assert anchors["x"] == ("c2", 1)
        assert anchors["m"] == ("c1", 1)

    def test_closer_category_wins_over_longer_route(self, graph_factory):
        graph = graph_factory(
            [("c1", "CATEGORY", "One"), ("c2", "CATEGORY", "Two"), ("n", "CONCEPT", "N"),
             ("m1", "CONCEPT", "M1"), ("k1", "CONCEPT", "K1"), ("k2", "CONCEPT", "K2")],
            [("c1", "m1"), ("m1", "n"), ("c2", "k1"), ("k1", "k2"), ("k2", "n")],
        )
        assert assign_anchors(graph)["n"] == ("c1", 2)

    def test_equal_distance_goes_to_first_seeded_category(self, graph_factory):
        graph = graph_factory(
            [("c1", "CATEGORY", "One"), ("c2", "CATEGORY", "Two"), ("x", "CONCEPT", "X")],
            [("c2", "x"), ("c1", "x")],
        )
        assert assign_anchors(graph)["x"] == ("c1", 1)

    def test_categories_are_never_assigned(self, small_graph):
        anchors = assign_anchors(small_graph)
        assert set(anchors) == {"a", "b"}


class TestLabelSortKey:
    def test_accent_and_case_insensitive(self):
        assert sorted(["beta", "Alpha", "Ábaco"], key=label_sort_key) == ["Ábaco", "Alpha", "beta"]

    def test_ties_are_still_deterministic(self):
        assert sorted(["b", "B"], key=label_sort_key) == sorted(["B", "b"], key=label_sort_key)


class TestReconcileOrder:
    def test_saved_order_wins_and_new_ids_follow(self):
        assert reconcile_order(["b", "x", "a"], ["a", "b", "c"]) == ["b", "a", "c"]

    def test_duplicates_in_saved_order_are_ignored(self):
        assert reconcile_order(["a", "a", "b"], ["a", "b"]) == ["a", "b"]


class TestTourPathBuilder:
    def test_reuses_result_for_same_key(self, small_graph):
        builder = TourPathBuilder()
        first = builder.build(small_graph, key="k")

        small_graph.add_node(ConceptNode("n", NodeType.CONCEPT, "New"))
        assert builder.build(small_graph, key="k") == first

    def test_new_key_rebuilds(self, small_graph):
        builder = TourPathBuilder()
        builder.build(small_graph, key=small_graph.content_hash())

        small_graph.add_node(ConceptNode("n", NodeType.CONCEPT, "New"))
        small_graph.add_link(Link("c2", "n"))
        path = builder.build(small_graph, key=small_graph.content_hash())
        assert path == ["r", "c1", "b", "a", "c2", "n", "o"]

    def test_invalidate(self, small_graph):
        builder = TourPathBuilder()
        builder.build(small_graph, key="k")
        builder.invalidate()

        small_graph.remove_node("o")
        assert builder.build(small_graph, key="k") == ["r", "c1", "b", "a", "c2"]

    def test_returned_path_is_a_copy(self, small_graph):
        builder = TourPathBuilder()
        builder.build(small_graph, key="k").append("junk")
        assert "junk" not in builder.build(small_graph, key="k")
