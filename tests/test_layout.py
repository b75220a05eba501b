"""Tests for radial node placement."""

from __future__ import annotations

import math

import pytest

from conceptour.graph import GraphData
from conceptour.layout import CATEGORY_RADIUS, OUTER_RADIUS, compute_placements
from conceptour.sample import sample_graph


def _radius(placement) -> float:
    return math.hypot(placement.x, placement.y)


class TestComputePlacements:
    def test_empty_graph(self):
        assert compute_placements(GraphData()) == {}

    def test_every_node_is_placed(self):
        graph = sample_graph()
        placements = compute_placements(graph)
        assert set(placements) == set(graph.node_ids())

    def test_root_pinned_at_origin(self, small_graph):
        root = compute_placements(small_graph)["r"]
        assert (root.x, root.y, root.pinned) == (0.0, 0.0, True)

    def test_categories_on_inner_ring(self, small_graph):
        placements = compute_placements(small_graph)
        for category_id in ("c1", "c2"):
            assert _radius(placements[category_id]) == pytest.approx(CATEGORY_RADIUS)
        assert placements["c1"].y == pytest.approx(-CATEGORY_RADIUS)

    def test_orphans_on_outer_ring(self, small_graph):
        assert _radius(compute_placements(small_graph)["o"]) == pytest.approx(OUTER_RADIUS)

    def test_members_sit_near_their_category(self, small_graph):
        placements = compute_placements(small_graph)
        c1 = placements["c1"]
        for member in ("a", "b"):
            p = placements[member]
            assert math.hypot(p.x - c1.x, p.y - c1.y) == pytest.approx(140.0)
