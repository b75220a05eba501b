"""Shared graph fixtures."""

from __future__ import annotations

import pytest

from conceptour.graph import ConceptNode, GraphData, Link, NodeType


def _graph(nodes, links) -> GraphData:
    return GraphData(
        nodes=[ConceptNode(id=i, type=NodeType.parse(t), label=label) for i, t, label in nodes],
        links=[Link(s, t) for s, t in links],
    )


@pytest.fixture
def graph_factory():
    """Build a GraphData from ``(id, type, label)`` triples and ``(source, target)`` pairs."""
    return _graph


@pytest.fixture
def small_graph() -> GraphData:
    """Root, two categories, a concept and a work under the first, one orphan.

    Tour order: r, c1, b, a, c2, o
    """
    return _graph(
        [
            ("r", "ROOT", "Root"),
            ("c1", "CATEGORY", "First"),
            ("c2", "CATEGORY", "Second"),
            ("a", "CONCEPT", "Alfa"),
            ("b", "WORK", "Béta"),
            ("o", "CONCEPT", "Orphan"),
        ],
        [("r", "c1"), ("r", "c2"), ("c1", "a"), ("c1", "b")],
    )


@pytest.fixture
def tour_graph() -> GraphData:
    """A graph whose first category heads a block of four rows.

    Tour order: r, c1, w, a, b, c2, d, o
    """
    return _graph(
        [
            ("r", "ROOT", "Root"),
            ("c1", "CATEGORY", "Concept one"),
            ("c2", "CATEGORY", "Concept two"),
            ("a", "CONCEPT", "Apple"),
            ("b", "CONCEPT", "Banana"),
            ("w", "WORK", "Zeta Work"),
            ("d", "CONCEPT", "Delta"),
            ("o", "CONCEPT", "Orphan"),
        ],
        [("r", "c1"), ("r", "c2"), ("c1", "a"), ("c1", "w"), ("a", "b"), ("c2", "d")],
    )
