"""Static radial placement of graph nodes for the canvas."""

import math
from typing import Dict

from conceptour.graph import GraphData, Placement
from conceptour.tour import assign_anchors

CATEGORY_RADIUS = 260.0
CHILD_RADIUS = 140.0
CHILD_RADIUS_INCREMENT = 60.0
OUTER_RADIUS = 620.0


def compute_placements(graph: GraphData) -> Dict[str, Placement]:
    """Place the root at the origin, categories on a ring, members fanned around them.

    Nodes not attached to any category end up on an outer ring.
    """
    placements: Dict[str, Placement] = {}
    if not graph.nodes:
        return placements

    assignments = assign_anchors(graph)

    root = graph.root()
    if root is not None:
        placements[root.id] = Placement(root.id, 0.0, 0.0, pinned=True)

    categories = graph.categories()
    span = 2 * math.pi / max(len(categories), 1)

    for i, category in enumerate(categories):
        angle = -math.pi / 2 + span * i
        cx = CATEGORY_RADIUS * math.cos(angle)
        cy = CATEGORY_RADIUS * math.sin(angle)
        placements[category.id] = Placement(category.id, cx, cy)

        members = [n for n in graph.nodes if n.id in assignments and assignments[n.id][0] == category.id]
        for j, member in enumerate(members):
            member_angle = angle - span / 2 + span * (j + 0.5) / len(members)
            distance = assignments[member.id][1]
            radius = CHILD_RADIUS + CHILD_RADIUS_INCREMENT * (distance - 1)
            placements[member.id] = Placement(
                member.id,
                cx + radius * math.cos(member_angle),
                cy + radius * math.sin(member_angle),
            )

    leftovers = [n for n in graph.nodes if n.id not in placements]
    for k, node in enumerate(leftovers):
        angle = -math.pi / 2 + 2 * math.pi * k / len(leftovers)
        placements[node.id] = Placement(
            node.id,
            OUTER_RADIUS * math.cos(angle),
            OUTER_RADIUS * math.sin(angle),
        )

    return placements
