"""Outline view logic: block-aware drag-and-drop over the tour path.

A CATEGORY or ROOT row heads a block made of itself and the non-structural
rows that follow it. Dragging a block head moves the whole block; any other
row moves alone. Everything here is toolkit independent; ``widgets`` feeds
it pointer coordinates.
"""

import logging
from typing import Optional, List, NamedTuple
from dataclasses import dataclass

from conceptour.config import TourSettings
from conceptour.graph import GraphData, NodeType
from conceptour.tour import TourController, reconcile_order
from conceptour.undo import UndoManager

logger = logging.getLogger(__name__)


def indent_level(node_type: Optional[NodeType]) -> int:
    if node_type == NodeType.ROOT:
        return 0
    if node_type == NodeType.CATEGORY:
        return 1
    return 2


def indent_for(node_type: Optional[NodeType], settings: Optional[TourSettings] = None) -> int:
    """Left padding in px for an outline row of the given type."""
    settings = settings or TourSettings()
    return settings.indent_for_level(indent_level(node_type))


def display_label(label: str) -> str:
    # Producers mark emphasis with underscores; the outline shows plain text.
    return label.replace("_", "").strip()


def _is_block_head(graph: Optional[GraphData], node_id: str) -> bool:
    node = graph.get_node(node_id) if graph is not None else None
    return node is not None and node.is_structural


def block_size(path: List[str], index: int, graph: Optional[GraphData]) -> int:
    """Number of rows that move together when the row at ``index`` is dragged."""
    if not _is_block_head(graph, path[index]):
        return 1

    size = 1
    for node_id in path[index + 1:]:
        if _is_block_head(graph, node_id):
            break
        size += 1
    return size


def move_block(path: List[str], start: int, size: int, target: int) -> List[str]:
    """Move ``path[start:start+size]`` so it lands before the row at ``target``."""
    order = list(path)
    block = order[start:start + size]
    del order[start:start + size]

    insertion = target - size if start < target else target
    order[insertion:insertion] = block
    return order


@dataclass
class DragState:
    """The block being dragged."""
    start: int
    size: int

    def contains(self, index: int) -> bool:
        return self.start <= index < self.start + self.size


class OutlineRow(NamedTuple):
    node_id: str
    path_index: int
    label: str
    node_type: Optional[NodeType]
    level: int
    is_active: bool


def outline_rows(path: List[str], graph: Optional[GraphData],
                 active_id: Optional[str] = None) -> List[OutlineRow]:
    """Rows to render for ``path``; ids unknown to the graph are skipped.

    Each row keeps its position in ``path``, which is what the controller
    and the reorderer index by.
    """
    rows = []
    for path_index, node_id in enumerate(path):
        node = graph.get_node(node_id) if graph is not None else None
        if node is None:
            continue
        rows.append(OutlineRow(
            node_id=node_id,
            path_index=path_index,
            label=display_label(node.label),
            node_type=node.type,
            level=indent_level(node.type),
            is_active=node_id == active_id,
        ))
    return rows


class OutlineReorderer:
    """Drag-and-drop reordering of the controller's tour path."""

    def __init__(self, controller: TourController, undo_manager: Optional[UndoManager] = None):
        self.controller = controller
        self.undo_manager = undo_manager
        self.drag: Optional[DragState] = None
        self.drop_target: Optional[int] = None

    @property
    def is_dragging(self) -> bool:
        return self.drag is not None

    def is_dragged(self, index: int) -> bool:
        return self.drag is not None and self.drag.contains(index)

    def drag_start(self, index: int) -> bool:
        path = self.controller.path
        if not 0 <= index < len(path):
            return False
        self.drag = DragState(index, block_size(path, index, self.controller.graph))
        self.drop_target = None
        return True

    def drag_over(self, index: int, pointer_y: float, row_top: float,
                  row_height: float) -> Optional[int]:
        """Update the insertion point for the pointer hovering row ``index``."""
        if self.drag is None:
            return None
        if self.drag.contains(index):
            # A block cannot be dropped inside itself.
            self.drop_target = None
            return None

        if pointer_y < row_top + row_height / 2:
            self.drop_target = index
        else:
            self.drop_target = index + 1
        return self.drop_target

    def cancel(self):
        self.drag = None
        self.drop_target = None

    def drop(self) -> bool:
        """Apply the pending move. Returns True if the path changed."""
        drag, target = self.drag, self.drop_target
        self.cancel()
        if drag is None or target is None:
            return False
        if drag.start < target <= drag.start + drag.size:
            return False

        old_order = self.controller.path
        new_order = move_block(old_order, drag.start, drag.size, target)
        if new_order == old_order:
            return False

        self.controller.replace_path(new_order)
        logger.debug("Moved block of %d from %d to %d", drag.size, drag.start, target)

        if self.undo_manager is not None:
            self.undo_manager.push(UndoManager.reorder_action(
                old_order, new_order, self._label(old_order[drag.start]), drag.size,
            ))
        return True

    def reset_order(self) -> bool:
        """Put the path back into computed tour order."""
        old_order = self.controller.path
        new_order = reconcile_order(self.controller.computed_path(), old_order)
        if new_order == old_order:
            return False

        self.controller.replace_path(new_order)
        if self.undo_manager is not None:
            self.undo_manager.push(UndoManager.reset_action(old_order, new_order))
        return True

    def undo(self) -> bool:
        if self.undo_manager is None:
            return False
        action = self.undo_manager.undo()
        if action is None:
            return False
        self._apply_order(action.data["order"])
        return True

    def redo(self) -> bool:
        if self.undo_manager is None:
            return False
        action = self.undo_manager.redo()
        if action is None:
            return False
        self._apply_order(action.redo_data["order"])
        return True

    def _apply_order(self, order: List[str]):
        # Nodes may have been deleted since the action was recorded.
        self.controller.replace_path(reconcile_order(order, self.controller.path))

    def _label(self, node_id: str) -> str:
        graph = self.controller.graph
        node = graph.get_node(node_id) if graph is not None else None
        return display_label(node.label) if node else node_id


class AutoScroller:
    """Scroll nudges while a drag hovers near the top or bottom of the list."""

    def __init__(self, threshold: int = 60, max_step: int = 12):
        self.threshold = threshold
        self.max_step = max_step
        self._step = 0

    @classmethod
    def from_settings(cls, settings: TourSettings) -> "AutoScroller":
        return cls(settings.autoscroll_threshold, settings.autoscroll_max_step)

    @property
    def active(self) -> bool:
        return self._step != 0

    def update(self, pointer_y: float, top: float, bottom: float) -> int:
        """Record the pointer position and return the scroll delta for it."""
        if self.threshold <= 0:
            self._step = 0
        elif pointer_y < top + self.threshold:
            self._step = -self._magnitude(top + self.threshold - pointer_y)
        elif pointer_y > bottom - self.threshold:
            self._step = self._magnitude(pointer_y - (bottom - self.threshold))
        else:
            self._step = 0
        return self._step

    def tick(self) -> int:
        """Delta to apply on a timer tick while the pointer stays put."""
        return self._step

    def stop(self):
        self._step = 0

    def _magnitude(self, depth: float) -> int:
        ratio = min(depth / self.threshold, 1.0)
        return max(1, round(ratio * self.max_step))
