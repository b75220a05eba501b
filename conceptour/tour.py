"""Guided tour: path construction and the tour state machine.

The tour path groups every content node under the category it is closest
to (multi-source BFS over the undirected link graph), orders each group,
and appends whatever could not be reached. ``TourController`` owns the
resulting path and a cursor into it.
"""

import logging
import unicodedata
from collections import Counter, deque
from typing import Optional, List, Dict, Tuple, Callable, Iterable

from conceptour.graph import GraphData, ConceptNode, NodeType

logger = logging.getLogger(__name__)


class TourIndexError(IndexError):
    """Raised when a tour position outside the path is requested."""


def label_sort_key(label: str) -> Tuple[str, str, str]:
    """Case- and accent-insensitive sort key that stays deterministic."""
    decomposed = unicodedata.normalize("NFKD", label)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), label.casefold(), label)


def assign_anchors(graph: GraphData,
                   adjacency: Optional[Dict[str, List[str]]] = None) -> Dict[str, Tuple[str, int]]:
    """Assign each reachable content node to its nearest category.

    Returns ``{node_id: (category_id, distance)}``. Categories are seeded in
    node-list order, so at equal distance the earlier category wins.
    Content nodes missing from the result are orphans.
    """
    if adjacency is None:
        adjacency = graph.adjacency()

    visited = {n.id for n in graph.nodes if n.type == NodeType.ROOT}
    queue: deque = deque()
    for category in graph.categories():
        visited.add(category.id)
        queue.append((category.id, category.id, 0))

    assignments: Dict[str, Tuple[str, int]] = {}
    while queue:
        node_id, anchor_id, distance = queue.popleft()
        node = graph.get_node(node_id)
        if node is not None and node.is_content and node_id not in assignments:
            assignments[node_id] = (anchor_id, distance)

        for neighbor in adjacency.get(node_id, ()):
            if neighbor not in visited:
                visited.add(neighbor)
                queue.append((neighbor, anchor_id, distance + 1))

    return assignments


def build_tour_path(graph: GraphData,
                    adjacency: Optional[Dict[str, List[str]]] = None) -> List[str]:
    """Build the ordered id sequence for a guided tour of ``graph``."""
    if not graph.nodes:
        return []

    assignments = assign_anchors(graph, adjacency)
    categories = graph.categories()

    groups: Dict[str, List[ConceptNode]] = {c.id: [] for c in categories}
    for node in graph.nodes:
        if node.id in assignments:
            groups[assignments[node.id][0]].append(node)

    def member_key(node: ConceptNode):
        distance = assignments[node.id][1]
        return (distance, 0 if node.type == NodeType.WORK else 1, label_sort_key(node.label))

    path: List[str] = []
    root = graph.root()
    if root is not None:
        path.append(root.id)

    for category in categories:
        path.append(category.id)
        path.extend(n.id for n in sorted(groups[category.id], key=member_key))

    orphans = [n.id for n in graph.nodes if n.is_content and n.id not in assignments]
    path.extend(orphans)

    # Only the first root leads the tour; stray extra roots go last.
    path.extend(
        n.id for n in graph.nodes
        if n.type == NodeType.ROOT and root is not None and n.id != root.id
    )

    logger.debug(
        "Built tour path: %d step(s), %d categories, %d orphan(s)",
        len(path), len(categories), len(orphans),
    )
    return path


def reconcile_order(saved: Iterable[str], computed: List[str]) -> List[str]:
    """Apply a saved order to a freshly computed path.

    Ids from ``saved`` that still exist keep their saved order; ids the saved
    order does not know about follow in computed order.
    """
    known = set(computed)
    result: List[str] = []
    seen = set()
    for node_id in saved:
        if node_id in known and node_id not in seen:
            result.append(node_id)
            seen.add(node_id)
    result.extend(node_id for node_id in computed if node_id not in seen)
    return result


class TourPathBuilder:
    """Builds tour paths, reusing the last result while the caller's key is unchanged."""

    def __init__(self):
        self._key: Optional[str] = None
        self._path: Optional[List[str]] = None

    def build(self, graph: GraphData, key: Optional[str] = None) -> List[str]:
        if key is not None and key == self._key and self._path is not None:
            return list(self._path)

        path = build_tour_path(graph)
        if key is not None:
            self._key = key
            self._path = list(path)
        return path

    def invalidate(self):
        self._key = None
        self._path = None


class TourController:
    """Holds the tour path and the cursor, and drives navigation."""

    def __init__(self, graph: Optional[GraphData] = None,
                 builder: Optional[TourPathBuilder] = None):
        self.graph = graph
        self.builder = builder or TourPathBuilder()
        self._path: List[str] = []
        self._cursor: Optional[int] = None

        # Callbacks
        self.on_focus_node: Optional[Callable[[str], None]] = None
        self.on_close_detail: Optional[Callable[[], None]] = None
        self.on_reset_view: Optional[Callable[[], None]] = None
        self.on_path_changed: Optional[Callable[[List[str]], None]] = None
        self.on_state_changed: Optional[Callable[[], None]] = None

    @property
    def path(self) -> List[str]:
        return list(self._path)

    @property
    def cursor(self) -> Optional[int]:
        return self._cursor

    @property
    def is_active(self) -> bool:
        return self._cursor is not None

    @property
    def current_node_id(self) -> Optional[str]:
        if self._cursor is None:
            return None
        return self._path[self._cursor]

    def set_graph(self, graph: Optional[GraphData]):
        """Switch to another graph; any running tour ends."""
        if self.is_active:
            self.stop()
        self.graph = graph
        self._path = []
        self.builder.invalidate()
        self._notify_path_changed()

    def computed_path(self, saved_order: Optional[List[str]] = None) -> List[str]:
        """Path for the current graph, with a saved order applied on top."""
        if self.graph is None:
            return []
        path = self.builder.build(self.graph, key=self.graph.content_hash())
        if saved_order:
            path = reconcile_order(saved_order, path)
        return path

    def prepare(self, saved_order: Optional[List[str]] = None):
        """Compute the path for display without starting the tour."""
        if self.is_active:
            return
        self._path = self.computed_path(saved_order)
        self._notify_path_changed()

    # ==================== Navigation ====================

    def start(self, saved_order: Optional[List[str]] = None) -> bool:
        """Compute the path and focus its first step. Returns False if there is nothing to tour."""
        if self.graph is None or not self.graph.nodes:
            logger.info("Tour not started: graph is empty")
            return False

        path = self.computed_path(saved_order)
        self._path = path
        self._cursor = 0
        logger.info("Tour started with %d step(s)", len(path))
        self._notify_path_changed()
        self._focus_current()
        return True

    def next(self):
        if self._cursor is None:
            return
        if self._cursor < len(self._path) - 1:
            self._cursor += 1
            self._focus_current()
        else:
            self.stop()

    def prev(self):
        if self._cursor is None or self._cursor == 0:
            return
        self._cursor -= 1
        self._focus_current()

    def jump(self, index: int):
        if not 0 <= index < len(self._path):
            raise TourIndexError(f"Tour index {index} outside path of length {len(self._path)}")
        self._cursor = index
        self._focus_current()

    def stop(self):
        was_active = self.is_active
        self._cursor = None
        if was_active:
            logger.info("Tour stopped")
        if self.on_close_detail:
            self.on_close_detail()
        if self.on_reset_view:
            self.on_reset_view()
        self._notify_state_changed()

    # ==================== External events ====================

    def handle_node_click(self, node_id: str):
        """Keep the cursor in sync when a node is picked outside the tour controls."""
        if not self.is_active:
            return
        if node_id in self._path:
            self.jump(self._path.index(node_id))
        else:
            self.stop()

    def handle_node_deleted(self, node_id: str) -> bool:
        """Repair the path after a node was removed from the graph."""
        if node_id not in self._path:
            return False

        index = self._path.index(node_id)
        was_current = self._cursor == index
        del self._path[index]

        if self._cursor is not None:
            if not self._path:
                self.stop()
            elif index < self._cursor:
                self._cursor -= 1
            elif self._cursor > len(self._path) - 1:
                self._cursor = len(self._path) - 1

        self._notify_path_changed()
        if was_current and self.is_active:
            self._focus_current()
        return True

    def replace_path(self, new_path: List[str]):
        """Swap in a reordered path; the cursor follows the node it pointed at."""
        if Counter(new_path) != Counter(self._path):
            logger.warning("Rejected path write that is not a reordering of the current path")
            raise ValueError("New tour path must contain exactly the ids of the current path")

        current_id = self.current_node_id
        self._path = list(new_path)
        if current_id is not None:
            self._cursor = self._path.index(current_id)

        self._notify_path_changed()
        self._notify_state_changed()

    # ==================== Notifications ====================

    def _focus_current(self):
        node_id = self.current_node_id
        if node_id is not None and self.on_focus_node:
            self.on_focus_node(node_id)
        self._notify_state_changed()

    def _notify_path_changed(self):
        if self.on_path_changed:
            self.on_path_changed(self.path)

    def _notify_state_changed(self):
        if self.on_state_changed:
            self.on_state_changed()
