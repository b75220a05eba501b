"""Graph model for conceptour: typed nodes, links and adjacency."""

import hashlib
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class GraphError(ValueError):
    """Raised when a graph snapshot is malformed."""


class NodeType(Enum):
    """Kinds of nodes in a concept graph."""
    ROOT = "ROOT"
    CATEGORY = "CATEGORY"
    CONCEPT = "CONCEPT"
    WORK = "WORK"

    @classmethod
    def parse(cls, value: Any) -> "NodeType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise GraphError(f"Unknown node type: {value!r}") from None


STRUCTURAL_TYPES = (NodeType.ROOT, NodeType.CATEGORY)


@dataclass
class ConceptNode:
    """A concept, person, work or structural element of the graph."""
    id: str
    type: NodeType
    label: str = ""
    connections: List[str] = field(default_factory=list)
    short_summary: str = ""
    long_explanation: str = ""
    concept_context: Optional[str] = None

    @property
    def is_structural(self) -> bool:
        return self.type in STRUCTURAL_TYPES

    @property
    def is_content(self) -> bool:
        return self.type not in STRUCTURAL_TYPES


@dataclass
class Link:
    """A directed, labelled edge between two node ids."""
    source: str
    target: str
    relation_label: str = ""


@dataclass
class Placement:
    """Transient on-screen position of a node, kept apart from the node itself."""
    node_id: str
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    pinned: bool = False


def normalize_endpoint(value: Any) -> str:
    """Reduce a link endpoint to a plain node id.

    Producers hand over either the id itself (string or number), a node
    object, or a mapping with an ``id`` key.
    """
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, dict):
        if "id" in value:
            return str(value["id"])
    elif hasattr(value, "id"):
        return str(value.id)
    raise GraphError(f"Cannot resolve link endpoint {value!r} to a node id")


def build_adjacency(node_ids: Iterable[str], links: Iterable[Link]) -> Dict[str, List[str]]:
    """Build an undirected adjacency list from directed links.

    Links whose source or target is not a known node are dropped.
    """
    adjacency: Dict[str, List[str]] = {node_id: [] for node_id in node_ids}
    dropped = 0
    for link in links:
        if link.source not in adjacency or link.target not in adjacency:
            dropped += 1
            continue
        adjacency[link.source].append(link.target)
        adjacency[link.target].append(link.source)
    if dropped:
        logger.debug("Dropped %d link(s) with unknown endpoints", dropped)
    return adjacency


class GraphData:
    """An ordered set of nodes plus the links between them."""

    def __init__(self, nodes: Optional[List[ConceptNode]] = None,
                 links: Optional[List[Link]] = None,
                 custom_order: Optional[List[str]] = None,
                 metadata: Optional[Dict[str, str]] = None):
        self.nodes: List[ConceptNode] = []
        self.links: List[Link] = list(links or [])
        self.custom_order: Optional[List[str]] = list(custom_order) if custom_order else None
        self.metadata: Dict[str, str] = dict(metadata or {})
        self.revision = 0
        self._by_id: Dict[str, ConceptNode] = {}

        for node in nodes or []:
            self._insert(node)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._by_id

    def _insert(self, node: ConceptNode):
        if node.id in self._by_id:
            raise GraphError(f"Duplicate node id: {node.id}")
        self.nodes.append(node)
        self._by_id[node.id] = node

    # ==================== Queries ====================

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def get_node(self, node_id: str) -> Optional[ConceptNode]:
        return self._by_id.get(node_id)

    def root(self) -> Optional[ConceptNode]:
        """First ROOT node in list order, if any."""
        for node in self.nodes:
            if node.type == NodeType.ROOT:
                return node
        return None

    def categories(self) -> List[ConceptNode]:
        return [n for n in self.nodes if n.type == NodeType.CATEGORY]

    def adjacency(self) -> Dict[str, List[str]]:
        return build_adjacency(self.node_ids(), self.links)

    def content_hash(self) -> str:
        """Hash of the structure the tour depends on, usable as a cache key."""
        digest = hashlib.sha256()
        for node in self.nodes:
            digest.update(f"N\x1f{node.id}\x1f{node.type.value}\x1f{node.label}\x1e".encode("utf-8"))
        for link in self.links:
            digest.update(f"L\x1f{link.source}\x1f{link.target}\x1e".encode("utf-8"))
        return digest.hexdigest()

    # ==================== Mutations ====================

    def add_node(self, node: ConceptNode):
        self._insert(node)
        self.revision += 1

    def add_link(self, link: Link):
        self.links.append(link)
        self.revision += 1

    def remove_node(self, node_id: str) -> Optional[ConceptNode]:
        """Remove a node together with its links and any references to it."""
        node = self._by_id.pop(node_id, None)
        if node is None:
            return None

        self.nodes.remove(node)
        self.links = [l for l in self.links if l.source != node_id and l.target != node_id]
        for other in self.nodes:
            if node_id in other.connections:
                other.connections = [c for c in other.connections if c != node_id]
        if self.custom_order:
            self.custom_order = [i for i in self.custom_order if i != node_id]

        self.revision += 1
        return node

    # ==================== Snapshots ====================

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphData":
        """Build a graph from the plain mapping shape produced upstream."""
        nodes = []
        for raw in data.get("nodes", []):
            if "id" not in raw:
                raise GraphError(f"Node without id: {raw!r}")
            nodes.append(ConceptNode(
                id=str(raw["id"]),
                type=NodeType.parse(raw.get("type")),
                label=raw.get("label") or "",
                connections=[normalize_endpoint(c) for c in raw.get("connections") or []],
                short_summary=raw.get("shortSummary") or "",
                long_explanation=raw.get("longExplanation") or "",
                concept_context=raw.get("conceptContext"),
            ))

        links = []
        for raw in data.get("links", []):
            links.append(Link(
                source=normalize_endpoint(raw.get("source")),
                target=normalize_endpoint(raw.get("target")),
                relation_label=raw.get("relationLabel") or "",
            ))

        return cls(
            nodes=nodes,
            links=links,
            custom_order=data.get("customOrder"),
            metadata=data.get("metadata"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "nodes": [
                {
                    "id": n.id,
                    "label": n.label,
                    "type": n.type.value,
                    "shortSummary": n.short_summary,
                    "longExplanation": n.long_explanation,
                    "connections": list(n.connections),
                    **({"conceptContext": n.concept_context} if n.concept_context else {}),
                }
                for n in self.nodes
            ],
            "links": [
                {"source": l.source, "target": l.target, "relationLabel": l.relation_label}
                for l in self.links
            ],
        }
        if self.custom_order:
            data["customOrder"] = list(self.custom_order)
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


def load_snapshot(path: Path) -> GraphData:
    """Read a graph snapshot handed over by a producer as JSON."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise GraphError(f"Invalid graph snapshot {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise GraphError(f"Graph snapshot {path} is not an object")
    return GraphData.from_dict(data)
