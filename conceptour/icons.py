"""Glyphs shown next to nodes in the outline and on the canvas."""

from conceptour.graph import NodeType

# Unicode symbols that render with common sans fonts
TYPE_ICONS = {
    NodeType.ROOT: "★",
    NodeType.CATEGORY: "▣",
    NodeType.CONCEPT: "◆",
    NodeType.WORK: "📖",
}

STATE_ICONS = {
    "active": "▶",
    "grip": "⋮⋮",
}


def get_type_icon(node_type: NodeType) -> str:
    """Get the glyph for a node type."""
    return TYPE_ICONS.get(node_type, "")


def get_state_icon(name: str) -> str:
    return STATE_ICONS.get(name, "")
