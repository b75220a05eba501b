"""Canvas widget for rendering the concept graph."""

import math
from typing import Optional, List, Dict, Tuple, Callable
from dataclasses import dataclass
import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gdk

import cairo

from conceptour.graph import GraphData, ConceptNode, NodeType, Placement
from conceptour.icons import get_type_icon
from conceptour.layout import compute_placements
from conceptour.outline import display_label


@dataclass
class RenderedNode:
    """A node with its on-screen box, derived from its placement."""
    node: ConceptNode
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def contains_point(self, px: float, py: float) -> bool:
        """Check if a point is inside this node."""
        return (self.x <= px <= self.x + self.width and
                self.y <= py <= self.y + self.height)


class GraphCanvas(Gtk.DrawingArea):
    """Custom canvas widget for rendering concept graphs."""

    COLORS = {
        'bg_primary': (0.965, 0.957, 0.937),      # paper
        'surface': (1.0, 1.0, 1.0),
        'surface_hover': (0.953, 0.945, 0.925),
        'border_subtle': (0.839, 0.827, 0.800),
        'text_primary': (0.129, 0.122, 0.114),    # ink
        'text_muted': (0.560, 0.545, 0.520),
        'accent_primary': (0.702, 0.329, 0.204),
        'link': (0.690, 0.675, 0.650),
        'root_node': (0.129, 0.122, 0.114),
        'root_text': (0.965, 0.957, 0.937),
    }

    # Layout constants
    NODE_PADDING = 14
    NODE_MIN_WIDTH = 96
    NODE_MAX_WIDTH = 260
    NODE_HEIGHT = 34
    ROOT_NODE_HEIGHT = 48

    def __init__(self):
        super().__init__()

        self.graph: Optional[GraphData] = None
        self.placements: Dict[str, Placement] = {}
        self.rendered_nodes: List[RenderedNode] = []
        self._rendered_by_id: Dict[str, RenderedNode] = {}

        # View state
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.pan_start_x = 0.0
        self.pan_start_y = 0.0
        self.last_mouse_x = 0.0
        self.last_mouse_y = 0.0

        self.focused_id: Optional[str] = None
        self.hovered_node: Optional[RenderedNode] = None

        # Callbacks
        self.on_node_clicked: Optional[Callable[[str], None]] = None
        self.on_node_delete_requested: Optional[Callable[[str], None]] = None

        self.set_draw_func(self._on_draw)
        self.set_focusable(True)
        self.set_can_focus(True)
        self._setup_event_controllers()
        self.set_hexpand(True)
        self.set_vexpand(True)

    def _setup_event_controllers(self):
        """Setup mouse and keyboard event controllers."""
        click_ctrl = Gtk.GestureClick()
        click_ctrl.set_button(1)
        click_ctrl.connect("pressed", self._on_click)
        self.add_controller(click_ctrl)

        motion_ctrl = Gtk.EventControllerMotion()
        motion_ctrl.connect("motion", self._on_motion)
        motion_ctrl.connect("leave", self._on_leave)
        self.add_controller(motion_ctrl)

        scroll_ctrl = Gtk.EventControllerScroll()
        scroll_ctrl.set_flags(Gtk.EventControllerScrollFlags.BOTH_AXES)
        scroll_ctrl.connect("scroll", self._on_scroll)
        self.add_controller(scroll_ctrl)

        key_ctrl = Gtk.EventControllerKey()
        key_ctrl.connect("key-pressed", self._on_key_pressed)
        self.add_controller(key_ctrl)

        drag_ctrl = Gtk.GestureDrag()
        drag_ctrl.set_button(1)
        drag_ctrl.connect("drag-begin", self._on_drag_begin)
        drag_ctrl.connect("drag-update", self._on_drag_update)
        self.add_controller(drag_ctrl)

    # ==================== Data ====================

    def load_graph(self, graph: Optional[GraphData]):
        """Show a graph, placing its nodes from scratch."""
        self.graph = graph
        self.focused_id = None
        self.placements = compute_placements(graph) if graph is not None else {}
        self._rebuild()
        self.reset_view()

    def remove_node(self, node_id: str):
        self.placements.pop(node_id, None)
        if self.focused_id == node_id:
            self.focused_id = None
        self._rebuild()
        self.queue_draw()

    def _calc_node_size(self, node: ConceptNode) -> Tuple[float, float]:
        text_width = (len(display_label(node.label)) + 2) * 8 + self.NODE_PADDING * 2
        width = max(self.NODE_MIN_WIDTH, min(self.NODE_MAX_WIDTH, text_width))
        height = self.ROOT_NODE_HEIGHT if node.type == NodeType.ROOT else self.NODE_HEIGHT
        return width, height

    def _rebuild(self):
        self.rendered_nodes = []
        self._rendered_by_id = {}
        if self.graph is None:
            return
        for node in self.graph.nodes:
            placement = self.placements.get(node.id)
            if placement is None:
                continue
            w, h = self._calc_node_size(node)
            rendered = RenderedNode(node, placement.x - w / 2, placement.y - h / 2, w, h)
            self.rendered_nodes.append(rendered)
            self._rendered_by_id[node.id] = rendered

    # ==================== Drawing ====================

    def _on_draw(self, area, cr, width, height):
        """Main drawing function."""
        cr.save()

        cr.set_source_rgb(*self.COLORS['bg_primary'])
        cr.paint()

        cr.translate(self.pan_x, self.pan_y)
        cr.scale(self.zoom, self.zoom)

        self._draw_links(cr)
        for rendered in self.rendered_nodes:
            self._draw_node(cr, rendered)

        cr.restore()

    def _draw_links(self, cr):
        if self.graph is None:
            return
        cr.save()
        cr.set_line_width(1.2)
        cr.set_line_cap(cairo.LINE_CAP_ROUND)
        for link in self.graph.links:
            source = self._rendered_by_id.get(link.source)
            target = self._rendered_by_id.get(link.target)
            if source is None or target is None:
                continue
            highlighted = self.focused_id in (link.source, link.target)
            if highlighted:
                cr.set_source_rgba(*self.COLORS['accent_primary'], 0.9)
            else:
                cr.set_source_rgba(*self.COLORS['link'], 0.7)
            sx, sy = source.center
            tx, ty = target.center
            cr.move_to(sx, sy)
            cr.line_to(tx, ty)
            cr.stroke()
        cr.restore()

    def _draw_node(self, cr, rendered: RenderedNode):
        """Draw a single node."""
        node = rendered.node
        x, y, w, h = rendered.x, rendered.y, rendered.width, rendered.height
        is_root = node.type == NodeType.ROOT
        is_focused = self.focused_id == node.id
        is_hovered = self.hovered_node is rendered

        cr.save()

        radius = h / 2 if is_root else 6
        self._draw_rounded_rect(cr, x, y, w, h, radius)

        if is_root:
            bg = self.COLORS['root_node']
        elif is_hovered:
            bg = self.COLORS['surface_hover']
        else:
            bg = self.COLORS['surface']
        cr.set_source_rgb(*bg)
        cr.fill_preserve()

        if is_focused:
            cr.set_source_rgb(*self.COLORS['accent_primary'])
            cr.set_line_width(2.5)
        else:
            cr.set_source_rgb(*self.COLORS['border_subtle'])
            cr.set_line_width(1)
        cr.stroke()

        text_color = self.COLORS['root_text'] if is_root else self.COLORS['text_primary']
        cr.set_source_rgb(*text_color)
        cr.select_font_face(
            "Serif",
            cairo.FONT_SLANT_ITALIC if node.type == NodeType.WORK else cairo.FONT_SLANT_NORMAL,
            cairo.FONT_WEIGHT_BOLD if node.type in (NodeType.ROOT, NodeType.CATEGORY) else cairo.FONT_WEIGHT_NORMAL,
        )
        cr.set_font_size(15 if is_root else 13)

        # Truncate text if too long
        text = f"{get_type_icon(node.type)} {display_label(node.label)}"
        extents = cr.text_extents(text)
        max_width = w - self.NODE_PADDING * 2
        while extents.width > max_width and len(text) > 3:
            text = text[:-4] + "..."
            extents = cr.text_extents(text)

        cr.move_to(x + (w - extents.width) / 2, y + h / 2 + extents.height / 2 - 2)
        cr.show_text(text)

        cr.restore()

    def _draw_rounded_rect(self, cr, x: float, y: float, w: float, h: float, radius: float):
        cr.new_path()
        cr.arc(x + w - radius, y + radius, radius, -math.pi / 2, 0)
        cr.arc(x + w - radius, y + h - radius, radius, 0, math.pi / 2)
        cr.arc(x + radius, y + h - radius, radius, math.pi / 2, math.pi)
        cr.arc(x + radius, y + radius, radius, math.pi, 3 * math.pi / 2)
        cr.close_path()

    # ==================== Events ====================

    def _find_node_at(self, x: float, y: float) -> Optional[RenderedNode]:
        """Find the node at the given screen coordinates."""
        canvas_x = (x - self.pan_x) / self.zoom
        canvas_y = (y - self.pan_y) / self.zoom

        # Check in reverse order (top-most first)
        for rendered in reversed(self.rendered_nodes):
            if rendered.contains_point(canvas_x, canvas_y):
                return rendered
        return None

    def _on_click(self, gesture, n_press, x, y):
        self.grab_focus()
        clicked = self._find_node_at(x, y)
        if clicked is None:
            return
        self.focused_id = clicked.node.id
        self.queue_draw()
        if self.on_node_clicked:
            self.on_node_clicked(clicked.node.id)

    def _on_motion(self, controller, x, y):
        self.last_mouse_x = x
        self.last_mouse_y = y
        new_hover = self._find_node_at(x, y)
        if new_hover is not self.hovered_node:
            self.hovered_node = new_hover
            self.queue_draw()

    def _on_leave(self, controller):
        if self.hovered_node:
            self.hovered_node = None
            self.queue_draw()

    def _on_scroll(self, controller, dx, dy):
        """Zoom towards the pointer."""
        old_zoom = self.zoom
        zoom_factor = 1.1 if dy < 0 else 0.9
        self.zoom = max(0.25, min(4.0, self.zoom * zoom_factor))

        if old_zoom != self.zoom:
            mouse_x, mouse_y = self.last_mouse_x, self.last_mouse_y
            self.pan_x = mouse_x - (mouse_x - self.pan_x) * (self.zoom / old_zoom)
            self.pan_y = mouse_y - (mouse_y - self.pan_y) * (self.zoom / old_zoom)
            self.queue_draw()
        return True

    def _on_drag_begin(self, gesture, start_x, start_y):
        self.pan_start_x = self.pan_x
        self.pan_start_y = self.pan_y

    def _on_drag_update(self, gesture, offset_x, offset_y):
        self.pan_x = self.pan_start_x + offset_x
        self.pan_y = self.pan_start_y + offset_y
        self.queue_draw()

    def _on_key_pressed(self, controller, keyval, keycode, state):
        if keyval in (Gdk.KEY_Delete, Gdk.KEY_KP_Delete) and self.focused_id:
            if self.on_node_delete_requested:
                self.on_node_delete_requested(self.focused_id)
            return True
        return False

    # ==================== View ====================

    def focus_node(self, node_id: str, offset: float = 0.0, scale: float = 0.9):
        """Bring a node to the centre of the visible area (minus ``offset`` px on the right)."""
        rendered = self._rendered_by_id.get(node_id)
        if rendered is None:
            return
        self.focused_id = node_id
        self.zoom = scale
        cx, cy = rendered.center
        self.pan_x = (self.get_width() - offset) / 2 - cx * self.zoom
        self.pan_y = self.get_height() / 2 - cy * self.zoom
        self.queue_draw()

    def reset_view(self):
        """Fit the whole graph into view."""
        self.focused_id = None
        width, height = self.get_width(), self.get_height()
        if not self.rendered_nodes or width <= 0 or height <= 0:
            self.zoom = 1.0
            self.pan_x = width / 2
            self.pan_y = height / 2
            self.queue_draw()
            return

        min_x = min(n.x for n in self.rendered_nodes)
        max_x = max(n.x + n.width for n in self.rendered_nodes)
        min_y = min(n.y for n in self.rendered_nodes)
        max_y = max(n.y + n.height for n in self.rendered_nodes)

        self.zoom = min(
            (width - 40) / (max_x - min_x + 100),
            (height - 40) / (max_y - min_y + 100),
            1.0,
        )
        self.pan_x = width / 2 - (min_x + max_x) / 2 * self.zoom
        self.pan_y = height / 2 - (min_y + max_y) / 2 * self.zoom
        self.queue_draw()
