"""Main conceptour application."""

import logging
import sys
from pathlib import Path
from typing import Optional, List

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gdk, Gio, Adw

from conceptour import __version__, __app_id__
from conceptour.canvas import GraphCanvas
from conceptour.config import TourSettings, load_settings
from conceptour.graph import GraphData, GraphError
from conceptour.outline import OutlineReorderer, display_label
from conceptour.tour import TourController, TourIndexError
from conceptour.undo import UndoManager
from conceptour.widgets import OutlinePanel, TourBar, DetailPanel

logger = logging.getLogger(__name__)


class ConceptourWindow(Adw.ApplicationWindow):
    """Main application window."""

    def __init__(self, app: Adw.Application, graph: GraphData, settings: TourSettings):
        super().__init__(application=app)
        self.graph = graph
        self.settings = settings

        self.controller = TourController(graph)
        self.undo_manager = UndoManager(max_undo=settings.max_undo, max_redo=settings.max_undo)
        self.reorderer = OutlineReorderer(self.controller, self.undo_manager)

        title = graph.metadata.get("title") or "conceptour"
        self.set_title(title)
        self.set_default_size(1400, 900)

        self._load_css()
        self._build_ui()
        self._wire_controller()
        self._setup_shortcuts()

        self.canvas.load_graph(graph)
        self.controller.prepare(graph.custom_order)
        self.tour_bar.update()

    def _load_css(self):
        """Load custom CSS theme."""
        css_provider = Gtk.CssProvider()
        css_path = Path(__file__).parent / "theme.css"

        if css_path.exists():
            css_provider.load_from_path(str(css_path))
            Gtk.StyleContext.add_provider_for_display(
                Gdk.Display.get_default(),
                css_provider,
                Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION
            )

    def _build_ui(self):
        """Build the main UI layout."""
        main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        main_box.append(self._build_header())

        self.main_paned = Gtk.Paned(orientation=Gtk.Orientation.HORIZONTAL)
        self.main_paned.set_vexpand(True)

        # Left sidebar
        self.outline = OutlinePanel(self.controller, self.reorderer, self.settings)
        self.outline.on_error = self._show_toast

        self.outline_revealer = Gtk.Revealer()
        self.outline_revealer.set_transition_type(Gtk.RevealerTransitionType.SLIDE_RIGHT)
        self.outline_revealer.set_reveal_child(True)
        self.outline_revealer.set_child(self.outline)

        self.main_paned.set_start_child(self.outline_revealer)
        self.main_paned.set_shrink_start_child(False)
        self.main_paned.set_resize_start_child(False)

        # Canvas with the tour bar floating over it
        self.canvas = GraphCanvas()
        self.canvas.on_node_clicked = self._on_node_clicked
        self.canvas.on_node_delete_requested = self._on_node_delete_requested

        self.tour_bar = TourBar(self.controller)
        self.tour_bar.on_start = self._start_tour

        canvas_overlay = Gtk.Overlay()
        canvas_overlay.set_child(self.canvas)
        canvas_overlay.add_overlay(self.tour_bar)

        # Detail panel over the right edge of the canvas
        self.detail_panel = DetailPanel(self.settings)
        self.detail_panel.on_close_requested = self._close_detail

        self.detail_revealer = Gtk.Revealer()
        self.detail_revealer.set_transition_type(Gtk.RevealerTransitionType.SLIDE_LEFT)
        self.detail_revealer.set_reveal_child(False)
        self.detail_revealer.set_halign(Gtk.Align.END)
        self.detail_revealer.set_child(self.detail_panel)
        canvas_overlay.add_overlay(self.detail_revealer)

        self.main_paned.set_end_child(canvas_overlay)

        self.toast_overlay = Adw.ToastOverlay()
        self.toast_overlay.set_child(self.main_paned)
        main_box.append(self.toast_overlay)

        self.set_content(main_box)

    def _build_header(self) -> Adw.HeaderBar:
        header = Adw.HeaderBar()

        outline_btn = Gtk.ToggleButton()
        outline_btn.set_icon_name("sidebar-show-symbolic")
        outline_btn.set_tooltip_text("Toggle outline (Ctrl+L)")
        outline_btn.set_active(True)
        outline_btn.connect("toggled", lambda b: self.outline_revealer.set_reveal_child(b.get_active()))
        self.outline_btn = outline_btn
        header.pack_start(outline_btn)

        self.undo_btn = Gtk.Button.new_from_icon_name("edit-undo-symbolic")
        self.undo_btn.set_action_name("win.undo")
        header.pack_start(self.undo_btn)

        self.redo_btn = Gtk.Button.new_from_icon_name("edit-redo-symbolic")
        self.redo_btn.set_action_name("win.redo")
        header.pack_start(self.redo_btn)

        reset_btn = Gtk.Button(label="Reset order")
        reset_btn.set_tooltip_text("Restore the computed tour order")
        reset_btn.set_action_name("win.reset-order")
        header.pack_end(reset_btn)

        self.undo_manager.on_state_changed = self._update_undo_buttons
        self._update_undo_buttons()
        return header

    def _wire_controller(self):
        self.controller.on_focus_node = self._on_focus_node
        self.controller.on_close_detail = self._close_detail_panel
        self.controller.on_reset_view = self.canvas.reset_view
        self.controller.on_path_changed = self._on_path_changed
        self.controller.on_state_changed = self._on_state_changed

    def _setup_shortcuts(self):
        """Setup keyboard shortcuts."""
        actions = [
            ("tour-start", self._start_tour, "F5"),
            ("tour-next", self._tour_next, "Right"),
            ("tour-prev", self._tour_prev, "Left"),
            ("tour-stop", self._tour_stop, "Escape"),
            ("undo", self._undo, "<Control>z"),
            ("redo", self._redo, "<Control><Shift>z"),
            ("reset-order", self._reset_order, None),
            ("toggle-outline", self._toggle_outline, "<Control>l"),
            ("quit", lambda: self.close(), "<Control>q"),
        ]

        for name, callback, accel in actions:
            action = Gio.SimpleAction.new(name, None)
            action.connect("activate", lambda a, p, cb=callback: cb())
            self.add_action(action)

            if accel:
                self.get_application().set_accels_for_action(f"win.{name}", [accel])

        self.get_application().set_accels_for_action("win.redo", ["<Control><Shift>z", "<Control>y"])

    # ==================== Controller callbacks ====================

    def _focus_offset(self) -> float:
        # On narrow windows the detail panel covers the canvas, so centre on the full width.
        if self.get_width() < self.settings.narrow_breakpoint:
            return 0.0
        return float(self.settings.detail_panel_width)

    def _on_focus_node(self, node_id: str):
        node = self.graph.get_node(node_id)
        if node is None:
            return
        self.detail_panel.show_node(node)
        self.detail_revealer.set_reveal_child(True)
        self.canvas.focus_node(node_id, self._focus_offset())

    def _close_detail_panel(self):
        self.detail_revealer.set_reveal_child(False)
        self.detail_panel.close()

    def _on_path_changed(self, path: List[str]):
        self.graph.custom_order = path or None
        self.outline.refresh()

    def _on_state_changed(self):
        self.tour_bar.update()
        self.outline.update_active()

    def _update_undo_buttons(self):
        self.undo_btn.set_sensitive(self.undo_manager.can_undo)
        self.undo_btn.set_tooltip_text(
            f"Undo {self.undo_manager.undo_description}" if self.undo_manager.can_undo else "Nothing to undo"
        )
        self.redo_btn.set_sensitive(self.undo_manager.can_redo)
        self.redo_btn.set_tooltip_text(
            f"Redo {self.undo_manager.redo_description}" if self.undo_manager.can_redo else "Nothing to redo"
        )

    # ==================== Canvas callbacks ====================

    def _on_node_clicked(self, node_id: str):
        if self.controller.is_active:
            self.controller.handle_node_click(node_id)
            return
        node = self.graph.get_node(node_id)
        if node is not None:
            self.detail_panel.show_node(node)
            self.detail_revealer.set_reveal_child(True)

    def _on_node_delete_requested(self, node_id: str):
        node = self.graph.remove_node(node_id)
        if node is None:
            return
        self.canvas.remove_node(node_id)
        if self.detail_panel.current_node is not None and self.detail_panel.current_node.id == node_id:
            self._close_detail_panel()
        self.controller.handle_node_deleted(node_id)
        self._show_toast(f"Removed '{display_label(node.label)}'")

    # ==================== Actions ====================

    def _start_tour(self):
        try:
            started = self.controller.start(self.graph.custom_order)
        except GraphError as exc:
            logger.error("Cannot start tour: %s", exc)
            self._show_toast(f"Cannot start tour: {exc}")
            return
        if not started:
            self._show_toast("Nothing to tour")

    def _tour_next(self):
        if self.controller.is_active:
            self.controller.next()

    def _tour_prev(self):
        if self.controller.is_active:
            self.controller.prev()

    def _tour_stop(self):
        if self.controller.is_active:
            self.controller.stop()

    def _close_detail(self):
        if self.controller.is_active:
            self.controller.stop()
        else:
            self._close_detail_panel()

    def _undo(self):
        description = self.undo_manager.undo_description
        try:
            if self.reorderer.undo():
                self._show_toast(f"Undone: {description}")
        except (TourIndexError, ValueError) as exc:
            logger.warning("Undo failed: %s", exc)
            self._show_toast(f"Undo failed: {exc}")

    def _redo(self):
        description = self.undo_manager.redo_description
        try:
            if self.reorderer.redo():
                self._show_toast(f"Redone: {description}")
        except (TourIndexError, ValueError) as exc:
            logger.warning("Redo failed: %s", exc)
            self._show_toast(f"Redo failed: {exc}")

    def _reset_order(self):
        if self.reorderer.reset_order():
            self._show_toast("Tour order reset")

    def _toggle_outline(self):
        self.outline_btn.set_active(not self.outline_btn.get_active())

    def _show_toast(self, message: str):
        """Show a toast notification."""
        toast = Adw.Toast(title=message)
        toast.set_timeout(3)
        self.toast_overlay.add_toast(toast)


class ConceptourApp(Adw.Application):
    """Main application class."""

    def __init__(self, graph: GraphData, settings: TourSettings):
        super().__init__(
            application_id=__app_id__,
            flags=Gio.ApplicationFlags.DEFAULT_FLAGS
        )
        self.graph = graph
        self.settings = settings
        self.window: Optional[ConceptourWindow] = None

    def do_activate(self):
        """Activate application."""
        if not self.window:
            logger.info("conceptour %s: %d node(s), %d link(s)",
                        __version__, len(self.graph), len(self.graph.links))
            self.window = ConceptourWindow(self, self.graph, self.settings)

        self.window.present()


def main(graph: Optional[GraphData] = None, settings: Optional[TourSettings] = None) -> int:
    """Application entry point."""
    if graph is None:
        from conceptour.sample import sample_graph
        graph = sample_graph()
    app = ConceptourApp(graph, settings or load_settings())
    # The launcher already consumed the command line.
    return app.run([sys.argv[0]])


if __name__ == "__main__":
    sys.exit(main())
