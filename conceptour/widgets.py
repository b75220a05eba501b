"""Custom widgets for the conceptour window."""

import logging
from typing import Optional, Callable, List
import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gdk, GLib, GObject, Pango

from conceptour.config import TourSettings
from conceptour.graph import ConceptNode
from conceptour.icons import get_type_icon, get_state_icon
from conceptour.outline import (
    AutoScroller, OutlineReorderer, OutlineRow, indent_for, outline_rows, display_label,
)
from conceptour.tour import TourController, TourIndexError

logger = logging.getLogger(__name__)


class OutlineRowWidget(Gtk.ListBoxRow):
    """A row in the outline: grip, type glyph and label."""

    def __init__(self, row: OutlineRow, settings: TourSettings):
        super().__init__()
        self.index = row.path_index
        self.node_id = row.node_id

        box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        box.set_margin_start(indent_for(row.node_type, settings))
        box.set_margin_end(12)
        box.set_margin_top(4)
        box.set_margin_bottom(4)

        grip = Gtk.Label(label=get_state_icon("grip"))
        grip.add_css_class("outline-grip")
        box.append(grip)

        icon = Gtk.Label(label=get_type_icon(row.node_type))
        icon.add_css_class("outline-icon")
        box.append(icon)

        self.label = Gtk.Label(label=row.label)
        self.label.set_halign(Gtk.Align.START)
        self.label.set_hexpand(True)
        self.label.set_ellipsize(Pango.EllipsizeMode.END)
        box.append(self.label)

        self.marker = Gtk.Label(label=get_state_icon("active"))
        self.marker.add_css_class("outline-marker")
        box.append(self.marker)

        self.add_css_class(f"outline-level-{row.level}")
        self.set_child(box)
        self.set_active(row.is_active)

    def set_active(self, active: bool):
        self.marker.set_visible(active)
        if active:
            self.add_css_class("outline-active")
        else:
            self.remove_css_class("outline-active")


class OutlinePanel(Gtk.Box):
    """Left sidebar listing the tour path; rows can be dragged to reorder it."""

    def __init__(self, controller: TourController, reorderer: OutlineReorderer,
                 settings: Optional[TourSettings] = None):
        super().__init__(orientation=Gtk.Orientation.VERTICAL)
        self.controller = controller
        self.reorderer = reorderer
        self.settings = settings or TourSettings()
        self.autoscroller = AutoScroller.from_settings(self.settings)
        self.rows: List[OutlineRowWidget] = []

        self._autoscroll_id: Optional[int] = None
        self._indicator_row: Optional[OutlineRowWidget] = None

        # Callbacks
        self.on_error: Optional[Callable[[str], None]] = None

        self.add_css_class("outline-panel")
        self.set_size_request(280, -1)

        # Header
        header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=8)
        header.set_margin_start(16)
        header.set_margin_end(16)
        header.set_margin_top(12)
        header.set_margin_bottom(12)

        title = Gtk.Label(label="TOUR")
        title.set_hexpand(True)
        title.set_halign(Gtk.Align.START)
        title.add_css_class("sidebar-title")
        header.append(title)

        self.count_label = Gtk.Label(label="")
        self.count_label.add_css_class("dim-label")
        header.append(self.count_label)

        self.append(header)
        self.append(Gtk.Separator(orientation=Gtk.Orientation.HORIZONTAL))

        # Path list
        self.scrolled = Gtk.ScrolledWindow()
        self.scrolled.set_vexpand(True)
        self.scrolled.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)

        self.listbox = Gtk.ListBox()
        self.listbox.set_selection_mode(Gtk.SelectionMode.NONE)
        self.listbox.set_activate_on_single_click(True)
        self.listbox.add_css_class("outline-list")
        self.listbox.connect("row-activated", self._on_row_activated)

        drop_target = Gtk.DropTarget.new(GObject.TYPE_STRING, Gdk.DragAction.MOVE)
        drop_target.connect("motion", self._on_drop_motion)
        drop_target.connect("leave", self._on_drop_leave)
        drop_target.connect("drop", self._on_drop)
        self.listbox.add_controller(drop_target)

        self.scrolled.set_child(self.listbox)
        self.append(self.scrolled)

    # ==================== Rows ====================

    def refresh(self):
        """Rebuild the rows from the controller's path."""
        if self.reorderer.is_dragging:
            return

        child = self.listbox.get_first_child()
        while child is not None:
            next_child = child.get_next_sibling()
            self.listbox.remove(child)
            child = next_child
        self.rows = []
        self._indicator_row = None

        active_id = self.controller.current_node_id
        for row in outline_rows(self.controller.path, self.controller.graph, active_id):
            widget = OutlineRowWidget(row, self.settings)
            self._attach_drag_source(widget)
            self.listbox.append(widget)
            self.rows.append(widget)

        self.count_label.set_label(str(len(self.rows)))
        self.update_active()

    def update_active(self):
        """Move the active marker to the current tour step."""
        cursor = self.controller.cursor
        for row in self.rows:
            row.set_active(row.index == cursor)
            if row.index == cursor:
                GLib.idle_add(self._scroll_to_row, row)

    def _scroll_to_row(self, row: OutlineRowWidget) -> bool:
        ok, bounds = row.compute_bounds(self.listbox)
        if not ok:
            return False
        vadj = self.scrolled.get_vadjustment()
        top = bounds.get_y()
        bottom = top + bounds.get_height()
        if top < vadj.get_value():
            vadj.set_value(top)
        elif bottom > vadj.get_value() + vadj.get_page_size():
            vadj.set_value(bottom - vadj.get_page_size())
        return False

    def _on_row_activated(self, listbox, row):
        try:
            self.controller.jump(row.index)
        except TourIndexError as exc:
            logger.warning("Outline jump failed: %s", exc)
            if self.on_error:
                self.on_error(str(exc))

    # ==================== Drag and drop ====================

    def _attach_drag_source(self, row: OutlineRowWidget):
        source = Gtk.DragSource()
        source.set_actions(Gdk.DragAction.MOVE)
        source.connect("prepare", self._on_drag_prepare, row)
        source.connect("drag-begin", self._on_drag_begin, row)
        source.connect("drag-end", self._on_drag_end)
        row.add_controller(source)

    def _on_drag_prepare(self, source, x, y, row):
        if not self.reorderer.drag_start(row.index):
            return None
        value = GObject.Value(GObject.TYPE_STRING, row.node_id)
        return Gdk.ContentProvider.new_for_value(value)

    def _on_drag_begin(self, source, drag, row):
        source.set_icon(Gtk.WidgetPaintable.new(row), 0, 0)
        for widget in self.rows:
            if self.reorderer.is_dragged(widget.index):
                widget.add_css_class("outline-dragged")

        if self._autoscroll_id is None:
            self._autoscroll_id = GLib.timeout_add(
                self.settings.autoscroll_interval_ms, self._on_autoscroll_tick
            )

    def _on_drag_end(self, source, drag, delete_data):
        self._stop_autoscroll()
        if self.reorderer.is_dragging:
            self.reorderer.cancel()
        self.refresh()

    def _on_drop_motion(self, target, x, y):
        row = self.listbox.get_row_at_y(int(y))
        vadj = self.scrolled.get_vadjustment()
        self.autoscroller.update(y - vadj.get_value(), 0, self.scrolled.get_height())

        if row is None:
            self._show_indicator(None)
            return Gdk.DragAction.MOVE

        ok, bounds = row.compute_bounds(self.listbox)
        if not ok:
            return Gdk.DragAction.MOVE
        drop_index = self.reorderer.drag_over(row.index, y, bounds.get_y(), bounds.get_height())
        self._show_indicator(drop_index)
        return Gdk.DragAction.MOVE

    def _on_drop_leave(self, target):
        self.autoscroller.stop()
        self._show_indicator(None)

    def _on_drop(self, target, value, x, y):
        self._show_indicator(None)
        return self.reorderer.drop()

    def _show_indicator(self, drop_index: Optional[int]):
        """Draw the insertion line above row ``drop_index`` (below the last row at the end)."""
        if self._indicator_row is not None:
            self._indicator_row.remove_css_class("outline-drop-above")
            self._indicator_row.remove_css_class("outline-drop-below")
            self._indicator_row = None
        if drop_index is None or not self.rows:
            return
        following = [row for row in self.rows if row.index >= drop_index]
        if following:
            self._indicator_row = following[0]
            self._indicator_row.add_css_class("outline-drop-above")
        else:
            self._indicator_row = self.rows[-1]
            self._indicator_row.add_css_class("outline-drop-below")

    def _on_autoscroll_tick(self) -> bool:
        step = self.autoscroller.tick()
        if step:
            vadj = self.scrolled.get_vadjustment()
            upper = vadj.get_upper() - vadj.get_page_size()
            vadj.set_value(max(vadj.get_lower(), min(upper, vadj.get_value() + step)))
        return True

    def _stop_autoscroll(self):
        self.autoscroller.stop()
        if self._autoscroll_id is not None:
            GLib.source_remove(self._autoscroll_id)
            self._autoscroll_id = None


class TourBar(Gtk.Box):
    """Start / previous / progress / next / stop controls."""

    def __init__(self, controller: TourController):
        super().__init__(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        self.controller = controller

        # Callbacks
        self.on_start: Optional[Callable[[], None]] = None

        self.add_css_class("tour-bar")
        self.set_halign(Gtk.Align.CENTER)
        self.set_valign(Gtk.Align.END)
        self.set_margin_bottom(16)

        self.start_btn = Gtk.Button(label="Start tour")
        self.start_btn.add_css_class("suggested-action")
        self.start_btn.connect("clicked", lambda b: self.on_start and self.on_start())
        self.append(self.start_btn)

        self.prev_btn = Gtk.Button.new_from_icon_name("go-previous-symbolic")
        self.prev_btn.set_tooltip_text("Previous (Left)")
        self.prev_btn.connect("clicked", lambda b: self.controller.prev())
        self.append(self.prev_btn)

        self.progress_label = Gtk.Label(label="")
        self.progress_label.add_css_class("tour-progress")
        self.append(self.progress_label)

        self.next_btn = Gtk.Button(label="Next")
        self.next_btn.set_tooltip_text("Next (Right)")
        self.next_btn.connect("clicked", lambda b: self.controller.next())
        self.append(self.next_btn)

        self.stop_btn = Gtk.Button.new_from_icon_name("process-stop-symbolic")
        self.stop_btn.set_tooltip_text("End tour (Escape)")
        self.stop_btn.connect("clicked", lambda b: self.controller.stop())
        self.append(self.stop_btn)

        self.update()

    def update(self):
        active = self.controller.is_active
        total = len(self.controller.path)
        cursor = self.controller.cursor

        self.start_btn.set_visible(not active)
        self.start_btn.set_sensitive(self.controller.graph is not None and len(self.controller.graph) > 0)
        for widget in (self.prev_btn, self.progress_label, self.next_btn, self.stop_btn):
            widget.set_visible(active)
        if not active:
            return

        self.prev_btn.set_sensitive(cursor > 0)
        self.progress_label.set_label(f"{cursor + 1} / {total}")
        self.next_btn.set_label("Finish" if cursor == total - 1 else "Next")


class DetailPanel(Gtk.Box):
    """Right sidebar describing the focused node."""

    def __init__(self, settings: Optional[TourSettings] = None):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=8)
        settings = settings or TourSettings()
        self.current_node: Optional[ConceptNode] = None

        # Callbacks
        self.on_close_requested: Optional[Callable[[], None]] = None

        self.add_css_class("detail-panel")
        self.set_size_request(settings.detail_panel_width, -1)

        # Header
        header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=8)
        header.set_margin_start(16)
        header.set_margin_end(8)
        header.set_margin_top(12)

        self.type_label = Gtk.Label(label="")
        self.type_label.set_hexpand(True)
        self.type_label.set_halign(Gtk.Align.START)
        self.type_label.add_css_class("sidebar-title")
        header.append(self.type_label)

        close_btn = Gtk.Button.new_from_icon_name("window-close-symbolic")
        close_btn.add_css_class("flat")
        close_btn.connect("clicked", lambda b: self.on_close_requested and self.on_close_requested())
        header.append(close_btn)
        self.append(header)

        self.title_label = Gtk.Label(label="")
        self.title_label.set_halign(Gtk.Align.START)
        self.title_label.set_wrap(True)
        self.title_label.set_margin_start(16)
        self.title_label.set_margin_end(16)
        self.title_label.add_css_class("title-2")
        self.append(self.title_label)

        self.append(Gtk.Separator(orientation=Gtk.Orientation.HORIZONTAL))

        scrolled = Gtk.ScrolledWindow()
        scrolled.set_vexpand(True)
        scrolled.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)

        body = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=12)
        body.set_margin_start(16)
        body.set_margin_end(16)
        body.set_margin_top(8)
        body.set_margin_bottom(16)

        self.summary_label = self._body_label(body, "detail-summary")
        self.explanation_label = self._body_label(body, "detail-explanation")
        self.context_label = self._body_label(body, "detail-context")

        scrolled.set_child(body)
        self.append(scrolled)

    @staticmethod
    def _body_label(parent: Gtk.Box, css_class: str) -> Gtk.Label:
        label = Gtk.Label(label="")
        label.set_halign(Gtk.Align.START)
        label.set_xalign(0)
        label.set_wrap(True)
        label.set_wrap_mode(Pango.WrapMode.WORD_CHAR)
        label.add_css_class(css_class)
        parent.append(label)
        return label

    def show_node(self, node: ConceptNode):
        self.current_node = node
        self.type_label.set_label(node.type.value)
        self.title_label.set_label(display_label(node.label))
        for label, text in (
            (self.summary_label, node.short_summary),
            (self.explanation_label, node.long_explanation),
            (self.context_label, node.concept_context),
        ):
            label.set_label(text or "")
            label.set_visible(bool(text))

    def close(self):
        self.current_node = None
        self.type_label.set_label("")
        self.title_label.set_label("")
        for label in (self.summary_label, self.explanation_label, self.context_label):
            label.set_label("")
