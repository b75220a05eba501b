"""Undo/Redo history for outline reordering."""

from typing import Optional, List, Callable
from dataclasses import dataclass
from enum import Enum


class ActionType(Enum):
    """Types of undoable actions."""
    PATH_REORDER = "path_reorder"
    PATH_RESET = "path_reset"


@dataclass
class UndoAction:
    """Represents an undoable action."""
    action_type: ActionType
    description: str
    data: dict  # Action-specific data for undo
    redo_data: dict  # Action-specific data for redo


class UndoManager:
    """Manages undo/redo history."""

    def __init__(self, max_undo: int = 20, max_redo: int = 20):
        self.max_undo = max_undo
        self.max_redo = max_redo
        self._undo_stack: List[UndoAction] = []
        self._redo_stack: List[UndoAction] = []

        # Callbacks
        self.on_state_changed: Optional[Callable[[], None]] = None

    @property
    def can_undo(self) -> bool:
        return len(self._undo_stack) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._redo_stack) > 0

    @property
    def undo_description(self) -> str:
        """Get description of next undo action."""
        if self._undo_stack:
            return self._undo_stack[-1].description
        return ""

    @property
    def redo_description(self) -> str:
        """Get description of next redo action."""
        if self._redo_stack:
            return self._redo_stack[-1].description
        return ""

    def push(self, action: UndoAction):
        """Push a new action; anything that could be redone is dropped."""
        self._undo_stack.append(action)
        self._redo_stack.clear()

        while len(self._undo_stack) > self.max_undo:
            self._undo_stack.pop(0)

        self._notify_changed()

    def undo(self) -> Optional[UndoAction]:
        """Pop and return the last action for undoing."""
        if not self._undo_stack:
            return None

        action = self._undo_stack.pop()
        self._redo_stack.append(action)
        while len(self._redo_stack) > self.max_redo:
            self._redo_stack.pop(0)

        self._notify_changed()
        return action

    def redo(self) -> Optional[UndoAction]:
        """Pop and return the last undone action for redoing."""
        if not self._redo_stack:
            return None

        action = self._redo_stack.pop()
        self._undo_stack.append(action)
        while len(self._undo_stack) > self.max_undo:
            self._undo_stack.pop(0)

        self._notify_changed()
        return action

    def clear(self):
        self._undo_stack.clear()
        self._redo_stack.clear()
        self._notify_changed()

    def _notify_changed(self):
        if self.on_state_changed:
            self.on_state_changed()

    # ==================== Action Factories ====================

    @staticmethod
    def reorder_action(old_order: List[str], new_order: List[str], moved_label: str,
                       block_size: int = 1) -> UndoAction:
        """Create action for a drag-and-drop move in the outline."""
        what = f"'{moved_label[:20]}...'" if len(moved_label) > 20 else f"'{moved_label}'"
        if block_size > 1:
            what += f" and {block_size - 1} more"
        return UndoAction(
            action_type=ActionType.PATH_REORDER,
            description=f"Move {what}",
            data={"order": list(old_order)},
            redo_data={"order": list(new_order)},
        )

    @staticmethod
    def reset_action(old_order: List[str], new_order: List[str]) -> UndoAction:
        """Create action for restoring the computed tour order."""
        return UndoAction(
            action_type=ActionType.PATH_RESET,
            description="Reset tour order",
            data={"order": list(old_order)},
            redo_data={"order": list(new_order)},
        )
