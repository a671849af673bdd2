"""History change notification and shortcut signal handles."""
from __future__ import annotations

from branching_undo.events.notifier import HistoryListener, HistoryNotifier, HistorySnapshot
from branching_undo.events.triggers import REDO_REQUESTED, UNDO_REQUESTED, ShortcutTriggers

__all__ = [
    "HistoryListener",
    "HistoryNotifier",
    "HistorySnapshot",
    "REDO_REQUESTED",
    "ShortcutTriggers",
    "UNDO_REQUESTED",
]
