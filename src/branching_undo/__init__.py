"""branching-undo: Tree-structured undo/redo engine for interactive editors.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import branching_undo as bu
>>> bu.__version__
'0.1.0'
>>> manager = bu.UndoManager()
>>> doc = {"x": 0}
>>> manager.push(bu.UndoAction(apply=lambda: doc.update(x=1), revert=lambda: doc.update(x=0)))  # doctest: +ELLIPSIS
'undo-...'
>>> manager.undo()
True
>>> doc
{'x': 0}
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# History engine
# ---------------------------------------------------------------------------
from branching_undo.history.actions import UndoAction
from branching_undo.history.manager import UndoManager
from branching_undo.history.navigator import PathStep, StepDirection
from branching_undo.history.pruning import PruningPolicy
from branching_undo.history.tree import HistoryTree, UndoNode

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------
from branching_undo.events.notifier import HistorySnapshot
from branching_undo.events.triggers import REDO_REQUESTED, UNDO_REQUESTED, ShortcutTriggers

# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------
from branching_undo.persistence.record import StructuralRecord
from branching_undo.persistence.session_store import (
    FileSessionStore,
    InMemorySessionStore,
    NullSessionStore,
    SessionStore,
)

# ---------------------------------------------------------------------------
# Configuration and errors
# ---------------------------------------------------------------------------
from branching_undo.config.config_loader import ConfigLoader, UndoConfig
from branching_undo.errors import DuplicateActionError, PersistenceError, UndoEngineError

__all__ = [
    "__version__",
    # History engine
    "HistoryTree",
    "PathStep",
    "PruningPolicy",
    "StepDirection",
    "UndoAction",
    "UndoManager",
    "UndoNode",
    # Events
    "HistorySnapshot",
    "REDO_REQUESTED",
    "ShortcutTriggers",
    "UNDO_REQUESTED",
    # Persistence
    "FileSessionStore",
    "InMemorySessionStore",
    "NullSessionStore",
    "SessionStore",
    "StructuralRecord",
    # Configuration and errors
    "ConfigLoader",
    "DuplicateActionError",
    "PersistenceError",
    "UndoConfig",
    "UndoEngineError",
]
