"""Branching history tree subpackage.

Tree storage, navigation, grouping, pruning, and the :class:`UndoManager`
engine that ties them together.
"""
from __future__ import annotations

from branching_undo.history.actions import UndoAction, checkpoint_action
from branching_undo.history.grouping import GroupBuffer, composite_action
from branching_undo.history.navigator import PathStep, StepDirection, find_path
from branching_undo.history.pruning import PruningPolicy
from branching_undo.history.tree import HistoryTree, UndoNode
from branching_undo.history.manager import UndoManager

__all__ = [
    "GroupBuffer",
    "HistoryTree",
    "PathStep",
    "PruningPolicy",
    "StepDirection",
    "UndoAction",
    "UndoManager",
    "UndoNode",
    "checkpoint_action",
    "composite_action",
    "find_path",
]
