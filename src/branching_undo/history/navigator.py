"""Navigation over the history tree.

Pure functions that read a :class:`HistoryTree` and decide where an undo,
redo or restore should go.  Nothing here calls ``apply``/``revert`` or moves
the current pointer; :class:`UndoManager` executes the plans built here.

Cross-branch moves use the lowest common ancestor (LCA) of the two
positions: revert everything from the start position up to the LCA, then
re-apply everything from the LCA down to the target.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from branching_undo.history.tree import HistoryTree


class StepDirection(str, Enum):
    """Which callback a path step runs."""

    UNDO = "undo"
    REDO = "redo"


@dataclass(frozen=True)
class PathStep:
    """One move along a restore path."""

    node_id: str
    direction: StepDirection


def ancestors(tree: HistoryTree, node_id: str | None) -> list[str]:
    """Return *node_id* followed by its ancestors, root last.

    ``None`` (the position before the root) has no ancestors.
    """
    return list(tree.iter_ancestors(node_id))


def lowest_common_ancestor(
    tree: HistoryTree, first_id: str | None, second_id: str | None
) -> str | None:
    """Return the deepest node that is an ancestor of both positions.

    Returns ``None`` when the two positions share no node, e.g. when one of
    them is the position before the root, or they sit in detached trees.
    """
    second_chain = set(ancestors(tree, second_id))
    for candidate in ancestors(tree, first_id):
        if candidate in second_chain:
            return candidate
    return None


def find_path(tree: HistoryTree, from_id: str | None, to_id: str) -> list[PathStep]:
    """Plan the steps that move the position from *from_id* to *to_id*.

    Undo steps come first, nearest node first, stopping before the LCA.
    Redo steps follow in tree order, from just below the LCA down to and
    including *to_id*.

    Example
    -------
    With ``a -> b -> c`` and a sibling branch ``a -> d``, the path from
    ``c`` to ``d`` is ``undo c, undo b, redo d``.
    """
    common = lowest_common_ancestor(tree, from_id, to_id)

    steps: list[PathStep] = []
    for node_id in ancestors(tree, from_id):
        if node_id == common:
            break
        steps.append(PathStep(node_id, StepDirection.UNDO))

    redo_chain: list[str] = []
    for node_id in ancestors(tree, to_id):
        if node_id == common:
            break
        redo_chain.append(node_id)
    steps.extend(PathStep(node_id, StepDirection.REDO) for node_id in reversed(redo_chain))
    return steps


def can_undo(tree: HistoryTree) -> bool:
    return tree.current_id is not None


def redo_target(tree: HistoryTree) -> str | None:
    """Return the node a redo would move into, or ``None``.

    Always the most recently created child of the current node, so after
    an undo followed by a new edit, redo resumes the newest branch.  From
    the position before the root, the target is the active root.
    """
    current = tree.current
    if current is not None:
        return current.children[-1] if current.children else None
    if tree.current_id is None:
        return tree.root_id
    return None


def can_redo(tree: HistoryTree) -> bool:
    return redo_target(tree) is not None


def active_path(tree: HistoryTree) -> list[str]:
    """Ids from the current node up to the root (most recent first)."""
    return ancestors(tree, tree.current_id)


__all__ = [
    "PathStep",
    "StepDirection",
    "active_path",
    "ancestors",
    "can_redo",
    "can_undo",
    "find_path",
    "lowest_common_ancestor",
    "redo_target",
]
