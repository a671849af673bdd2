"""Arena-backed storage for the history tree.

Nodes live in a flat ``dict`` keyed by id.  Parents are referenced by id and
children by an ordered list of ids, so there are no ownership cycles; every
link is resolved by lookup.

Key classes
-----------
UndoNode    : One point in history, wrapping a single :class:`UndoAction`.
HistoryTree : Owns the node map plus the ``current`` and ``root`` pointers.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from branching_undo.errors import DuplicateActionError
from branching_undo.history.actions import UndoAction

logger = logging.getLogger(__name__)


@dataclass
class UndoNode:
    """A point in the history tree.

    Attributes
    ----------
    node_id:
        Identifier, shared with :attr:`action`'s ``action_id``.
    action:
        The reversible action recorded at this point.
    parent_id:
        Id of the parent node; ``None`` only for a root.
    children:
        Child ids in creation order; the newest branch is last.
    is_checkpoint:
        True for named checkpoint markers (whose action is a no-op).
    checkpoint_name:
        The checkpoint's name, when :attr:`is_checkpoint` is set.
    sequence:
        Monotonic insertion counter, used to order nodes whose timestamps tie.
    """

    node_id: str
    action: UndoAction
    parent_id: str | None
    children: list[str] = field(default_factory=list)
    is_checkpoint: bool = False
    checkpoint_name: str | None = None
    sequence: int = 0

    @property
    def description(self) -> str:
        return self.action.description

    @property
    def is_leaf(self) -> bool:
        return not self.children


class HistoryTree:
    """Node map plus the ``current`` and ``root`` pointers.

    ``current_id`` of ``None`` means "before the first action".  ``root_id``
    names the root of the active path and is re-derived whenever the
    current position moves onto a node.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, UndoNode] = {}
        self._current_id: str | None = None
        self._root_id: str | None = None
        self._sequence: int = 0

    # ------------------------------------------------------------------
    # Pointers
    # ------------------------------------------------------------------

    @property
    def current_id(self) -> str | None:
        return self._current_id

    @property
    def root_id(self) -> str | None:
        return self._root_id

    @property
    def current(self) -> UndoNode | None:
        """The node at the current position, or ``None`` before the root."""
        if self._current_id is None:
            return None
        return self._nodes.get(self._current_id)

    def move_to(self, node_id: str | None) -> None:
        """Move the current position.

        Parameters
        ----------
        node_id:
            An existing node id, or ``None`` for "before the root".

        Raises
        ------
        KeyError:
            When *node_id* is not in the tree.
        """
        if node_id is None:
            self._current_id = None
            return
        node = self._nodes[node_id]
        previous_id = self._current_id
        self._current_id = node_id
        if node_id == self._root_id:
            return
        # A single step to a parent or child stays under the same root.
        if self._root_id is not None and previous_id is not None and (
            node.parent_id == previous_id or self._nodes[previous_id].parent_id == node_id
        ):
            return
        for ancestor_id in self.iter_ancestors(node_id):
            self._root_id = ancestor_id

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert(
        self,
        action: UndoAction,
        is_checkpoint: bool = False,
        checkpoint_name: str | None = None,
    ) -> UndoNode:
        """Insert *action* as the newest child of the current node.

        When the tree is empty, or the position is before the root, the node
        becomes a new root.  The current position advances to the new node.

        Raises
        ------
        DuplicateActionError:
            When ``action.action_id`` is already present.
        """
        if action.action_id in self._nodes:
            raise DuplicateActionError(action.action_id)

        self._sequence += 1
        node = UndoNode(
            node_id=action.action_id,
            action=action,
            parent_id=self._current_id,
            is_checkpoint=is_checkpoint,
            checkpoint_name=checkpoint_name,
            sequence=self._sequence,
        )
        if self._current_id is not None:
            self._nodes[self._current_id].children.append(node.node_id)
        elif self._root_id is not None:
            logger.debug(
                "Inserting %s before root; previous tree rooted at %s kept as a detached branch",
                node.node_id,
                self._root_id,
            )

        self._nodes[node.node_id] = node
        self._current_id = node.node_id
        if node.parent_id is None:
            self._root_id = node.node_id
        return node

    def remove(self, node_id: str) -> UndoNode:
        """Delete *node_id* and detach it from its parent's child list.

        The caller is responsible for only removing leaves; children of a
        removed node would otherwise be left without a parent.
        """
        node = self._nodes.pop(node_id)
        if node.parent_id is not None:
            parent = self._nodes.get(node.parent_id)
            if parent is not None:
                parent.children = [c for c in parent.children if c != node_id]
        if self._current_id == node_id:
            self._current_id = node.parent_id
        if self._root_id == node_id:
            self._root_id = None
        return node

    def reset(self) -> None:
        """Drop every node and return to the empty initial state."""
        self._nodes = {}
        self._current_id = None
        self._root_id = None

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, node_id: str | None) -> UndoNode | None:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def __getitem__(self, node_id: str) -> UndoNode:
        return self._nodes[node_id]

    def iter_ancestors(self, node_id: str | None) -> Iterator[str]:
        """Yield *node_id* and then each ancestor id up to its root."""
        current = node_id
        while current is not None:
            node = self._nodes.get(current)
            if node is None:
                return
            yield current
            current = node.parent_id

    def nodes(self) -> list[UndoNode]:
        """All nodes in insertion order."""
        return list(self._nodes.values())

    def node_ids(self) -> list[str]:
        return list(self._nodes)

    def checkpoints(self) -> list[UndoNode]:
        return [n for n in self._nodes.values() if n.is_checkpoint]

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes


__all__ = [
    "HistoryTree",
    "UndoNode",
]
