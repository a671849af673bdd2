"""Branching undo/redo engine.

:class:`UndoManager` records reversible edits as a tree.  Undoing and then
making a new edit does not throw the undone work away: the old future stays
as a sibling branch, reachable through checkpoints or
:meth:`UndoManager.restore_to_node`.

The manager is single-threaded and non-reentrant.  Every public operation,
including listener notification, runs to completion before returning.

Example
-------
::

    manager = UndoManager()
    doc = {"x": 0}
    manager.push(UndoAction(apply=lambda: doc.update(x=1),
                            revert=lambda: doc.update(x=0),
                            description="move"))
    manager.undo()   # doc == {"x": 0}
    manager.redo()   # doc == {"x": 1}
"""
from __future__ import annotations

import contextlib
import logging
import uuid
from typing import TYPE_CHECKING, Callable, Iterator

from branching_undo.errors import PersistenceError
from branching_undo.events.notifier import HistoryListener, HistoryNotifier, HistorySnapshot
from branching_undo.events.triggers import REDO_REQUESTED, UNDO_REQUESTED, ShortcutTriggers
from branching_undo.history import navigator
from branching_undo.history.actions import UndoAction, checkpoint_action
from branching_undo.history.grouping import GroupBuffer
from branching_undo.history.navigator import StepDirection
from branching_undo.history.pruning import DEFAULT_MAX_NODES, PruningPolicy
from branching_undo.history.tree import HistoryTree, UndoNode
from branching_undo.persistence.record import StructuralRecord
from branching_undo.persistence.session_store import (
    InMemorySessionStore,
    SessionStore,
    is_safe_key,
    record_key,
)

if TYPE_CHECKING:
    from branching_undo.config.config_loader import UndoConfig

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "branching-undo"


class UndoManager:
    """Tree-structured undo/redo history for one editor session.

    Parameters
    ----------
    max_nodes:
        Pruning ceiling (default: 100).  The active path and checkpoints
        are kept even when they alone exceed it.
    store:
        Session store for structural records.  Defaults to a fresh
        :class:`InMemorySessionStore`; pass a
        :class:`~branching_undo.persistence.session_store.NullSessionStore`
        to disable persistence.
    session_id:
        Identifier used to key the structural record.  Generated when not
        supplied.  Letters, digits, "-", "_" and "." only.
    key_prefix:
        Prefix of the store key (default: ``"branching-undo"``).
    triggers:
        Optional shortcut signal handle.  ``undo_requested`` and
        ``redo_requested`` are connected to :meth:`undo` and :meth:`redo`.

    Raises
    ------
    ValueError:
        When *session_id* contains characters a store key cannot hold.
    """

    def __init__(
        self,
        max_nodes: int = DEFAULT_MAX_NODES,
        store: SessionStore | None = None,
        session_id: str | None = None,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        triggers: ShortcutTriggers | None = None,
    ) -> None:
        if session_id is not None and not is_safe_key(session_id):
            raise ValueError(
                f"session_id '{session_id}' must be non-empty and use only letters, digits, '-', '_' or '.'"
            )
        self._tree = HistoryTree()
        self._pruning = PruningPolicy(max_nodes)
        self._group = GroupBuffer()
        self._notifier = HistoryNotifier()
        self._store: SessionStore = store if store is not None else InMemorySessionStore()
        self._session_id: str = session_id or f"session-{uuid.uuid4().hex[:12]}"
        self._store_key = record_key(key_prefix, self._session_id)
        self._disconnects: list[Callable[[], None]] = []

        self._previous_record = self._read_previous_record()

        if triggers is not None:
            self._disconnects.append(triggers.connect(UNDO_REQUESTED, self.undo))
            self._disconnects.append(triggers.connect(REDO_REQUESTED, self.redo))

    @classmethod
    def from_config(
        cls,
        config: "UndoConfig",
        triggers: ShortcutTriggers | None = None,
    ) -> UndoManager:
        """Build a manager from a validated :class:`UndoConfig`."""
        return cls(
            max_nodes=config.history.max_nodes,
            store=config.persistence.build_store(),
            session_id=config.session_id,
            key_prefix=config.persistence.key_prefix,
            triggers=triggers,
        )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def push(self, action: UndoAction) -> str | None:
        """Record *action*, which the caller has already performed.

        Returns
        -------
        str | None
            The new node id, or ``None`` when the action was buffered by an
            open group.

        Raises
        ------
        DuplicateActionError:
            When an action with the same id is already in the tree.
        """
        if self._group.is_active:
            self._group.add(action)
            return None
        return self._insert(action)

    def _insert(
        self,
        action: UndoAction,
        is_checkpoint: bool = False,
        checkpoint_name: str | None = None,
    ) -> str:
        node = self._tree.insert(action, is_checkpoint, checkpoint_name)
        try:
            self._pruning.prune(self._tree)
        finally:
            self._after_change()
        return node.node_id

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        """Revert the current node and step to its parent.

        Returns
        -------
        bool
            False when there is nothing to undo.
        """
        current = self._tree.current
        if current is None:
            logger.debug("Nothing to undo")
            return False

        current.action.revert()
        self._tree.move_to(current.parent_id)
        logger.debug("Undid %s (%s)", current.node_id, current.description)
        self._after_change()
        return True

    def redo(self) -> bool:
        """Re-apply the most recently created child of the current node.

        Returns
        -------
        bool
            False when there is nothing to redo.
        """
        target = self._tree.get(navigator.redo_target(self._tree))
        if target is None:
            logger.debug("Nothing to redo")
            return False

        target.action.apply()
        self._tree.move_to(target.node_id)
        logger.debug("Redid %s (%s)", target.node_id, target.description)
        self._after_change()
        return True

    def can_undo(self) -> bool:
        return navigator.can_undo(self._tree)

    def can_redo(self) -> bool:
        return navigator.can_redo(self._tree)

    # ------------------------------------------------------------------
    # Checkpoints
    # ------------------------------------------------------------------

    def create_checkpoint(self, name: str) -> str:
        """Insert a named, no-op checkpoint node; returns its id."""
        return self._insert(checkpoint_action(name), is_checkpoint=True, checkpoint_name=name)

    def restore_to_checkpoint(self, node_id: str) -> bool:
        """Move to the checkpoint *node_id*, across branches if needed.

        Returns
        -------
        bool
            False, without any change, when *node_id* is unknown or is not a
            checkpoint.
        """
        node = self._tree.get(node_id)
        if node is None or not node.is_checkpoint:
            logger.debug("Not a checkpoint: %s", node_id)
            return False
        return self._travel_to(node_id)

    def restore_to_checkpoint_named(self, name: str) -> bool:
        """Restore the most recently created checkpoint called *name*."""
        matches = [c for c in self._tree.checkpoints() if c.checkpoint_name == name]
        if not matches:
            return False
        return self._travel_to(max(matches, key=lambda c: c.sequence).node_id)

    def restore_to_node(self, node_id: str) -> bool:
        """Move to any node in the tree; False when *node_id* is unknown."""
        if node_id not in self._tree:
            return False
        return self._travel_to(node_id)

    def _travel_to(self, target_id: str) -> bool:
        """Run every revert, then every apply, on the path to *target_id*.

        The position advances step by step, so if a callback raises, the
        position is left at the last step that completed and the exception
        propagates.
        """
        steps = navigator.find_path(self._tree, self._tree.current_id, target_id)
        start_id = self._tree.current_id
        completed = False
        try:
            for step in steps:
                node = self._tree[step.node_id]
                if step.direction is StepDirection.UNDO:
                    node.action.revert()
                    self._tree.move_to(node.parent_id)
                else:
                    node.action.apply()
                    self._tree.move_to(node.node_id)
            completed = True
        finally:
            if completed or self._tree.current_id != start_id:
                self._after_change()
        logger.debug("Restored to %s in %d step(s)", target_id, len(steps))
        return True

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------

    def start_group(self) -> None:
        """Buffer subsequent pushes until :meth:`end_group`.

        Groups do not nest; calling this while a group is open discards the
        actions buffered so far.
        """
        self._group.start()

    def end_group(self, description: str) -> str | None:
        """Record the buffered actions as one node; returns its id.

        Returns ``None`` (and records nothing) when the buffer is empty or
        no group was open.
        """
        composite = self._group.end(description)
        if composite is None:
            return None
        return self._insert(composite)

    def cancel_group(self) -> int:
        """Close the open group without recording it; returns the count dropped."""
        return len(self._group.cancel())

    @property
    def is_grouping(self) -> bool:
        return self._group.is_active

    @contextlib.contextmanager
    def group(self, description: str) -> Iterator[None]:
        """Group the pushes made inside a ``with`` block.

        The group is recorded when the block exits normally and cancelled
        when it raises.
        """
        self.start_group()
        try:
            yield
        except BaseException:
            self.cancel_group()
            raise
        self.end_group(description)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_history(self) -> list[UndoNode]:
        """The active path, current node first and root last."""
        return [
            node
            for node in (self._tree.get(i) for i in navigator.active_path(self._tree))
            if node is not None
        ]

    def get_checkpoints(self) -> list[UndoNode]:
        """Every checkpoint in the tree, in creation order."""
        return self._tree.checkpoints()

    def get_node(self, node_id: str) -> UndoNode | None:
        return self._tree.get(node_id)

    def get_children(self, node_id: str) -> list[UndoNode]:
        node = self._tree.get(node_id)
        if node is None:
            return []
        return [child for child in (self._tree.get(c) for c in node.children) if child is not None]

    def list_branches(self) -> list[UndoNode]:
        """Tip (leaf) of every retained branch, oldest first."""
        return [node for node in self._tree.nodes() if node.is_leaf]

    def snapshot(self) -> HistorySnapshot:
        return HistorySnapshot(
            can_undo=self.can_undo(),
            can_redo=self.can_redo(),
            history=tuple(self.get_history()),
        )

    def stats(self) -> dict[str, object]:
        """Summary counters for diagnostics."""
        return {
            "node_count": len(self._tree),
            "checkpoint_count": len(self._tree.checkpoints()),
            "branch_count": len(self.list_branches()),
            "depth": len(navigator.active_path(self._tree)),
            "max_nodes": self._pruning.max_nodes,
        }

    @property
    def current_node(self) -> UndoNode | None:
        return self._tree.current

    @property
    def current_id(self) -> str | None:
        return self._tree.current_id

    @property
    def root_id(self) -> str | None:
        return self._tree.root_id

    @property
    def node_count(self) -> int:
        return len(self._tree)

    @property
    def max_nodes(self) -> int:
        return self._pruning.max_nodes

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def previous_record(self) -> StructuralRecord | None:
        """Structural record found in the store at construction, if any."""
        return self._previous_record

    def __len__(self) -> int:
        return len(self._tree)

    # ------------------------------------------------------------------
    # Subscription / lifecycle
    # ------------------------------------------------------------------

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        """Call *listener* after every history change; returns an unsubscriber."""
        return self._notifier.subscribe(listener)

    def clear(self) -> None:
        """Drop all history and return to the empty initial state."""
        self._tree.reset()
        self._after_change()

    def close(self) -> None:
        """Disconnect from shortcut triggers."""
        for disconnect in self._disconnects:
            disconnect()
        self._disconnects = []

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def structural_record(self) -> StructuralRecord:
        """Ids-only view of the tree, suitable for the session store."""
        return StructuralRecord(
            session_id=self._session_id,
            current_id=self._tree.current_id,
            root_id=self._tree.root_id,
            node_ids=self._tree.node_ids(),
            checkpoint_ids=[c.node_id for c in self._tree.checkpoints()],
        )

    def persist(self) -> bool:
        """Write the structural record to the session store.

        Failures are logged and reported as False, never raised.  Stores
        that keep nothing are skipped.
        """
        if not self._store.keeps_records:
            return True
        try:
            self._store.write(self._store_key, self.structural_record().to_bytes())
        except Exception as exc:
            logger.warning("Failed to persist undo history for %s: %s", self._session_id, exc)
            return False
        return True

    def _read_previous_record(self) -> StructuralRecord | None:
        try:
            data = self._store.read(self._store_key)
            if data is None:
                return None
            record = StructuralRecord.from_bytes(data)
        except PersistenceError as exc:
            logger.warning("Ignoring unreadable undo record %s: %s", self._store_key, exc)
            return None
        except Exception as exc:
            logger.warning("Failed to read undo record %s: %s", self._store_key, exc)
            return None
        logger.info(
            "Found undo record for %s with %d node(s); structure only, actions cannot be replayed",
            self._session_id,
            record.node_count,
        )
        return record

    def _after_change(self) -> None:
        self.persist()
        if len(self._notifier):
            self._notifier.notify(self.snapshot())


__all__ = ["UndoManager"]
