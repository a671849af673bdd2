"""Listener fan-out for history changes.

Every state-changing engine operation ends by building a fresh
:class:`HistorySnapshot` and handing it to :meth:`HistoryNotifier.notify`,
which calls each subscriber exactly once, synchronously.

Example
-------
>>> notifier = HistoryNotifier()
>>> unsubscribe = notifier.subscribe(lambda snap: print(snap.can_undo))
>>> unsubscribe()
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from branching_undo.history.tree import UndoNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistorySnapshot:
    """What a UI needs to redraw after a history change.

    Attributes
    ----------
    can_undo:
        Whether an undo is currently possible.
    can_redo:
        Whether a redo is currently possible.
    history:
        The active path, current node first and root last.
    """

    can_undo: bool
    can_redo: bool
    history: tuple[UndoNode, ...]

    @property
    def current(self) -> UndoNode | None:
        return self.history[0] if self.history else None

    def to_dict(self) -> dict[str, object]:
        """JSON-friendly view for UI bridges (no callables)."""
        return {
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
            "history": [
                {
                    "node_id": node.node_id,
                    "description": node.description,
                    "action_type": node.action.action_type,
                    "is_checkpoint": node.is_checkpoint,
                    "checkpoint_name": node.checkpoint_name,
                }
                for node in self.history
            ],
        }


HistoryListener = Callable[[HistorySnapshot], None]


class HistoryNotifier:
    """Registry of history listeners."""

    def __init__(self) -> None:
        self._listeners: list[HistoryListener] = []

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        """Register *listener* and return a function that removes it.

        Calling the returned function more than once is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, snapshot: HistorySnapshot) -> None:
        """Call every listener with *snapshot*.

        A listener that raises is logged and skipped; the remaining
        listeners still run.
        """
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("History listener %r failed", listener)

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)


__all__ = [
    "HistoryListener",
    "HistoryNotifier",
    "HistorySnapshot",
]
