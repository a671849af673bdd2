"""Exception hierarchy for branching-undo.

Caller-supplied ``apply`` / ``revert`` callbacks are never wrapped: their
exceptions reach the caller of the engine unchanged.  The classes below
cover the engine's own failure modes.
"""
from __future__ import annotations


class UndoEngineError(Exception):
    """Base class for all errors raised by the undo engine."""


class DuplicateActionError(UndoEngineError, ValueError):
    """Raised when an action is pushed with an id already present in the tree.

    Attributes
    ----------
    action_id:
        The id that collided with an existing node.
    """

    def __init__(self, action_id: str) -> None:
        self.action_id = action_id
        super().__init__(f"Action '{action_id}' is already recorded in the history tree")


class PersistenceError(UndoEngineError):
    """Raised by session stores and record codecs.

    The engine catches this (and any other store failure) and logs it;
    persistence is a diagnostic aid, never a functional requirement.

    Attributes
    ----------
    key:
        The store key involved, when known.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        super().__init__(message)


__all__ = [
    "DuplicateActionError",
    "PersistenceError",
    "UndoEngineError",
]
