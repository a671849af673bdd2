"""Reversible actions recorded by the history tree.

An :class:`UndoAction` is an opaque unit of caller work.  The engine never
inspects what ``apply`` or ``revert`` do; it only decides *when* to call them.

Example
-------
::

    doc = {"text": ""}

    def apply() -> None:
        doc["text"] = "hello"

    def revert() -> None:
        doc["text"] = ""

    action = UndoAction(apply=apply, revert=revert, description="type hello")
"""
from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass, field
from typing import Callable

ActionCallback = Callable[[], None]

CHECKPOINT_ACTION_TYPE = "checkpoint"
GROUP_ACTION_TYPE = "group"


def generate_action_id() -> str:
    """Return a fresh, process-unique action identifier."""
    return f"undo-{uuid.uuid4().hex[:16]}"


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _noop() -> None:
    return None


@dataclass(frozen=True)
class UndoAction:
    """Immutable, caller-supplied reversible edit.

    Attributes
    ----------
    apply:
        Re-performs the edit (called on redo).
    revert:
        Undoes the edit (called on undo).
    description:
        Human-readable label shown in history lists.
    action_type:
        Logical tag such as ``"move"`` or ``"text"``.
    action_id:
        Unique identifier; generated when not supplied.
    created_at:
        UTC timestamp of creation.  Pruning removes the oldest first.  A
        naive datetime is taken to be UTC.
    payload:
        Optional opaque data for the caller's own use.
    """

    apply: ActionCallback
    revert: ActionCallback
    description: str = ""
    action_type: str = "edit"
    action_id: str = field(default_factory=generate_action_id)
    created_at: datetime.datetime = field(default_factory=_utc_now)
    payload: object = None

    def __post_init__(self) -> None:
        if self.created_at.tzinfo is None:
            object.__setattr__(
                self, "created_at", self.created_at.replace(tzinfo=datetime.timezone.utc)
            )

    @property
    def is_checkpoint_marker(self) -> bool:
        """True for the no-op actions held by checkpoint nodes."""
        return self.action_type == CHECKPOINT_ACTION_TYPE


def checkpoint_action(name: str) -> UndoAction:
    """Build the no-op action stored in a checkpoint node."""
    return UndoAction(
        apply=_noop,
        revert=_noop,
        description=f"Checkpoint: {name}",
        action_type=CHECKPOINT_ACTION_TYPE,
    )


__all__ = [
    "ActionCallback",
    "CHECKPOINT_ACTION_TYPE",
    "GROUP_ACTION_TYPE",
    "UndoAction",
    "checkpoint_action",
    "generate_action_id",
]
