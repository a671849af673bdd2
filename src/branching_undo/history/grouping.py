"""Batching of sequential actions into one undoable unit.

While a group is open, pushed actions are held in a buffer instead of
becoming tree nodes.  Closing the group folds the buffer into a single
composite :class:`UndoAction`.

Groups do not nest.  Opening a group while one is already open discards
the pending buffer; callers are expected to pair ``start``/``end`` calls.
"""
from __future__ import annotations

import logging
from typing import Sequence

from branching_undo.history.actions import GROUP_ACTION_TYPE, UndoAction

logger = logging.getLogger(__name__)


def composite_action(actions: Sequence[UndoAction], description: str) -> UndoAction:
    """Fold *actions* into one action.

    ``revert`` runs the member reverts newest first; ``apply`` runs the
    member applies in their original order.  The member actions are kept as
    the payload.
    """
    members = tuple(actions)

    def revert() -> None:
        for member in reversed(members):
            member.revert()

    def apply() -> None:
        for member in members:
            member.apply()

    return UndoAction(
        apply=apply,
        revert=revert,
        description=description,
        action_type=GROUP_ACTION_TYPE,
        payload=members,
    )


class GroupBuffer:
    """Holds actions pushed while a group is open."""

    def __init__(self) -> None:
        self._active = False
        self._pending: list[UndoAction] = []

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def pending(self) -> list[UndoAction]:
        return list(self._pending)

    def start(self) -> None:
        """Open a group, discarding anything buffered by an unclosed one."""
        if self._active and self._pending:
            logger.warning(
                "start_group() called while a group was open; discarding %d buffered action(s)",
                len(self._pending),
            )
        self._active = True
        self._pending = []

    def add(self, action: UndoAction) -> None:
        self._pending.append(action)

    def end(self, description: str) -> UndoAction | None:
        """Close the group.

        Returns
        -------
        UndoAction | None
            The composite action, or ``None`` when no group was open or the
            buffer was empty.
        """
        actions = self._pending
        was_active = self._active
        self._active = False
        self._pending = []
        if not was_active or not actions:
            return None
        return composite_action(actions, description)

    def cancel(self) -> list[UndoAction]:
        """Close the group without producing an action; returns the dropped actions."""
        dropped = self._pending
        self._active = False
        self._pending = []
        return dropped


__all__ = [
    "GroupBuffer",
    "composite_action",
]
