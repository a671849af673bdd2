"""Keyboard-shortcut signal handle.

The host's keybinding layer owns a :class:`ShortcutTriggers` instance and
passes it to :class:`~branching_undo.history.manager.UndoManager`.  The
manager connects its ``undo``/``redo`` to the two signals; the host emits
them when the user presses the bindings.

Example
-------
>>> triggers = ShortcutTriggers()
>>> manager = UndoManager(triggers=triggers)
>>> # in the host's key handler:
>>> triggers.emit(UNDO_REQUESTED)
"""
from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

UNDO_REQUESTED = "undo_requested"
REDO_REQUESTED = "redo_requested"

SignalHandler = Callable[[], object]


class ShortcutTriggers:
    """Named signals with synchronous handlers.

    Parameters
    ----------
    signals:
        Signal names this handle accepts.  Defaults to
        ``("undo_requested", "redo_requested")``.
    """

    def __init__(self, signals: tuple[str, ...] = (UNDO_REQUESTED, REDO_REQUESTED)) -> None:
        self._handlers: dict[str, list[SignalHandler]] = {name: [] for name in signals}

    @property
    def signals(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def connect(self, signal: str, handler: SignalHandler) -> Callable[[], None]:
        """Attach *handler* to *signal*; returns a disconnect function.

        Raises
        ------
        ValueError:
            When *signal* is not one of :attr:`signals`.
        """
        handlers = self._lookup(signal)
        handlers.append(handler)

        def disconnect() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return disconnect

    def emit(self, signal: str) -> int:
        """Run every handler attached to *signal*; returns how many ran."""
        handlers = list(self._lookup(signal))
        logger.debug("Shortcut signal %s -> %d handler(s)", signal, len(handlers))
        for handler in handlers:
            handler()
        return len(handlers)

    def handler_count(self, signal: str) -> int:
        return len(self._lookup(signal))

    def _lookup(self, signal: str) -> list[SignalHandler]:
        try:
            return self._handlers[signal]
        except KeyError:
            raise ValueError(
                f"Unknown shortcut signal '{signal}'. Valid: {sorted(self._handlers)}"
            ) from None


__all__ = [
    "REDO_REQUESTED",
    "SignalHandler",
    "ShortcutTriggers",
    "UNDO_REQUESTED",
]
