"""Tests for branching_undo.events (listener fan-out and shortcut triggers)."""
from __future__ import annotations

import logging

import pytest

from branching_undo.events.notifier import HistoryNotifier, HistorySnapshot
from branching_undo.events.triggers import REDO_REQUESTED, UNDO_REQUESTED, ShortcutTriggers
from branching_undo.history.actions import UndoAction
from branching_undo.history.manager import UndoManager
from branching_undo.persistence.session_store import NullSessionStore


def _noop_action(action_id: str, description: str = "") -> UndoAction:
    return UndoAction(
        apply=lambda: None, revert=lambda: None, action_id=action_id, description=description
    )


@pytest.fixture()
def manager() -> UndoManager:
    return UndoManager(store=NullSessionStore())


# ---------------------------------------------------------------------------
# HistoryNotifier
# ---------------------------------------------------------------------------


class TestHistoryNotifier:
    def test_subscribe_and_notify(self) -> None:
        notifier = HistoryNotifier()
        received: list[HistorySnapshot] = []
        notifier.subscribe(received.append)
        snap = HistorySnapshot(can_undo=False, can_redo=False, history=())
        notifier.notify(snap)
        assert received == [snap]

    def test_unsubscribe(self) -> None:
        notifier = HistoryNotifier()
        received: list[HistorySnapshot] = []
        unsubscribe = notifier.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        notifier.notify(HistorySnapshot(can_undo=False, can_redo=False, history=()))
        assert received == []
        assert len(notifier) == 0

    def test_failing_listener_does_not_block_others(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        notifier = HistoryNotifier()
        received: list[HistorySnapshot] = []

        def broken(_: HistorySnapshot) -> None:
            raise RuntimeError("listener bug")

        notifier.subscribe(broken)
        notifier.subscribe(received.append)
        with caplog.at_level(logging.ERROR, logger="branching_undo.events.notifier"):
            notifier.notify(HistorySnapshot(can_undo=True, can_redo=False, history=()))
        assert len(received) == 1
        assert "listener" in caplog.text

    def test_listener_may_unsubscribe_during_notify(self) -> None:
        notifier = HistoryNotifier()
        calls: list[str] = []
        unsubscribe_holder: list = []

        def once(_: HistorySnapshot) -> None:
            calls.append("once")
            unsubscribe_holder[0]()

        unsubscribe_holder.append(notifier.subscribe(once))
        notifier.subscribe(lambda _: calls.append("other"))
        snap = HistorySnapshot(can_undo=False, can_redo=False, history=())
        notifier.notify(snap)
        notifier.notify(snap)
        assert calls == ["once", "other", "other"]


# ---------------------------------------------------------------------------
# Snapshots from the manager
# ---------------------------------------------------------------------------


class TestManagerNotifications:
    def test_push_notifies_with_snapshot(self, manager: UndoManager) -> None:
        received: list[HistorySnapshot] = []
        manager.subscribe(received.append)
        manager.push(_noop_action("a1"))
        assert len(received) == 1
        snap = received[0]
        assert snap.can_undo is True
        assert snap.can_redo is False
        assert [n.node_id for n in snap.history] == ["a1"]

    def test_every_mutation_notifies_once(self, manager: UndoManager) -> None:
        received: list[HistorySnapshot] = []
        manager.subscribe(received.append)
        manager.push(_noop_action("a1"))
        cp = manager.create_checkpoint("X")
        manager.push(_noop_action("a2"))
        manager.undo()
        manager.redo()
        manager.restore_to_checkpoint(cp)
        manager.clear()
        assert len(received) == 7

    def test_noop_operations_do_not_notify(self, manager: UndoManager) -> None:
        received: list[HistorySnapshot] = []
        manager.subscribe(received.append)
        manager.undo()
        manager.redo()
        manager.restore_to_checkpoint("missing")
        manager.start_group()
        manager.push(_noop_action("buffered"))
        assert received == []

    def test_snapshot_history_is_most_recent_first(self, manager: UndoManager) -> None:
        manager.push(_noop_action("a1"))
        manager.push(_noop_action("a2"))
        received: list[HistorySnapshot] = []
        manager.subscribe(received.append)
        manager.undo()
        snap = received[-1]
        assert [n.node_id for n in snap.history] == ["a1"]
        assert snap.can_redo is True
        assert snap.current.node_id == "a1"

    def test_snapshot_to_dict(self, manager: UndoManager) -> None:
        manager.push(_noop_action("a1", description="add rect"))
        data = manager.snapshot().to_dict()
        assert data["can_undo"] is True
        assert data["history"] == [
            {
                "node_id": "a1",
                "description": "add rect",
                "action_type": "edit",
                "is_checkpoint": False,
                "checkpoint_name": None,
            }
        ]

    def test_listener_sees_updated_state(self, manager: UndoManager) -> None:
        observed: list[bool] = []
        manager.subscribe(lambda _: observed.append(manager.can_undo()))
        manager.push(_noop_action("a1"))
        manager.undo()
        assert observed == [True, False]


# ---------------------------------------------------------------------------
# ShortcutTriggers
# ---------------------------------------------------------------------------


class TestShortcutTriggers:
    def test_default_signals(self) -> None:
        assert ShortcutTriggers().signals == (UNDO_REQUESTED, REDO_REQUESTED)

    def test_connect_and_emit(self) -> None:
        triggers = ShortcutTriggers()
        calls: list[str] = []
        triggers.connect(UNDO_REQUESTED, lambda: calls.append("undo"))
        assert triggers.emit(UNDO_REQUESTED) == 1
        assert triggers.emit(REDO_REQUESTED) == 0
        assert calls == ["undo"]

    def test_disconnect(self) -> None:
        triggers = ShortcutTriggers()
        disconnect = triggers.connect(UNDO_REQUESTED, lambda: None)
        disconnect()
        assert triggers.handler_count(UNDO_REQUESTED) == 0

    def test_unknown_signal_rejected(self) -> None:
        triggers = ShortcutTriggers()
        with pytest.raises(ValueError, match="Unknown shortcut signal"):
            triggers.connect("paste_requested", lambda: None)
        with pytest.raises(ValueError):
            triggers.emit("paste_requested")

    def test_manager_responds_to_signals(self) -> None:
        triggers = ShortcutTriggers()
        manager = UndoManager(store=NullSessionStore(), triggers=triggers)
        doc = {"x": 0}
        doc["x"] = 1
        manager.push(
            UndoAction(apply=lambda: doc.update(x=1), revert=lambda: doc.update(x=0))
        )

        triggers.emit(UNDO_REQUESTED)
        assert doc["x"] == 0
        triggers.emit(REDO_REQUESTED)
        assert doc["x"] == 1

    def test_close_disconnects_manager(self) -> None:
        triggers = ShortcutTriggers()
        manager = UndoManager(store=NullSessionStore(), triggers=triggers)
        manager.push(_noop_action("a1"))
        manager.close()
        triggers.emit(UNDO_REQUESTED)
        assert manager.current_id == "a1"
        assert triggers.handler_count(UNDO_REQUESTED) == 0
