"""Tests for branching_undo.persistence (stores, records, engine persistence)."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from branching_undo.errors import PersistenceError
from branching_undo.history.actions import UndoAction
from branching_undo.history.manager import UndoManager
from branching_undo.persistence.record import StructuralRecord
from branching_undo.persistence.session_store import (
    FileSessionStore,
    InMemorySessionStore,
    NullSessionStore,
    SessionStore,
    record_key,
)


def _noop_action(action_id: str) -> UndoAction:
    return UndoAction(apply=lambda: None, revert=lambda: None, action_id=action_id)


class BrokenStore(SessionStore):
    """Store whose every operation fails."""

    def read(self, key: str) -> bytes | None:
        raise PersistenceError("store unavailable", key=key)

    def write(self, key: str, data: bytes) -> None:
        raise PersistenceError("quota exceeded", key=key)

    def delete(self, key: str) -> bool:
        raise PersistenceError("store unavailable", key=key)

    def keys(self) -> list[str]:
        return []


# ---------------------------------------------------------------------------
# StructuralRecord
# ---------------------------------------------------------------------------


class TestStructuralRecord:
    def test_bytes_are_json(self) -> None:
        record = StructuralRecord(session_id="s1", current_id="a", root_id="a", node_ids=["a"])
        payload = json.loads(record.to_bytes())
        assert payload["session_id"] == "s1"
        assert payload["node_ids"] == ["a"]
        assert "saved_at" in payload

    def test_from_bytes_restores_fields(self) -> None:
        record = StructuralRecord(
            session_id="s1", current_id="b", root_id="a", node_ids=["a", "b"], checkpoint_ids=["b"]
        )
        restored = StructuralRecord.from_bytes(record.to_bytes())
        assert restored.current_id == "b"
        assert restored.checkpoint_ids == ["b"]
        assert restored.node_count == 2

    def test_from_bytes_malformed_raises(self) -> None:
        with pytest.raises(PersistenceError):
            StructuralRecord.from_bytes(b"{not json")

    def test_from_bytes_missing_session_raises(self) -> None:
        with pytest.raises(PersistenceError):
            StructuralRecord.from_bytes(b'{"node_ids": []}')


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class TestInMemorySessionStore:
    def test_write_read_delete(self) -> None:
        store = InMemorySessionStore()
        store.write("k", b"data")
        assert store.read("k") == b"data"
        assert store.keys() == ["k"]
        assert store.delete("k") is True
        assert store.read("k") is None
        assert store.delete("k") is False


class TestFileSessionStore:
    def test_write_creates_json_file(self, tmp_path: Path) -> None:
        store = FileSessionStore(tmp_path / "sessions")
        store.write("branching-undo-s1", b"{}")
        assert (tmp_path / "sessions" / "branching-undo-s1.json").read_bytes() == b"{}"

    def test_read_missing_returns_none(self, tmp_path: Path) -> None:
        assert FileSessionStore(tmp_path).read("absent") is None

    def test_keys_sorted(self, tmp_path: Path) -> None:
        store = FileSessionStore(tmp_path)
        store.write("b", b"{}")
        store.write("a", b"{}")
        assert store.keys() == ["a", "b"]

    def test_keys_on_missing_directory(self, tmp_path: Path) -> None:
        assert FileSessionStore(tmp_path / "nope").keys() == []

    def test_delete(self, tmp_path: Path) -> None:
        store = FileSessionStore(tmp_path)
        store.write("a", b"{}")
        assert store.delete("a") is True
        assert store.delete("a") is False

    def test_unsafe_key_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(PersistenceError):
            FileSessionStore(tmp_path).write("../escape", b"{}")


class TestNullSessionStore:
    def test_discards_everything(self) -> None:
        store = NullSessionStore()
        store.write("k", b"data")
        assert store.read("k") is None
        assert store.keys() == []


def test_record_key() -> None:
    assert record_key("branching-undo", "abc") == "branching-undo-abc"


# ---------------------------------------------------------------------------
# Engine persistence
# ---------------------------------------------------------------------------


class TestManagerPersistence:
    def test_mutation_writes_record(self) -> None:
        store = InMemorySessionStore()
        manager = UndoManager(store=store, session_id="s1")
        manager.push(_noop_action("a1"))
        manager.push(_noop_action("a2"))
        manager.undo()

        record = StructuralRecord.from_bytes(store.read("branching-undo-s1"))
        assert record.session_id == "s1"
        assert record.current_id == "a1"
        assert record.root_id == "a1"
        assert record.node_ids == ["a1", "a2"]

    def test_record_lists_checkpoints(self) -> None:
        store = InMemorySessionStore()
        manager = UndoManager(store=store, session_id="s1")
        cp = manager.create_checkpoint("X")
        record = StructuralRecord.from_bytes(store.read("branching-undo-s1"))
        assert record.checkpoint_ids == [cp]

    def test_custom_key_prefix(self) -> None:
        store = InMemorySessionStore()
        manager = UndoManager(store=store, session_id="s1", key_prefix="editor")
        manager.push(_noop_action("a1"))
        assert store.keys() == ["editor-s1"]

    def test_prior_record_read_on_construction(self, caplog: pytest.LogCaptureFixture) -> None:
        store = InMemorySessionStore()
        first = UndoManager(store=store, session_id="s1")
        first.push(_noop_action("a1"))

        with caplog.at_level(logging.INFO, logger="branching_undo.history.manager"):
            second = UndoManager(store=store, session_id="s1")

        assert second.previous_record is not None
        assert second.previous_record.node_ids == ["a1"]
        # Structure is only diagnostic; nothing is replayable.
        assert second.node_count == 0
        assert second.can_undo() is False
        assert "cannot be replayed" in caplog.text

    def test_fresh_session_has_no_prior_record(self) -> None:
        manager = UndoManager(store=InMemorySessionStore())
        assert manager.previous_record is None
        assert manager.session_id.startswith("session-")

    def test_unreadable_prior_record_is_ignored(self) -> None:
        store = InMemorySessionStore()
        store.write("branching-undo-s1", b"garbage")
        manager = UndoManager(store=store, session_id="s1")
        assert manager.previous_record is None

    def test_store_failures_are_not_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        manager = UndoManager(store=BrokenStore(), session_id="s1")
        with caplog.at_level(logging.WARNING, logger="branching_undo.history.manager"):
            manager.push(_noop_action("a1"))
            assert manager.undo() is True
        assert manager.persist() is False
        assert "quota exceeded" in caplog.text

    def test_file_store_persistence(self, tmp_path: Path) -> None:
        manager = UndoManager(store=FileSessionStore(tmp_path), session_id="disk")
        manager.push(_noop_action("a1"))
        data = (tmp_path / "branching-undo-disk.json").read_bytes()
        assert StructuralRecord.from_bytes(data).current_id == "a1"
