"""Per-session ephemeral stores for structural history records.

A store is a tiny key/value interface over bytes.  The engine writes a
:class:`~branching_undo.persistence.record.StructuralRecord` after each
mutation and reads one back on construction for diagnostics only.

Implementations
---------------
InMemorySessionStore : Process-local dict (the default).
FileSessionStore     : One ``<key>.json`` file per key in a directory.
NullSessionStore     : Discards writes; for pure unit tests of tree logic.
"""
from __future__ import annotations

import logging
import re
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from branching_undo.errors import PersistenceError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.\-]+$")


def is_safe_key(value: str) -> bool:
    """True when *value* can be used in a store key (letters, digits, "-", "_", ".")."""
    return bool(_SAFE_KEY.match(value))


def record_key(prefix: str, session_id: str) -> str:
    """Return the store key for *session_id*, e.g. ``branching-undo-abc``."""
    return f"{prefix}-{session_id}"


class SessionStore(ABC):
    """Abstract byte store keyed by string.

    ``keeps_records`` is False for stores that discard every write, so
    callers can skip building records for them.
    """

    keeps_records = True

    @abstractmethod
    def read(self, key: str) -> bytes | None:
        """Return the bytes stored under *key*, or ``None``."""

    @abstractmethod
    def write(self, key: str, data: bytes) -> None:
        """Store *data* under *key*, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove *key*; returns True when something was removed."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return all stored keys, sorted."""


class InMemorySessionStore(SessionStore):
    """Thread-safe dict-backed store that lives as long as the process."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def read(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def write(self, key: str, data: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(data)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class FileSessionStore(SessionStore):
    """Directory-backed store, one JSON file per key.

    Parameters
    ----------
    directory:
        Where record files are kept.  Created on first write.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def read(self, key: str) -> bytes | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise PersistenceError(f"Cannot read {path}: {exc}", key=key) from exc

    def write(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            tmp_path.replace(path)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {path}: {exc}", key=key) from exc

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def keys(self) -> list[str]:
        if not self._directory.is_dir():
            return []
        return sorted(p.stem for p in self._directory.glob("*.json"))

    def _path_for(self, key: str) -> Path:
        if not is_safe_key(key):
            raise PersistenceError(f"Unsafe session store key: {key!r}", key=key)
        return self._directory / f"{key}.json"


class NullSessionStore(SessionStore):
    """Store that keeps nothing."""

    keeps_records = False

    def read(self, key: str) -> bytes | None:
        return None

    def write(self, key: str, data: bytes) -> None:
        return None

    def delete(self, key: str) -> bool:
        return False

    def keys(self) -> list[str]:
        return []


__all__ = [
    "FileSessionStore",
    "InMemorySessionStore",
    "NullSessionStore",
    "SessionStore",
    "is_safe_key",
    "record_key",
]
