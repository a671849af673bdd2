"""Best-effort structural persistence for history trees."""
from __future__ import annotations

from branching_undo.persistence.record import StructuralRecord
from branching_undo.persistence.session_store import (
    FileSessionStore,
    InMemorySessionStore,
    NullSessionStore,
    SessionStore,
    record_key,
)

__all__ = [
    "FileSessionStore",
    "InMemorySessionStore",
    "NullSessionStore",
    "SessionStore",
    "StructuralRecord",
    "record_key",
]
