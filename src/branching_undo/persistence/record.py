"""Structural record of a history tree.

The record holds identifiers only.  ``apply``/``revert`` callables cannot be
serialised, so a record lets a reloaded session see that history existed
but never lets it replay that history.
"""
from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, ValidationError

from branching_undo.errors import PersistenceError


class StructuralRecord(BaseModel):
    """Ids-only snapshot of one session's history tree."""

    model_config = {"extra": "allow"}

    session_id: str
    current_id: str | None = Field(default=None)
    root_id: str | None = Field(default=None)
    node_ids: list[str] = Field(default_factory=list)
    checkpoint_ids: list[str] = Field(default_factory=list)
    saved_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def to_bytes(self) -> bytes:
        """Encode as UTF-8 JSON."""
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> StructuralRecord:
        """Decode bytes produced by :meth:`to_bytes`.

        Raises
        ------
        PersistenceError:
            When *data* is not a valid record.
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as exc:
            raise PersistenceError(f"Malformed structural record: {exc}") from exc

    @property
    def node_count(self) -> int:
        return len(self.node_ids)


__all__ = ["StructuralRecord"]
