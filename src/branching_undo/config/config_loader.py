"""Undo engine configuration loader with Pydantic v2 validation.

Loads and validates an ``undo.yaml`` file into a typed :class:`UndoConfig`
object.  Unknown keys are allowed to support future schema additions
without breakage.

Example
-------
>>> loader = ConfigLoader()
>>> config = loader.load(Path("undo.yaml"))
>>> config.history.max_nodes
100
"""
from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from branching_undo.persistence.session_store import (
    FileSessionStore,
    InMemorySessionStore,
    NullSessionStore,
    SessionStore,
    is_safe_key,
)


class HistoryConfig(BaseModel):
    """Configuration for the history tree."""

    model_config = {"extra": "allow"}

    max_nodes: int = Field(default=100, ge=1)


class PersistenceConfig(BaseModel):
    """Configuration for structural session records."""

    model_config = {"extra": "allow"}

    enabled: bool = Field(default=True)
    backend: Literal["memory", "file", "none"] = Field(default="memory")
    directory: Path = Field(default=Path("./.undo_sessions"))
    key_prefix: str = Field(default="branching-undo")

    @field_validator("key_prefix")
    @classmethod
    def validate_key_prefix(cls, value: str) -> str:
        if not is_safe_key(value):
            raise ValueError(
                f"key_prefix '{value}' must be non-empty and use only letters, digits, '-', '_' or '.'"
            )
        return value

    def build_store(self) -> SessionStore:
        """Instantiate the configured session store."""
        if not self.enabled or self.backend == "none":
            return NullSessionStore()
        if self.backend == "file":
            return FileSessionStore(self.directory)
        return InMemorySessionStore()


class UndoConfig(BaseModel):
    """Top-level undo engine configuration schema.

    Loaded from ``undo.yaml``.  All sections are optional and fall back to
    sensible defaults.
    """

    model_config = {"extra": "allow"}

    version: str = Field(default="1")
    session_id: str | None = Field(default=None)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)

    @field_validator("session_id")
    @classmethod
    def validate_session_id(cls, value: str | None) -> str | None:
        if value is not None and not is_safe_key(value):
            raise ValueError(
                f"session_id '{value}' must be non-empty and use only letters, digits, '-', '_' or '.'"
            )
        return value


class ConfigLoader:
    """Loads and validates undo engine YAML configuration.

    Example
    -------
    >>> loader = ConfigLoader()
    >>> config = loader.load(Path("undo.yaml"))
    """

    def load(self, config_path: Path) -> UndoConfig:
        """Load and validate an undo engine YAML file.

        Parameters
        ----------
        config_path:
            Path to the ``undo.yaml`` file.

        Returns
        -------
        UndoConfig
            Validated configuration object.

        Raises
        ------
        FileNotFoundError:
            When the config file does not exist.
        ValueError:
            When the YAML content fails Pydantic validation.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Undo config not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            raw: dict[str, object] = yaml.safe_load(fh) or {}

        return UndoConfig.model_validate(raw)

    def load_string(self, yaml_content: str) -> UndoConfig:
        """Load and validate a YAML string directly."""
        raw: dict[str, object] = yaml.safe_load(yaml_content) or {}
        return UndoConfig.model_validate(raw)

    def defaults(self) -> UndoConfig:
        """Return a default configuration with all defaults applied."""
        return UndoConfig()


__all__ = [
    "ConfigLoader",
    "HistoryConfig",
    "PersistenceConfig",
    "UndoConfig",
]
