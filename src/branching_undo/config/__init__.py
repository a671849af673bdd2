"""Configuration package for branching-undo.

Exports the YAML configuration loader and its Pydantic schema.
"""
from __future__ import annotations

from branching_undo.config.config_loader import (
    ConfigLoader,
    HistoryConfig,
    PersistenceConfig,
    UndoConfig,
)

__all__ = [
    "ConfigLoader",
    "HistoryConfig",
    "PersistenceConfig",
    "UndoConfig",
]
