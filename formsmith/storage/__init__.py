"""Schema store adapters."""

from __future__ import annotations

from typing import Optional

from ..core.config import FormConfig
from .base import SchemaStore, find_schema
from .memory import InMemorySchemaStore
from .sqlite import SQLiteSchemaStore


def create_store(config: Optional[FormConfig] = None) -> SchemaStore:
    """Build the store named by *config* (SQLite when ``store_path`` is set)."""
    config = config or FormConfig()
    if config.store_path:
        return SQLiteSchemaStore(path=config.store_path, key=config.store_key)
    return InMemorySchemaStore(key=config.store_key)


__all__ = [
    "SchemaStore",
    "InMemorySchemaStore",
    "SQLiteSchemaStore",
    "create_store",
    "find_schema",
]
