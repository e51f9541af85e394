"""Execution history backends.

Provides multiple implementations behind a common interface:
    - HistoryStore: Abstract interface
    - HistoryManager: JSON files, one per workflow (reference format)
    - SqliteHistoryStore: SQLite-backed storage
    - InMemoryHistoryStore: In-memory storage for testing

Design: Adapter Pattern + Dependency Inversion
    The executor depends on HistoryStore, not on a concrete backend.
"""

from cortex.storage.base import (
    CorruptHistoryError,
    ExecutionNotFoundError,
    HistoryNotFoundError,
    HistoryStore,
    StorageError,
)

# Backends are imported lazily


def __getattr__(name: str):
    """Lazy import storage implementations."""
    if name == "HistoryManager":
        from cortex.storage.json_file import HistoryManager

        return HistoryManager
    elif name == "default_history_dir":
        from cortex.storage.json_file import default_history_dir

        return default_history_dir
    elif name == "InMemoryHistoryStore":
        from cortex.storage.memory import InMemoryHistoryStore

        return InMemoryHistoryStore
    elif name == "SqliteHistoryStore":
        from cortex.storage.sqlite import SqliteHistoryStore

        return SqliteHistoryStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "HistoryStore",
    "StorageError",
    "HistoryNotFoundError",
    "ExecutionNotFoundError",
    "CorruptHistoryError",
    "HistoryManager",
    "default_history_dir",
    "InMemoryHistoryStore",
    "SqliteHistoryStore",
]
