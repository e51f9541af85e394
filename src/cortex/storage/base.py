"""
HistoryStore - abstract interface for execution history backends.

Design Pattern: Adapter Pattern
HistoryStore defines the target interface; JSON files, SQLite and plain
dictionaries adapt to it.

From Dave Cheney's Practical Go:
"Let functions define the behavior they require" - the executor only needs
add_execution(), so any backend (or None) can be plugged in.

Contract shared by all backends:
- History is append-only, one ordered list per workflow name
- Concurrent writers to one store instance are serialized, never lost
- get_history() returns an empty list for an unknown workflow
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cortex.core.errors import CortexError, EmptyNameError
from cortex.models import ExecutionRecord


class StorageError(CortexError):
    """
    Storage operation failed.

    From Dave Cheney: "Errors are values"
    """


class HistoryNotFoundError(StorageError):
    """The workflow has no recorded executions."""

    def __init__(self, synapse_name: str):
        super().__init__(f"no execution history found for synapse: {synapse_name}")
        self.synapse_name = synapse_name


class ExecutionNotFoundError(StorageError):
    """The workflow has history but no execution with the requested ID."""

    def __init__(self, synapse_name: str, execution_id: str):
        super().__init__(f"execution {execution_id} not found in history of {synapse_name}")
        self.synapse_name = synapse_name
        self.execution_id = execution_id


class CorruptHistoryError(StorageError):
    """Persisted history could not be decoded."""


def check_name(synapse_name: str) -> None:
    """Reject blank workflow names before touching storage."""
    if not synapse_name or not synapse_name.strip():
        raise EmptyNameError("synapse name cannot be empty")


class HistoryStore(ABC):
    """
    Abstract storage interface for execution history.

    Usage:
        store = HistoryManager("/var/lib/cortex/history")
        await store.add_execution("health-check", record)
        records = await store.get_history("health-check")
    """

    @abstractmethod
    async def add_execution(self, synapse_name: str, record: ExecutionRecord) -> None:
        """
        Append a finalized record to the workflow's history.

        Raises:
            EmptyNameError: If synapse_name is blank
            StorageError: If the record could not be persisted
        """
        ...

    @abstractmethod
    async def get_history(self, synapse_name: str) -> list[ExecutionRecord]:
        """
        Return all records for a workflow in insertion order.

        Returns an empty list when the workflow has never run.

        Raises:
            CorruptHistoryError: If stored history cannot be decoded
        """
        ...

    async def get_execution_logs(self, synapse_name: str, execution_id: str) -> ExecutionRecord:
        """
        Look up a single execution by ID.

        Raises:
            HistoryNotFoundError: The workflow has no records at all
            ExecutionNotFoundError: Records exist but none has this ID
        """
        records = await self.get_history(synapse_name)
        if not records:
            raise HistoryNotFoundError(synapse_name)

        for record in records:
            if record.id == execution_id:
                return record

        raise ExecutionNotFoundError(synapse_name, execution_id)

    @abstractmethod
    async def reset(self) -> None:
        """Delete all history held by this store (testing only)."""
        ...

    async def close(self) -> None:
        """Release resources. Default is a no-op."""
        return None


__all__ = [
    "HistoryStore",
    "StorageError",
    "HistoryNotFoundError",
    "ExecutionNotFoundError",
    "CorruptHistoryError",
    "check_name",
]
