"""In-memory history store.

Design Pattern: Adapter Pattern
InMemoryHistoryStore adapts a plain dictionary to the HistoryStore interface.

Instance is immediately usable after __init__.
"""

from __future__ import annotations

import asyncio
import copy

from cortex.models import ExecutionRecord
from cortex.storage.base import HistoryStore, check_name


class InMemoryHistoryStore(HistoryStore):
    """In-memory history for tests and embedding.

    Can be substituted for HistoryManager without changing client code.

    Usage:
        store = InMemoryHistoryStore()
        executor = Executor(history=store)
    """

    def __init__(self):
        # {synapse_name: [ExecutionRecord, ...]}
        self._records: dict[str, list[ExecutionRecord]] = {}
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return "InMemoryHistoryStore"

    async def add_execution(self, synapse_name: str, record: ExecutionRecord) -> None:
        check_name(synapse_name)
        async with self._lock:
            # Snapshot so later mutation by the caller cannot rewrite history
            self._records.setdefault(synapse_name, []).append(copy.deepcopy(record))

    async def get_history(self, synapse_name: str) -> list[ExecutionRecord]:
        async with self._lock:
            return [copy.deepcopy(r) for r in self._records.get(synapse_name, [])]

    async def reset(self) -> None:
        async with self._lock:
            self._records.clear()
