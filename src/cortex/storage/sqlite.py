"""SQLite-backed history store.

Design Pattern: Adapter Pattern
SqliteHistoryStore adapts a SQLite database to the HistoryStore interface.

Implementation details:
- aiosqlite for async operations
- WAL mode for concurrent reads
- Each record stored as the same JSON document HistoryManager writes
- An AUTOINCREMENT sequence column fixes insertion order per workflow
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import aiosqlite

from cortex.models import ExecutionRecord
from cortex.storage.base import CorruptHistoryError, HistoryStore, StorageError, check_name

logger = logging.getLogger(__name__)


class SqliteHistoryStore(HistoryStore):
    """SQLite-backed durable history.

    After __init__, the instance is not yet usable. Call connect() first.

    Usage:
        store = SqliteHistoryStore("history.db")
        await store.connect()
        try:
            await store.add_execution("health-check", record)
        finally:
            await store.close()
    """

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()  # Serialize access to shared connection

    @classmethod
    async def in_memory(cls) -> SqliteHistoryStore:
        """
        Create a connected in-memory store for testing.

        Example:
            store = await SqliteHistoryStore.in_memory()
        """
        instance = cls(":memory:")
        await instance.connect()
        return instance

    def __repr__(self) -> str:
        if self.db_path == ":memory:":
            return "SqliteHistoryStore(in-memory)"
        return f"SqliteHistoryStore({self.db_path})"

    async def connect(self) -> None:
        """Open the database connection and create the schema.

        Calling connect() on an already-connected store is a no-op.
        """
        if self._connection is not None:
            return

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(
            self.db_path,
            timeout=5.0,
            isolation_level=None,
        )

        # In-memory databases report "memory" and don't support WAL
        cursor = await self._connection.execute("PRAGMA journal_mode=WAL")
        result = await cursor.fetchone()
        await cursor.close()
        if result:
            mode = result[0].upper()
            if mode not in ("WAL", "MEMORY"):
                raise StorageError(f"Failed to enable WAL mode, got: {result[0]}")

        await self._connection.execute("PRAGMA synchronous=NORMAL")
        await self._connection.execute("PRAGMA busy_timeout=5000")

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS execution_history (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                synapse_name TEXT NOT NULL,
                execution_id TEXT NOT NULL,
                status TEXT NOT NULL,
                record TEXT NOT NULL
            )
        """)
        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_execution_history_name
            ON execution_history(synapse_name, seq)
        """)
        await self._connection.commit()
        logger.debug(f"Connected history store at {self.db_path}")

    async def add_execution(self, synapse_name: str, record: ExecutionRecord) -> None:
        check_name(synapse_name)
        self._check_connected()

        async with self._lock:
            await self._connection.execute(
                """
                INSERT INTO execution_history (synapse_name, execution_id, status, record)
                VALUES (?, ?, ?, ?)
                """,
                (synapse_name, record.id, record.status.value, json.dumps(record.to_dict())),
            )
            await self._connection.commit()

    async def get_history(self, synapse_name: str) -> list[ExecutionRecord]:
        self._check_connected()

        async with self._lock:
            cursor = await self._connection.execute(
                "SELECT record FROM execution_history WHERE synapse_name = ? ORDER BY seq",
                (synapse_name,),
            )
            rows = await cursor.fetchall()
            await cursor.close()

        try:
            return [ExecutionRecord.from_dict(json.loads(row[0])) for row in rows]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise CorruptHistoryError(f"malformed execution record for {synapse_name}: {e}") from e

    async def reset(self) -> None:
        """Clear all history. After reset, the store is empty but functional."""
        self._check_connected()

        async with self._lock:
            await self._connection.execute("DELETE FROM execution_history")
            await self._connection.commit()

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    def _check_connected(self) -> None:
        if self._connection is None:
            raise StorageError("Not connected. Call connect() first.")
