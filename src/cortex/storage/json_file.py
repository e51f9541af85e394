"""JSON-file history store.

Design Pattern: Adapter Pattern
HistoryManager adapts a directory of JSON documents to the HistoryStore
interface. This is the reference on-disk format: one JSON array per
workflow at ``<base_dir>/<name>.json``, pretty-printed with 2-space
indentation.

Implementation details:
- Blocking file IO runs in a worker thread (asyncio.to_thread)
- Writes go to a temp file in the same directory, then os.replace()
- Read-modify-write is serialized by a per-instance asyncio.Lock; readers
  skip it, since os.replace() means they only ever see a complete file
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import tempfile
from pathlib import Path

import xxhash

from cortex.models import ExecutionRecord
from cortex.storage.base import CorruptHistoryError, HistoryStore, StorageError, check_name

logger = logging.getLogger(__name__)

HISTORY_DIR_ENV = "CORTEX_HISTORY_DIR"

_SAFE_NAME = re.compile(r"[A-Za-z0-9._-]+")
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def default_history_dir() -> Path:
    """Default history location: $CORTEX_HISTORY_DIR, else ~/.cortex/history."""
    configured = os.environ.get(HISTORY_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cortex" / "history"


def history_filename(synapse_name: str) -> str:
    """Map a workflow name to its history file name.

    Plain names map to ``<name>.json``. Anything that could escape the
    history directory or collide with hidden files is slugged and suffixed
    with an xxh64 digest of the full name, e.g.
    ``"ops/restart nginx"`` -> ``"ops_restart_nginx-3f1c...json"``.
    """
    if _SAFE_NAME.fullmatch(synapse_name) and not synapse_name.startswith("."):
        return f"{synapse_name}.json"

    slug = _UNSAFE_CHARS.sub("_", synapse_name).strip("._") or "synapse"
    digest = xxhash.xxh64(synapse_name.encode("utf-8")).hexdigest()
    return f"{slug}-{digest}.json"


class HistoryManager(HistoryStore):
    """Durable history kept as JSON files.

    The directory is created on first write, so a fresh manager over a
    missing directory simply reports empty histories.

    Usage:
        history = HistoryManager.default()
        await history.add_execution("health-check", record)
        record = await history.get_execution_logs("health-check", record.id)
    """

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)
        self._lock = asyncio.Lock()

    @classmethod
    def default(cls) -> HistoryManager:
        """Create a manager over default_history_dir()."""
        return cls(default_history_dir())

    def __repr__(self) -> str:
        return f"HistoryManager({self.base_dir})"

    def path_for(self, synapse_name: str) -> Path:
        return self.base_dir / history_filename(synapse_name)

    async def add_execution(self, synapse_name: str, record: ExecutionRecord) -> None:
        check_name(synapse_name)
        path = self.path_for(synapse_name)
        async with self._lock:
            records = await asyncio.to_thread(self._read, path)
            records.append(record.to_dict())
            await asyncio.to_thread(self._write, path, records)
        logger.debug(f"Appended execution {record.id} to {path} ({len(records)} records)")

    async def get_history(self, synapse_name: str) -> list[ExecutionRecord]:
        path = self.path_for(synapse_name)
        raw = await asyncio.to_thread(self._read, path)

        try:
            return [ExecutionRecord.from_dict(item) for item in raw]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise CorruptHistoryError(f"malformed execution record in {path}: {e}") from e

    async def reset(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._remove_all)

    def _read(self, path: Path) -> list[dict]:
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"unable to read history file {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise CorruptHistoryError(f"history file {path} is not valid UTF-8: {e}") from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise CorruptHistoryError(f"unable to parse history file {path}: {e}") from e

        if not isinstance(data, list):
            raise CorruptHistoryError(f"history file {path} does not contain a JSON array")
        return data

    def _write(self, path: Path, records: list[dict]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(records, fh, indent=2, ensure_ascii=False)
                    fh.write("\n")
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"unable to write history file {path}: {e}") from e

    def _remove_all(self) -> None:
        if not self.base_dir.is_dir():
            return
        for path in self.base_dir.glob("*.json"):
            path.unlink(missing_ok=True)
