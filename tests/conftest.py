"""
Pytest configuration and fixtures for cortex tests.

Provides history store fixtures, a scripted neuron runner, and helpers that
lay out synapse directories on disk.
"""

import asyncio
import io
import stat
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest
import yaml

from cortex.models import ExecutionRecord, ExecutionStatus, NeuronResult, NeuronStatus
from cortex.neuron import Excitation
from cortex.storage import HistoryManager, InMemoryHistoryStore, SqliteHistoryStore


class FakeRunner:
    """Scripted stand-in for NeuronRunner.

    exit_codes maps a neuron name to either a fixed exit code or a list of
    codes consumed one per call (the last one repeats). Unlisted neurons
    exit 0. hooks maps a neuron name to a callable run at the start of each
    call.
    """

    def __init__(
        self,
        exit_codes: dict[str, int | list[int]] | None = None,
        delay: float = 0.0,
        hooks: dict[str, Callable[[], None]] | None = None,
    ):
        self.exit_codes = {
            name: list(codes) if isinstance(codes, list) else codes
            for name, codes in (exit_codes or {}).items()
        }
        self.delay = delay
        self.hooks = hooks or {}
        self.calls: list[str] = []
        self.finished: list[str] = []
        self.in_flight = 0
        self.peak = 0

    def _next_code(self, name: str) -> int:
        codes = self.exit_codes.get(name, 0)
        if isinstance(codes, list):
            return codes.pop(0) if len(codes) > 1 else codes[0]
        return codes

    async def excite(self, config_path: Path, out) -> Excitation:
        name = Path(config_path).stem
        self.calls.append(name)
        if name in self.hooks:
            self.hooks[name]()

        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1

        self.finished.append(name)
        return Excitation(exit_code=self._next_code(name), stdout=f"{name} ran\n")


class RecordingSleep:
    """Replacement for asyncio.sleep that records delays and returns at once."""

    def __init__(self, on_sleep: Callable[[float], None] | None = None):
        self.delays: list[float] = []
        self.on_sleep = on_sleep

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.on_sleep is not None:
            self.on_sleep(delay)
        await asyncio.sleep(0)


def touch_neurons(synapse_dir: Path, *names: str) -> Path:
    """Create placeholder neuron files so names resolve inside synapse_dir."""
    neurons = synapse_dir / "neurons"
    neurons.mkdir(parents=True, exist_ok=True)
    for name in names:
        (neurons / f"{name}.yml").write_text(f"name: {name}\nexec_file: /bin/true\n")
    return synapse_dir


def write_neuron(synapse_dir: Path, name: str, script: str, **fields) -> Path:
    """Write a real neuron: an executable shell script plus its YAML definition."""
    neurons = synapse_dir / "neurons"
    neurons.mkdir(parents=True, exist_ok=True)

    script_path = neurons / f"{name}.sh"
    script_path.write_text(f"#!/bin/sh\n{script}\n")
    script_path.chmod(script_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    definition = {"name": name, "exec_file": f"{name}.sh", **fields}
    config_path = neurons / f"{name}.yml"
    config_path.write_text(yaml.safe_dump(definition))
    return config_path


def make_record(
    synapse_name: str = "health-check",
    record_id: str = "exec-1",
    status: ExecutionStatus = ExecutionStatus.SUCCESS,
) -> ExecutionRecord:
    return ExecutionRecord(
        id=record_id,
        synapse_name=synapse_name,
        timestamp=datetime(2024, 5, 1, 10, 0, 0, tzinfo=UTC),
        status=status,
        neuron_results=[NeuronResult(name="check", status=NeuronStatus.SUCCESS, stdout="ok\n")],
    )


@pytest.fixture
def out() -> io.StringIO:
    """Captured progress output."""
    return io.StringIO()


@pytest.fixture
def synapse_dir(tmp_path: Path) -> Path:
    """Empty synapse directory with a neurons/ folder."""
    path = tmp_path / "synapse"
    (path / "neurons").mkdir(parents=True)
    return path


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def memory_history() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


@pytest.fixture
def json_history(tmp_path: Path) -> HistoryManager:
    """JSON history in a directory that does not exist yet."""
    return HistoryManager(tmp_path / "history")


@pytest.fixture
async def sqlite_memory_history() -> AsyncGenerator[SqliteHistoryStore, None]:
    """Async SQLite in-memory history with automatic cleanup."""
    store = await SqliteHistoryStore.in_memory()
    yield store
    await store.close()


@pytest.fixture(params=["memory", "json", "sqlite"])
async def history_store(request, tmp_path: Path):
    """Every HistoryStore backend, for contract tests."""
    if request.param == "memory":
        yield InMemoryHistoryStore()
    elif request.param == "json":
        yield HistoryManager(tmp_path / "history")
    else:
        store = SqliteHistoryStore(tmp_path / "history.db")
        await store.connect()
        yield store
        await store.close()
