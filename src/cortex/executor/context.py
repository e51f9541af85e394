"""
Per-run execution state.

One RunContext is created for every Executor.execute() call and shared by
the scheduler (sequential or parallel) and the per-neuron tasks it spawns.
Nothing in here outlives the run.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from cortex.models import ExecutionRecord, NeuronResult, Synapse


@dataclass
class RunContext:
    """State of one in-flight synapse run.

    Attributes:
        synapse: The validated workflow being executed
        synapse_dir: Directory holding the synapse's ``neurons/`` folder
        record: The record being filled in as neurons finish
        deadline: Event-loop time after which no new work may start
        cancel: External cancellation signal
        completed: Names of neurons that have finished (any status)
    """

    synapse: Synapse
    synapse_dir: Path
    record: ExecutionRecord
    deadline: float | None = None
    cancel: asyncio.Event | None = None
    completed: set[str] = field(default_factory=set)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def cancelled(self) -> bool:
        """True once the deadline has passed or cancel has been set."""
        if self.cancel is not None and self.cancel.is_set():
            return True
        if self.deadline is None:
            return False
        return asyncio.get_running_loop().time() >= self.deadline

    async def add_result(self, result: NeuronResult) -> None:
        """Append a finished neuron's result and mark it completed."""
        async with self.lock:
            self.record.neuron_results.append(result)
            self.completed.add(result.name)
