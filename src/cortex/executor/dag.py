"""
DAG (Directed Acyclic Graph) parallel scheduling.

Runs a synapse's neurons concurrently while honoring ``dependsOn`` edges.

**How It Works**:
1. Neurons without dependencies go into the ready queue; the rest wait
2. Every ready neuron is launched as its own task; a semaphore bounds how
   many run at once
3. The whole batch is awaited with asyncio.gather
4. Waiting neurons whose dependencies have all completed are promoted
5. Repeat until nothing is ready or waiting

A dependency counts as completed whatever its outcome: a skipped or failed
neuron still releases its dependents.

**Example**:
```yaml
execution: parallel
maxConcurrency: 2
neurons:
  - check-nginx
  - check-api
  - name: report
    dependsOn: [check-nginx, check-api]
```
renders as
```
Level 0: [check-nginx] [check-api] (2 parallel neurons)
         ↓
Level 1: [report]
```
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cortex.core.errors import DeadlockDetectedError, ExecutionTimeoutError
from cortex.executor.context import RunContext
from cortex.models import NeuronRef, NeuronResult, Synapse

if TYPE_CHECKING:
    from cortex.executor.instance import Executor

logger = logging.getLogger(__name__)


async def run_parallel(executor: Executor, ctx: RunContext) -> None:
    """
    Run ctx.synapse's neurons in dependency-ordered batches.

    Siblings in a batch always run to completion, even when one of them
    fails. With stop_on_error set, a batch that had a failure is the last
    one launched; the run returns normally and finalizes as partial.

    **Raises**:
        ExecutionTimeoutError: The deadline passed before a batch started
        DeadlockDetectedError: Neurons are still waiting but none can start
    """
    synapse = ctx.synapse
    limit = synapse.effective_max_concurrency
    executor.emit(f"Executing in parallel (max concurrency: {limit})")

    ready: deque[NeuronRef] = deque(ref for ref in synapse.neurons if not ref.depends_on)
    waiting: dict[str, NeuronRef] = {ref.name: ref for ref in synapse.neurons if ref.depends_on}
    semaphore = asyncio.Semaphore(limit)

    async def fire(ref: NeuronRef) -> NeuronResult:
        async with semaphore:
            return await executor.process_neuron(ctx, ref)

    while ready or waiting:
        if ctx.cancelled():
            logger.info(
                f"Deadline reached in synapse {synapse.name}; {len(waiting)} neurons waiting"
            )
            raise ExecutionTimeoutError()

        batch = list(ready)
        ready.clear()
        logger.debug(f"Launching batch of {len(batch)}: {[ref.name for ref in batch]}")

        results = await asyncio.gather(*(fire(ref) for ref in batch))

        failure = next((r for r in results if r.failed), None)
        if failure is not None and synapse.stop_on_error:
            executor.emit(f"Stopping execution due to error in {failure.name}")
            logger.info(
                f"Synapse {synapse.name}: not launching {len(waiting)} waiting neurons "
                f"after {failure.name} failed"
            )
            return

        async with ctx.lock:
            for name, ref in list(waiting.items()):
                if all(dep in ctx.completed for dep in ref.depends_on):
                    ready.append(ref)
                    del waiting[name]

        if not ready and waiting:
            raise DeadlockDetectedError(list(waiting))


# =============================================================================
# Plan summary - static view of the dependency graph
# =============================================================================


@dataclass
class PlanSummary:
    """
    Summary information about a synapse's dependency graph.

    **Attributes**:
        total: Total number of neurons
        root_count: Number of neurons with no dependencies
        leaf_count: Number of neurons nothing depends on
        max_depth: Length of the longest dependency chain (roots are 0)
        roots: Root neuron names in declaration order
        leaves: Leaf neuron names in declaration order
    """

    total: int
    root_count: int
    leaf_count: int
    max_depth: int
    roots: list[str]
    leaves: list[str]


def neuron_depths(synapse: Synapse) -> dict[str, int]:
    """
    Depth of every neuron: 0 for roots, otherwise 1 + the deepest dependency.

    Neurons caught in a cycle or depending on unknown names get no depth.
    """
    depths: dict[str, int] = {ref.name: 0 for ref in synapse.neurons if not ref.depends_on}

    changed = True
    while changed:
        changed = False
        for ref in synapse.neurons:
            if ref.name in depths:
                continue
            dep_depths = [depths.get(dep) for dep in ref.depends_on]
            if all(d is not None for d in dep_depths):
                depths[ref.name] = max(dep_depths) + 1
                changed = True

    return depths


def summarize(synapse: Synapse) -> PlanSummary:
    """Compute root, leaf and depth statistics for a synapse."""
    roots = [ref.name for ref in synapse.neurons if not ref.depends_on]

    depended_on: set[str] = set()
    for ref in synapse.neurons:
        depended_on.update(ref.depends_on)
    leaves = [ref.name for ref in synapse.neurons if ref.name not in depended_on]

    depths = neuron_depths(synapse)
    return PlanSummary(
        total=len(synapse.neurons),
        root_count=len(roots),
        leaf_count=len(leaves),
        max_depth=max(depths.values()) if depths else 0,
        roots=roots,
        leaves=leaves,
    )


def level_graph(synapse: Synapse) -> str:
    """
    Level-based view showing which neurons can run side by side.

    **Example output**:
    ```
    Execution Levels (3 neurons):

    Level 0: [check-nginx] [check-api] (2 parallel neurons)
             ↓
    Level 1: [report]
    ```
    """
    output = f"Execution Levels ({len(synapse.neurons)} neurons):\n\n"

    depths = neuron_depths(synapse)
    max_level = max(depths.values()) if depths else 0
    levels: list[list[str]] = [[] for _ in range(max_level + 1)]
    for ref in synapse.neurons:
        if ref.name in depths:
            levels[depths[ref.name]].append(ref.name)

    for level, names in enumerate(levels):
        if not names:
            continue

        parallel_note = f" ({len(names)} parallel neurons)" if len(names) > 1 else ""
        output += f"Level {level}: [{'] ['.join(names)}]{parallel_note}\n"

        if level < max_level:
            output += "         ↓\n"

    return output


__all__ = ["run_parallel", "PlanSummary", "summarize", "level_graph", "neuron_depths"]
