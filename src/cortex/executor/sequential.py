"""Sequential scheduling: neurons run one at a time in declaration order."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cortex.core.errors import ExecutionTimeoutError, NeuronFailedError
from cortex.executor.context import RunContext

if TYPE_CHECKING:
    from cortex.executor.instance import Executor

logger = logging.getLogger(__name__)


async def run_sequential(executor: Executor, ctx: RunContext) -> None:
    """
    Run every neuron of ctx.synapse in order.

    Before each neuron the deadline is checked; once it has passed no further
    neuron starts. A failed neuron's rollback runs before the next decision.
    With stop_on_error set, the first failure aborts the run and later
    neurons are never invoked.

    Raises:
        ExecutionTimeoutError: The deadline passed or the run was cancelled
        NeuronFailedError: A neuron failed and stop_on_error is set
    """
    synapse = ctx.synapse

    for ref in synapse.neurons:
        if ctx.cancelled():
            logger.info(f"Deadline reached before {ref.name} in synapse {synapse.name}")
            raise ExecutionTimeoutError()

        result = await executor.process_neuron(ctx, ref)

        if result.failed and synapse.stop_on_error:
            executor.emit(f"Stopping execution due to error in {ref.name}")
            raise NeuronFailedError(ref.name, result.exit_code, result.error)
