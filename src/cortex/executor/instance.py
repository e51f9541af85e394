"""
Executor - run a validated synapse and record the outcome.

From Dave Cheney:
"The name of an identifier includes its package name"
cortex.executor.Executor is clear - no need for SynapseExecutor.

Design: a single type that holds the run-independent configuration
(history store, output stream, neuron runner, environment) and provides
execute(). Everything specific to one run lives in a RunContext, so one
Executor can be reused for many runs and several Executors can coexist in
one process.

Execution flow:
1. Parse the timeout and create the ExecutionRecord (status RUNNING)
2. Dispatch to the sequential or parallel scheduler
3. Finalize status and duration
4. Persist the record (failures are logged, never raised)
5. Re-raise any hard error with the finalized record attached
"""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
import time
from collections.abc import Awaitable, Callable, Mapping
from datetime import timedelta
from pathlib import Path
from typing import TextIO

from uuid_extensions import uuid7

from cortex.core.condition import evaluate_condition
from cortex.core.duration import format_duration
from cortex.core.errors import (
    FAILED_EXIT_CODE,
    ExecutionError,
    ExecutionTimeoutError,
    NeuronLaunchError,
    NeuronLoadError,
)
from cortex.executor.context import RunContext
from cortex.executor.dag import run_parallel
from cortex.executor.sequential import run_sequential
from cortex.models import (
    ExecutionMode,
    ExecutionRecord,
    ExecutionStatus,
    NeuronRef,
    NeuronResult,
    NeuronStatus,
    Synapse,
)
from cortex.neuron import NeuronRunner, resolve_neuron_path
from cortex.storage.base import HistoryStore

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = ExecutionTimeoutError().args[0]


class Executor:
    """
    Execute synapses in-process.

    From Dave Cheney: "Make the zero value useful"
    Executor() with no arguments runs neurons for real, prints progress to
    stdout and keeps no history.

    Usage:
        history = HistoryManager.default()
        executor = Executor(history=history)
        executor.set_environment({"env": "prod"})

        synapse = load_from_directory("synapses/health-check")
        record = await executor.execute(synapse, "synapses/health-check")
        print(record.status)  # success | partial

        # Hard errors carry the persisted record
        try:
            await executor.execute(strict_synapse, "synapses/strict")
        except ExecutionError as e:
            print(e.record.status)  # failed
    """

    def __init__(
        self,
        history: HistoryStore | None = None,
        out: TextIO | None = None,
        runner: NeuronRunner | None = None,
    ):
        """
        Args:
            history: Where finalized records go; None keeps no history
            out: Stream for human-readable progress text (default stdout)
            runner: Neuron runner; replaceable for tests
        """
        self.history = history
        self.out = out if out is not None else sys.stdout
        self.runner = runner if runner is not None else NeuronRunner()
        self._sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

        self._env_lock = threading.Lock()
        self._environment: dict[str, str] = {}
        self._in_flight = 0

    # -------------------------------------------------------------------------
    # Environment
    # -------------------------------------------------------------------------

    def set_environment(self, environment: Mapping[str, str]) -> None:
        """
        Replace the key/value map used by neuron conditions.

        Raises:
            RuntimeError: If a run is in progress on this executor
        """
        with self._env_lock:
            if self._in_flight:
                raise RuntimeError("cannot change environment while a synapse is executing")
            self._environment = dict(environment)

    @property
    def environment(self) -> dict[str, str]:
        with self._env_lock:
            return dict(self._environment)

    def evaluate_condition(self, condition: str) -> bool:
        with self._env_lock:
            return evaluate_condition(condition, self._environment)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def execute(
        self,
        synapse: Synapse,
        synapse_dir: str | Path,
        cancel: asyncio.Event | None = None,
    ) -> ExecutionRecord:
        """
        Execute a validated synapse and persist its ExecutionRecord.

        Args:
            synapse: Workflow to run (already validated by the loader)
            synapse_dir: Directory containing ``neurons/``
            cancel: Optional event; setting it stops new work from starting

        Returns:
            The finalized record (status SUCCESS or PARTIAL)

        Raises:
            InvalidTimeoutError: synapse.timeout is not a valid duration
            ExecutionError: The run was aborted; ``error.record`` holds the
                finalized (FAILED) record, already persisted
        """
        timeout = synapse.timeout_seconds()

        record = ExecutionRecord(id=str(uuid7()), synapse_name=synapse.name)
        loop = asyncio.get_running_loop()
        ctx = RunContext(
            synapse=synapse,
            synapse_dir=Path(synapse_dir),
            record=record,
            deadline=loop.time() + timeout if timeout and timeout > 0 else None,
            cancel=cancel,
        )

        logger.info(f"Starting synapse execution: {synapse.name} (ID: {record.id})")
        started = time.monotonic()

        with self._env_lock:
            self._in_flight += 1

        error: ExecutionError | None = None
        try:
            if synapse.execution is ExecutionMode.PARALLEL:
                await run_parallel(self, ctx)
            else:
                await run_sequential(self, ctx)
        except ExecutionError as e:
            error = e
        finally:
            with self._env_lock:
                self._in_flight -= 1

        self._finalize(record, error, time.monotonic() - started)
        await self._save(record)

        if error is not None:
            error.record = record
            raise error
        return record

    async def process_neuron(self, ctx: RunContext, ref: NeuronRef) -> NeuronResult:
        """
        Handle one neuron reference end to end.

        Unmet condition → skipped result. Otherwise the retry wrapper runs it;
        the result is recorded and, on failure, the rollback list runs.
        Shared by both schedulers.
        """
        if not self.evaluate_condition(ref.condition):
            self.emit(f"Skipping: {ref.name} (condition not met)")
            result = NeuronResult.skipped(ref.name)
            await ctx.add_result(result)
            return result

        result = await self.run_with_retry(ctx, ref)
        await ctx.add_result(result)

        if result.failed:
            logger.debug(f"Neuron {ref.name} failed: {result.error}")
            if ref.on_failure:
                await self.rollback(ctx, ref)

        return result

    async def run_with_retry(self, ctx: RunContext, ref: NeuronRef) -> NeuronResult:
        """
        Run a neuron up to its policy's max attempts.

        Before attempt n > 1 the backoff delay is announced and slept. The
        cancellation check runs before every attempt; once tripped the
        neuron fails with "execution timeout exceeded".
        """
        policy = ref.retry_policy
        started = time.monotonic()

        exit_code = FAILED_EXIT_CODE
        stdout = stderr = ""
        error: str | None = None

        for attempt in range(1, policy.attempts + 1):
            if attempt > 1:
                delay = policy.delay_for_attempt(attempt)
                self.emit(
                    f"Retry attempt {attempt}/{policy.attempts} for {ref.name} "
                    f"(waiting {format_duration(delay)})"
                )
                await self._sleep(delay)

            if ctx.cancelled():
                error = TIMEOUT_MESSAGE
                break

            self.emit(f"Executing: {ref.name}")
            exit_code, stdout, stderr, error = await self._excite(ctx, ref.name)

            if error is None and exit_code == 0:
                return NeuronResult(
                    name=ref.name,
                    status=NeuronStatus.SUCCESS,
                    exit_code=exit_code,
                    duration=timedelta(seconds=time.monotonic() - started),
                    stdout=stdout,
                    stderr=stderr,
                )

            logger.debug(
                f"Attempt {attempt}/{policy.attempts} of {ref.name} failed "
                f"(exit code {exit_code}): {error}"
            )

        return NeuronResult(
            name=ref.name,
            status=NeuronStatus.FAILED,
            exit_code=exit_code,
            duration=timedelta(seconds=time.monotonic() - started),
            stdout=stdout,
            stderr=stderr,
            error=error or f"exit code {exit_code}",
        )

    async def rollback(self, ctx: RunContext, ref: NeuronRef) -> None:
        """Run each onFailure neuron once. Failures are logged, never raised."""
        self.emit(f"Executing rollback for {ref.name}")
        for target in ref.on_failure:
            self.emit(f"Executing: {target}")
            exit_code, _, _, error = await self._excite(ctx, target)
            if error is not None or exit_code != 0:
                logger.warning(
                    f"Rollback neuron {target} for {ref.name} failed "
                    f"(exit code {exit_code}): {error or 'non-zero exit'}"
                )

    def emit(self, line: str) -> None:
        """Write one line of progress text to the output stream."""
        self.out.write(f"{line}\n")
        self.out.flush()

    async def _excite(self, ctx: RunContext, name: str) -> tuple[int, str, str, str | None]:
        """Resolve and run a neuron once, folding load/launch errors into the result."""
        try:
            path = resolve_neuron_path(ctx.synapse_dir, name)
            excitation = await self.runner.excite(path, self.out)
        except NeuronLaunchError as e:
            return e.exit_code, "", "", str(e)
        except NeuronLoadError as e:
            return FAILED_EXIT_CODE, "", "", str(e)

        return excitation.exit_code, excitation.stdout, excitation.stderr, None

    def _finalize(
        self, record: ExecutionRecord, error: ExecutionError | None, elapsed: float
    ) -> None:
        record.duration = timedelta(seconds=elapsed)
        if error is not None:
            record.status = ExecutionStatus.FAILED
            record.error_message = str(error)
        elif record.failed_neurons:
            record.status = ExecutionStatus.PARTIAL
        else:
            record.status = ExecutionStatus.SUCCESS

        logger.info(
            f"Synapse {record.synapse_name} finished with status {record.status} "
            f"in {format_duration(elapsed)} (ID: {record.id})"
        )

    async def _save(self, record: ExecutionRecord) -> None:
        if self.history is None:
            return
        try:
            await self.history.add_execution(record.synapse_name, record)
        except Exception as e:
            logger.error(f"Failed to save execution history for {record.synapse_name}: {e}")

    def __repr__(self) -> str:
        return f"Executor(history={self.history!r}, runner={self.runner!r})"
