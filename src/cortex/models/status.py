"""Status and mode enumerations for synapse execution.

Values are lowercase strings because they are written verbatim into the
execution history JSON.
"""

from enum import Enum


class ExecutionStatus(Enum):
    """Overall status of one synapse run.

    Lifecycle:
        RUNNING → SUCCESS | FAILED | PARTIAL
    """

    RUNNING = "running"
    """Run has started and is not yet finalized."""

    SUCCESS = "success"
    """Every neuron succeeded or was skipped."""

    FAILED = "failed"
    """Run was aborted by a hard error (timeout, deadlock, stop-on-error)."""

    PARTIAL = "partial"
    """Run completed but at least one neuron failed."""

    @property
    def is_terminal(self) -> bool:
        """Check if this status is final (record has been finalized)."""
        return self is not ExecutionStatus.RUNNING

    def __str__(self) -> str:
        return self.value


class NeuronStatus(Enum):
    """Outcome of a single neuron within a run."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    """Condition was not met; the neuron never ran."""

    def __str__(self) -> str:
        return self.value


class ExecutionMode(Enum):
    """How a synapse schedules its neurons."""

    SEQUENTIAL = "sequential"
    """Declared order, one at a time."""

    PARALLEL = "parallel"
    """Dependency-respecting batches with bounded concurrency."""

    def __str__(self) -> str:
        return self.value


class BackoffStrategy(Enum):
    """Mapping from retry attempt number to wait duration."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"

    def __str__(self) -> str:
        return self.value
