"""Synapse workflow definitions.

A Synapse is a named, ordered list of NeuronRefs plus scheduling policy.
It is built once by the loader, validated once, and then treated as
immutable input to the Executor.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cortex.core.duration import parse_duration
from cortex.core.errors import InvalidTimeoutError
from cortex.models.retry import RetryPolicy
from cortex.models.status import ExecutionMode

DEFAULT_MAX_CONCURRENCY = 5


@dataclass(frozen=True)
class NeuronRef:
    """A neuron as it appears inside a synapse, with execution metadata."""

    name: str
    """Neuron name; resolved to ``neurons/<name>.yml`` in the synapse directory."""

    condition: str = ""
    """Gate expression of the form ``key == 'value'``; empty means always run."""

    retry: RetryPolicy | None = None
    """Retry policy for this neuron only. None means a single attempt."""

    on_failure: tuple[str, ...] = ()
    """Rollback neurons run once, best-effort, when this neuron fails."""

    depends_on: tuple[str, ...] = ()
    """Neurons that must complete first (parallel mode only)."""

    @property
    def retry_policy(self) -> RetryPolicy:
        return self.retry if self.retry is not None else RetryPolicy.NONE


@dataclass(frozen=True)
class Synapse:
    """
    A named workflow of neuron references.

    Usage:
        synapse = Synapse(
            name="health-check",
            neurons=(NeuronRef("check-nginx"), NeuronRef("check-api")),
        )
        synapse.validate()
    """

    name: str
    neurons: tuple[NeuronRef, ...] = field(default_factory=tuple)
    execution: ExecutionMode = ExecutionMode.SEQUENTIAL
    stop_on_error: bool = False
    max_concurrency: int = 0
    timeout: str | None = None
    """Overall deadline as a duration string (e.g. "5s"); None for no deadline."""

    @property
    def effective_max_concurrency(self) -> int:
        """Concurrency bound for parallel mode (DEFAULT_MAX_CONCURRENCY when unset)."""
        if self.max_concurrency <= 0:
            return DEFAULT_MAX_CONCURRENCY
        return self.max_concurrency

    @property
    def neuron_names(self) -> list[str]:
        return [ref.name for ref in self.neurons]

    def timeout_seconds(self) -> float | None:
        """Parse the timeout string.

        Returns:
            Seconds, or None when no timeout is configured

        Raises:
            InvalidTimeoutError: If the timeout is not a valid duration
        """
        if not self.timeout:
            return None
        try:
            return parse_duration(self.timeout)
        except ValueError as e:
            raise InvalidTimeoutError(self.timeout, e) from e

    def validate(self) -> None:
        """Check structural invariants (see cortex.core.validation)."""
        from cortex.core.validation import validate_synapse

        validate_synapse(self)

    def __repr__(self) -> str:
        return (
            f"Synapse(name={self.name!r}, neurons={self.neuron_names}, "
            f"execution={self.execution.value}, stop_on_error={self.stop_on_error})"
        )
