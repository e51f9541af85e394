"""
Retry policy configuration for neuron execution.

Design Pattern: Strategy Pattern
RetryPolicy encapsulates retry behavior, allowing different backoff
strategies without modifying the executor's retry loop.

Design Rationale:
- Safe default: no automatic retries (one attempt)
- The policy belongs to a single neuron reference; retries never span
  neurons
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from cortex.models.status import BackoffStrategy


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for neuron retry behavior.

    Examples:
        # No retries (default)
        policy = RetryPolicy.NONE

        # Three attempts, waiting 1s then 2s between them
        policy = RetryPolicy(max_attempts=3, backoff=BackoffStrategy.LINEAR, initial_delay=1.0)

        # Three attempts, waiting 0.5s then 1s
        policy = RetryPolicy(
            max_attempts=3,
            backoff=BackoffStrategy.EXPONENTIAL,
            initial_delay=0.5,
        )
    """

    max_attempts: int = 1
    """Maximum number of attempts (including the first try).

    Values below 1 are treated as 1.
    """

    backoff: BackoffStrategy = BackoffStrategy.LINEAR
    """How the wait grows from one retry to the next."""

    initial_delay: float = 1.0
    """Wait before the first retry, in seconds."""

    if TYPE_CHECKING:
        NONE: RetryPolicy
    else:
        NONE = cast("RetryPolicy", None)

    @property
    def attempts(self) -> int:
        """Effective attempt count (never below 1)."""
        return max(1, self.max_attempts)

    def delay_for_attempt(self, attempt: int) -> float:
        """
        Calculate the wait before a given attempt.

        The first attempt never waits. For later attempts the retry index is
        ``attempt - 1``:

        - linear: initial_delay * (attempt - 1)   → 0, d, 2d, 3d, ...
        - exponential: initial_delay * 2^(attempt - 2) → 0, d, 2d, 4d, ...

        Args:
            attempt: The attempt about to start (1-indexed)

        Returns:
            Delay in seconds (0.0 for the first attempt)

        Example:
            policy = RetryPolicy(max_attempts=3, initial_delay=1.0)
            policy.delay_for_attempt(1)  # 0.0
            policy.delay_for_attempt(2)  # 1.0
            policy.delay_for_attempt(3)  # 2.0
        """
        if attempt <= 1:
            return 0.0

        if self.backoff is BackoffStrategy.EXPONENTIAL:
            return self.initial_delay * (2 ** (attempt - 2))

        return self.initial_delay * (attempt - 1)

    def __repr__(self) -> str:
        """Readable representation for debugging."""
        return (
            f"RetryPolicy(max_attempts={self.max_attempts}, "
            f"backoff={self.backoff.value}, "
            f"initial_delay={self.initial_delay})"
        )


RetryPolicy.NONE = RetryPolicy(max_attempts=1, backoff=BackoffStrategy.LINEAR, initial_delay=1.0)
