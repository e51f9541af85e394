"""Core data models for synapse execution.

Defines the workflow definition types (Synapse, NeuronRef, RetryPolicy),
the run outcome types (ExecutionRecord, NeuronResult) and their status
enumerations.

Design: Dependency-Light Models
These types depend only on cortex.core helpers (durations, errors) so that
the executor, loader and storage layers can all import them without cycles.
"""

from cortex.models.record import ExecutionRecord, NeuronResult
from cortex.models.retry import RetryPolicy
from cortex.models.status import BackoffStrategy, ExecutionMode, ExecutionStatus, NeuronStatus
from cortex.models.synapse import DEFAULT_MAX_CONCURRENCY, NeuronRef, Synapse

__all__ = [
    "Synapse",
    "NeuronRef",
    "RetryPolicy",
    "ExecutionRecord",
    "NeuronResult",
    "ExecutionStatus",
    "NeuronStatus",
    "ExecutionMode",
    "BackoffStrategy",
    "DEFAULT_MAX_CONCURRENCY",
]
