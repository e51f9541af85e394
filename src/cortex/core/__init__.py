"""
Core helpers for cortex.

This package holds the pieces every other layer depends on:
- errors: the CortexError hierarchy
- duration: "1m30s"-style duration parsing and formatting
- condition: the ``key == 'value'`` condition evaluator
- validation: structural synapse validation and cycle detection

None of these modules import the executor or storage layers.
"""

from cortex.core.condition import evaluate_condition
from cortex.core.duration import format_duration, parse_duration
from cortex.core.errors import (
    FAILED_EXIT_CODE,
    CircularDependencyError,
    ConfigError,
    CortexError,
    DanglingDependencyError,
    DeadlockDetectedError,
    DuplicateNeuronError,
    EmptyNameError,
    ExecutionError,
    ExecutionTimeoutError,
    InvalidTimeoutError,
    NeuronFailedError,
    NeuronLaunchError,
    NeuronLoadError,
    NeuronNotFoundError,
    NoNeuronsError,
    SynapseLoadError,
    ValidationError,
)
from cortex.core.validation import dependency_graph, find_cycle, validate_synapse

__all__ = [
    "evaluate_condition",
    "parse_duration",
    "format_duration",
    "dependency_graph",
    "find_cycle",
    "validate_synapse",
    "FAILED_EXIT_CODE",
    "CortexError",
    "ConfigError",
    "SynapseLoadError",
    "NeuronLoadError",
    "NeuronNotFoundError",
    "InvalidTimeoutError",
    "ValidationError",
    "EmptyNameError",
    "NoNeuronsError",
    "DuplicateNeuronError",
    "DanglingDependencyError",
    "CircularDependencyError",
    "NeuronLaunchError",
    "ExecutionError",
    "ExecutionTimeoutError",
    "DeadlockDetectedError",
    "NeuronFailedError",
]
