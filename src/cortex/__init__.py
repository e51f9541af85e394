"""
cortex - runbook automation for debugging and remediation workflows.

A synapse is a named workflow of neurons (external check or fix scripts).
cortex loads synapse definitions from YAML, validates their dependency graph,
runs the neurons sequentially or as a bounded-parallel DAG with per-neuron
retry, conditions and rollback, and keeps an append-only history of every
run.

Quick start:
    import asyncio
    from cortex import Executor, HistoryManager, load_from_directory

    async def main():
        synapse = load_from_directory("synapses/health-check")
        executor = Executor(history=HistoryManager.default())
        record = await executor.execute(synapse, "synapses/health-check")
        print(record.status)

    asyncio.run(main())
"""

from cortex.core import (
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
    evaluate_condition,
    find_cycle,
    format_duration,
    parse_duration,
    validate_synapse,
)
from cortex.executor import Executor, PlanSummary, level_graph, summarize
from cortex.loader import load_from_directory, load_from_file, parse_synapse
from cortex.models import (
    BackoffStrategy,
    ExecutionMode,
    ExecutionRecord,
    ExecutionStatus,
    NeuronRef,
    NeuronResult,
    NeuronStatus,
    RetryPolicy,
    Synapse,
)
from cortex.neuron import Excitation, Neuron, NeuronRunner
from cortex.storage import (
    CorruptHistoryError,
    ExecutionNotFoundError,
    HistoryNotFoundError,
    HistoryStore,
    StorageError,
)
from cortex.storage.json_file import HistoryManager, default_history_dir
from cortex.storage.memory import InMemoryHistoryStore

__version__ = "0.1.0"

__all__ = [
    # Execution
    "Executor",
    "PlanSummary",
    "summarize",
    "level_graph",
    # Loading and validation
    "load_from_directory",
    "load_from_file",
    "parse_synapse",
    "validate_synapse",
    "find_cycle",
    "evaluate_condition",
    "parse_duration",
    "format_duration",
    # Models
    "Synapse",
    "NeuronRef",
    "RetryPolicy",
    "BackoffStrategy",
    "ExecutionMode",
    "ExecutionRecord",
    "ExecutionStatus",
    "NeuronResult",
    "NeuronStatus",
    # Neurons
    "Neuron",
    "NeuronRunner",
    "Excitation",
    # History
    "HistoryStore",
    "HistoryManager",
    "InMemoryHistoryStore",
    "default_history_dir",
    # Errors
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
    "StorageError",
    "HistoryNotFoundError",
    "ExecutionNotFoundError",
    "CorruptHistoryError",
]
