"""
Error taxonomy for cortex.

Every failure the engine reports is a subclass of CortexError, grouped by
the stage that produces it:

- ConfigError: a workflow or neuron definition could not be loaded.
- ValidationError: a loaded synapse is structurally invalid.
- NeuronLaunchError: a single neuron could not be started.
- ExecutionError: a run was aborted (timeout, deadlock, stop-on-error).

Storage failures live next to the storage interface in
cortex.storage.base (StorageError and friends).

From Dave Cheney: "Errors are values"
Each error keeps the context a caller needs to render a precise message
(neuron name, exit code, cycle path) as attributes, not only in the text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cortex.models import ExecutionRecord


class CortexError(Exception):
    """Base class for all cortex errors."""


# =============================================================================
# Configuration errors - fatal to the load step
# =============================================================================


class ConfigError(CortexError):
    """A definition could not be read or parsed."""


class SynapseLoadError(ConfigError):
    """Synapse config is missing, unreadable, or malformed."""


class NeuronLoadError(ConfigError):
    """Neuron definition is missing, unreadable, or malformed."""


class NeuronNotFoundError(NeuronLoadError):
    """No neuron file exists for a referenced name."""

    def __init__(self, name: str):
        super().__init__(f"neuron not found: {name}")
        self.name = name


class InvalidTimeoutError(ConfigError):
    """Synapse timeout is not a valid duration string."""

    def __init__(self, timeout: str, cause: Exception | None = None):
        super().__init__(f"invalid timeout {timeout!r}: {cause}")
        self.timeout = timeout


# =============================================================================
# Validation errors - fatal before any execution begins
# =============================================================================


class ValidationError(CortexError):
    """A synapse violates a structural invariant."""


class EmptyNameError(ValidationError):
    def __init__(self, message: str = "synapse name cannot be empty"):
        super().__init__(message)


class NoNeuronsError(ValidationError):
    def __init__(self, synapse: str):
        super().__init__(f"synapse {synapse!r} must contain at least one neuron")
        self.synapse = synapse


class DuplicateNeuronError(ValidationError):
    def __init__(self, name: str):
        super().__init__(f"duplicate neuron name: {name}")
        self.name = name


class DanglingDependencyError(ValidationError):
    def __init__(self, neuron: str, dependency: str):
        super().__init__(f"neuron {neuron!r} depends on unknown neuron {dependency!r}")
        self.neuron = neuron
        self.dependency = dependency


class CircularDependencyError(ValidationError):
    """Dependency graph contains a cycle.

    Attributes:
        cycle: Path of the detected cycle, first node repeated at the end
               (e.g. ["a", "b", "a"]).
    """

    def __init__(self, cycle: list[str]):
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle)}")
        self.cycle = cycle


# =============================================================================
# Per-neuron errors - captured into that neuron's result
# =============================================================================


FAILED_EXIT_CODE = -1
"""Exit code reported when a neuron never produced one (load or launch failure)."""


class NeuronLaunchError(CortexError):
    """The neuron's executable could not be started."""

    def __init__(self, neuron: str, executable: str, cause: Exception):
        super().__init__(f"failed to launch {executable!r} for neuron {neuron!r}: {cause}")
        self.neuron = neuron
        self.executable = executable
        self.exit_code = FAILED_EXIT_CODE


# =============================================================================
# Execution errors - abort the in-progress run
# =============================================================================


class ExecutionError(CortexError):
    """A synapse run was aborted.

    Attributes:
        record: The finalized ExecutionRecord of the aborted run. Set by the
                executor just before the error leaves execute().
    """

    record: ExecutionRecord | None = None


class ExecutionTimeoutError(ExecutionError):
    def __init__(self, message: str = "execution timeout exceeded"):
        super().__init__(message)


class DeadlockDetectedError(ExecutionError):
    def __init__(self, waiting: list[str]):
        super().__init__(
            "deadlock detected: some neurons cannot execute due to unmet dependencies: "
            f"{', '.join(waiting)}"
        )
        self.waiting = waiting


class NeuronFailedError(ExecutionError):
    """A neuron failed and the synapse is configured to stop on error."""

    def __init__(self, neuron: str, exit_code: int, cause: str | None):
        super().__init__(f"neuron {neuron} failed: {cause or f'exit code {exit_code}'}")
        self.neuron = neuron
        self.exit_code = exit_code
        self.cause = cause


__all__ = [
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
    "FAILED_EXIT_CODE",
    "NeuronLaunchError",
    "ExecutionError",
    "ExecutionTimeoutError",
    "DeadlockDetectedError",
    "NeuronFailedError",
]
