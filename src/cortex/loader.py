"""
Synapse loader - build Synapse definitions from YAML.

Supports:
- A synapse directory (config.yml, falling back to config.yaml)
- A single synapse file
- An already-parsed mapping

Example config.yml:

    name: health-check
    execution: parallel
    maxConcurrency: 2
    stopOnError: false
    timeout: 5m
    neurons:
      - check-nginx
      - name: restart-nginx
        condition: "env == 'prod'"
        dependsOn: [check-nginx]
        retry:
          maxAttempts: 3
          backoff: exponential
          initialDelay: 2s
        onFailure: [page-oncall]

Every loaded synapse is validated before it is returned.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from cortex.core.duration import parse_duration
from cortex.core.errors import SynapseLoadError
from cortex.models import (
    BackoffStrategy,
    ExecutionMode,
    NeuronRef,
    RetryPolicy,
    Synapse,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("config.yml", "config.yaml")


def load_from_directory(synapse_dir: str | Path) -> Synapse:
    """Load the synapse defined in ``<synapse_dir>/config.yml``.

    Raises:
        SynapseLoadError: If no config file exists or it is malformed
        ValidationError: If the synapse is structurally invalid
    """
    base = Path(synapse_dir)
    for filename in CONFIG_FILENAMES:
        candidate = base / filename
        if candidate.is_file():
            return load_from_file(candidate)
    raise SynapseLoadError(f"no config.yml found in synapse directory: {base}")


def load_from_file(path: str | Path) -> Synapse:
    """Load a synapse from a single YAML file.

    Raises:
        SynapseLoadError: If the file is unreadable or malformed
        ValidationError: If the synapse is structurally invalid
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SynapseLoadError(f"unable to read synapse file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise SynapseLoadError(f"synapse file {path} is not valid UTF-8: {e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SynapseLoadError(f"invalid YAML in {path}: {e}") from e

    synapse = parse_synapse(data, source=str(path))
    logger.debug(f"Loaded synapse {synapse.name!r} from {path}")
    return synapse


def parse_synapse(data: Any, source: str = "dict") -> Synapse:
    """Build and validate a Synapse from parsed YAML data."""
    if not isinstance(data, dict):
        raise SynapseLoadError(
            f"synapse must be a mapping, got {type(data).__name__} (source: {source})"
        )

    raw_neurons = data.get("neurons") or []
    if not isinstance(raw_neurons, list):
        raise SynapseLoadError(f"'neurons' must be a list (source: {source})")

    neurons = tuple(_parse_neuron_ref(entry, i, source) for i, entry in enumerate(raw_neurons))

    execution = _parse_enum(ExecutionMode, data.get("execution"), "execution", source)
    if execution is None:
        execution = ExecutionMode.SEQUENTIAL

    timeout = data.get("timeout")
    if timeout is not None:
        timeout = str(timeout)
        _check_duration(timeout, "timeout", source)

    synapse = Synapse(
        name=str(data.get("name") or ""),
        neurons=neurons,
        execution=execution,
        stop_on_error=_parse_bool(data.get("stopOnError"), "stopOnError", source, False),
        max_concurrency=_parse_int(data.get("maxConcurrency"), "maxConcurrency", source, 0),
        timeout=timeout,
    )
    synapse.validate()
    return synapse


def _parse_neuron_ref(entry: Any, index: int, source: str) -> NeuronRef:
    if isinstance(entry, str):
        return NeuronRef(name=entry)
    if not isinstance(entry, dict):
        raise SynapseLoadError(
            f"neuron entry {index} must be a name or a mapping (source: {source})"
        )

    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise SynapseLoadError(f"neuron entry {index} is missing 'name' (source: {source})")

    retry = entry.get("retry")
    return NeuronRef(
        name=name,
        condition=str(entry.get("condition") or ""),
        retry=_parse_retry(retry, name, source) if retry is not None else None,
        on_failure=_parse_names(entry.get("onFailure"), "onFailure", name, source),
        depends_on=_parse_names(entry.get("dependsOn"), "dependsOn", name, source),
    )


def _parse_retry(data: Any, neuron: str, source: str) -> RetryPolicy:
    if not isinstance(data, dict):
        raise SynapseLoadError(f"retry for neuron {neuron!r} must be a mapping (source: {source})")

    backoff = _parse_enum(BackoffStrategy, data.get("backoff"), "backoff", source)

    initial_delay = RetryPolicy.NONE.initial_delay
    raw_delay = data.get("initialDelay")
    if raw_delay is not None:
        initial_delay = _check_duration(str(raw_delay), "initialDelay", source)

    return RetryPolicy(
        max_attempts=_parse_int(data.get("maxAttempts"), "maxAttempts", source, 1),
        backoff=backoff or BackoffStrategy.LINEAR,
        initial_delay=initial_delay,
    )


def _parse_names(value: Any, key: str, neuron: str, source: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SynapseLoadError(
            f"{key} for neuron {neuron!r} must be a list of names (source: {source})"
        )
    return tuple(value)


def _parse_enum(enum_cls, value: Any, key: str, source: str):
    if value is None or value == "":
        return None
    try:
        return enum_cls(str(value).lower())
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise SynapseLoadError(
            f"invalid {key} {value!r}, expected one of: {allowed} (source: {source})"
        ) from e


def _parse_int(value: Any, key: str, source: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise SynapseLoadError(f"{key} must be an integer, got {value!r} (source: {source})")
    return value


def _parse_bool(value: Any, key: str, source: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise SynapseLoadError(f"{key} must be true or false, got {value!r} (source: {source})")
    return value


def _check_duration(value: str, key: str, source: str) -> float:
    try:
        return parse_duration(value)
    except ValueError as e:
        raise SynapseLoadError(f"invalid {key} {value!r}: {e} (source: {source})") from e


__all__ = ["load_from_directory", "load_from_file", "parse_synapse", "CONFIG_FILENAMES"]
