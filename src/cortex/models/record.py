"""
Execution records: the durable summary of one synapse run.

Design: Value objects with an explicit wire format
NeuronResult is immutable once created. ExecutionRecord is mutated by the
executor while the run is in flight and finalized exactly once at the end.

Wire format (one JSON object per record, see to_dict/from_dict):
    {
      "id": "...",
      "synapse_name": "health-check",
      "timestamp": "2024-05-01T10:00:00.123456+00:00",
      "status": "partial",
      "duration": 1500000000,          # nanoseconds
      "neuron_results": [
        {"name": "a", "status": "success", "exit_code": 0,
         "duration": 500000000, "stdout": "...", "stderr": ""}
      ],
      "error_message": "..."           # omitted when empty
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from cortex.models.status import ExecutionStatus, NeuronStatus

_NS_PER_SECOND = 1_000_000_000


def _timedelta_to_ns(value: timedelta) -> int:
    return (value.days * 86_400 + value.seconds) * _NS_PER_SECOND + value.microseconds * 1_000


def _ns_to_timedelta(value: int) -> timedelta:
    return timedelta(microseconds=value // 1_000)


def _parse_timestamp(value: str) -> datetime:
    # Go writes up to nanosecond precision and a trailing "Z"
    text = value.replace("Z", "+00:00")
    if "." in text:
        head, _, tail = text.partition(".")
        digits = ""
        rest = tail
        while rest and rest[0].isdigit():
            digits, rest = digits + rest[0], rest[1:]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class NeuronResult:
    """Outcome of one neuron within a run."""

    name: str
    status: NeuronStatus
    exit_code: int = 0
    duration: timedelta = timedelta(0)
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status is NeuronStatus.FAILED

    @classmethod
    def skipped(cls, name: str) -> NeuronResult:
        return cls(name=name, status=NeuronStatus.SKIPPED)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "exit_code": self.exit_code,
            "duration": _timedelta_to_ns(self.duration),
            "stdout": self.stdout,
            "stderr": self.stderr,
        }
        if self.error:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NeuronResult:
        return cls(
            name=data["name"],
            status=NeuronStatus(data["status"]),
            exit_code=int(data.get("exit_code", 0)),
            duration=_ns_to_timedelta(int(data.get("duration", 0))),
            stdout=data.get("stdout", ""),
            stderr=data.get("stderr", ""),
            error=data.get("error") or None,
        )


@dataclass
class ExecutionRecord:
    """
    One synapse run.

    Created with status RUNNING when execution starts; the executor appends
    NeuronResults as neurons finish and then finalizes status and duration.
    """

    id: str
    synapse_name: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    status: ExecutionStatus = ExecutionStatus.RUNNING
    duration: timedelta = timedelta(0)
    error_message: str | None = None
    neuron_results: list[NeuronResult] = field(default_factory=list)

    def result_for(self, name: str) -> NeuronResult | None:
        """Return the first result recorded for a neuron, if any."""
        return next((r for r in self.neuron_results if r.name == name), None)

    @property
    def failed_neurons(self) -> list[str]:
        return [r.name for r in self.neuron_results if r.failed]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "synapse_name": self.synapse_name,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "duration": _timedelta_to_ns(self.duration),
            "neuron_results": [r.to_dict() for r in self.neuron_results],
        }
        if self.error_message:
            data["error_message"] = self.error_message
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExecutionRecord:
        return cls(
            id=data["id"],
            synapse_name=data.get("synapse_name", ""),
            timestamp=_parse_timestamp(data["timestamp"]),
            status=ExecutionStatus(data["status"]),
            duration=_ns_to_timedelta(int(data.get("duration", 0))),
            error_message=data.get("error_message") or None,
            neuron_results=[NeuronResult.from_dict(r) for r in data.get("neuron_results") or []],
        )

    def __repr__(self) -> str:
        return (
            f"ExecutionRecord(id={self.id!r}, synapse_name={self.synapse_name!r}, "
            f"status={self.status}, results={len(self.neuron_results)})"
        )
