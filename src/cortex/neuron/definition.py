"""Neuron definitions and single-shot execution.

A neuron is one external check or mutation script plus human-readable
metadata. Definitions are YAML files:

    name: check_web_proxy_conn_config
    type: check
    description: "A longer description"
    exec_file: run.sh
    pre_exec_debug: "Going to check the web_proxy connection configuration"
    assertExitStatus: [0, 137]
    post_exec_success_debug: "All configurations checkout ok"
    post_exec_fail_debug:
      120: "Found maxconn rate to be too low"

Neurons are loaded fresh for every invocation and never cached.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

import yaml

from cortex.core.errors import NeuronLaunchError, NeuronLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Excitation:
    """What one execution of a neuron's command produced."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True)
class Neuron:
    """A loaded neuron definition."""

    name: str
    exec_file: str
    type: str = ""
    description: str = ""
    pre_exec_debug: str = ""
    assert_exit_status: tuple[int, ...] = (0,)
    post_exec_success_debug: str = ""
    post_exec_fail_debug: dict[int, str] = field(default_factory=dict)
    source: Path | None = None
    """File this definition was loaded from (used to resolve exec_file)."""

    @classmethod
    def load(cls, config_path: str | Path) -> Neuron:
        """Load a neuron definition from a YAML file.

        Raises:
            NeuronLoadError: If the file is unreadable, not YAML, or not a mapping
        """
        path = Path(config_path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise NeuronLoadError(f"unable to read neuron file [{path}]: {e}") from e
        except UnicodeDecodeError as e:
            raise NeuronLoadError(f"neuron file [{path}] is not valid UTF-8: {e}") from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise NeuronLoadError(f"unable to parse neuron file [{path}]: {e}") from e

        logger.debug(f"Loaded neuron config from {path}")
        return cls.from_dict(data, source=path)

    @classmethod
    def from_dict(cls, data: Any, source: Path | None = None) -> Neuron:
        where = f" [{source}]" if source else ""
        if not isinstance(data, dict):
            raise NeuronLoadError(f"neuron definition{where} must be a mapping")

        exec_file = data.get("exec_file")
        if not exec_file or not isinstance(exec_file, str):
            raise NeuronLoadError(f"neuron definition{where} is missing exec_file")

        accepted = data.get("assertExitStatus", data.get("assert_exit_status"))
        fail_debug = data.get("post_exec_fail_debug") or {}
        try:
            assert_exit_status = tuple(int(code) for code in accepted) if accepted else (0,)
            post_exec_fail_debug = {int(code): str(msg) for code, msg in fail_debug.items()}
        except (TypeError, ValueError, AttributeError) as e:
            raise NeuronLoadError(f"invalid exit status settings in neuron{where}: {e}") from e

        return cls(
            name=str(data.get("name") or (source.stem if source else "")),
            exec_file=exec_file,
            type=str(data.get("type") or ""),
            description=str(data.get("description") or ""),
            pre_exec_debug=str(data.get("pre_exec_debug") or ""),
            assert_exit_status=assert_exit_status,
            post_exec_success_debug=str(data.get("post_exec_success_debug") or ""),
            post_exec_fail_debug=post_exec_fail_debug,
            source=source,
        )

    def is_accepted(self, exit_code: int) -> bool:
        """Check an exit code against the neuron's accepted statuses."""
        return exit_code in self.assert_exit_status

    def executable(self) -> str:
        """Resolve exec_file.

        Absolute paths are used as-is. A relative path is taken relative to
        the definition file's directory when such a file exists there;
        otherwise it is left for PATH lookup.
        """
        exec_path = Path(self.exec_file)
        if exec_path.is_absolute() or self.source is None:
            return self.exec_file

        candidate = self.source.parent / exec_path
        if candidate.exists():
            return str(candidate)
        return self.exec_file

    async def excite(self, out: TextIO) -> Excitation:
        """Run the neuron's command once.

        Writes the pre-exec debug line to ``out``, runs the executable with no
        arguments, and captures stdout and stderr separately. A non-zero exit
        status is returned, not raised.

        Raises:
            NeuronLaunchError: If the executable could not be started
        """
        out.write(f"===> {self.pre_exec_debug}\n")
        out.flush()

        executable = self.executable()
        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug(f"Could not launch {executable!r} for neuron {self.name}: {e}")
            raise NeuronLaunchError(self.name, executable, e) from e

        stdout, stderr = await process.communicate()
        exit_code = process.returncode

        logger.debug(
            f"Neuron {self.name} exited with {exit_code} "
            f"(stdout={len(stdout)} bytes, stderr={len(stderr)} bytes)"
        )

        message = (
            self.post_exec_success_debug
            if self.is_accepted(exit_code)
            else self.post_exec_fail_debug.get(exit_code, "")
        )
        if message:
            out.write(f"{message}\n")
            out.flush()

        return Excitation(
            exit_code=exit_code,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )
