"""
Neuron resolution and the runner seam used by the executor.

The executor never launches processes directly; it goes through a
NeuronRunner. Tests substitute their own runner to script exit codes and
count calls without touching the filesystem.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

from cortex.core.errors import NeuronNotFoundError
from cortex.neuron.definition import Excitation, Neuron

logger = logging.getLogger(__name__)

NEURONS_DIR = "neurons"


def resolve_neuron_path(synapse_dir: str | Path, name: str) -> Path:
    """Locate the definition file for a neuron name.

    Tries ``<synapse_dir>/neurons/<name>.yml`` first, then
    ``<synapse_dir>/neurons/<name>``.

    Raises:
        NeuronNotFoundError: If neither file exists
    """
    base = Path(synapse_dir) / NEURONS_DIR
    for candidate in (base / f"{name}.yml", base / name):
        if candidate.is_file():
            return candidate
    raise NeuronNotFoundError(name)


class NeuronRunner:
    """Loads a neuron definition and runs it once.

    Usage:
        runner = NeuronRunner()
        excitation = await runner.excite(path, sys.stdout)
    """

    async def excite(self, config_path: Path, out: TextIO) -> Excitation:
        """Load the neuron at config_path and execute it.

        Raises:
            NeuronLoadError: If the definition cannot be loaded
            NeuronLaunchError: If the executable cannot be started
        """
        neuron = Neuron.load(config_path)
        logger.debug(f"Exciting neuron {neuron.name} ({neuron.executable()})")
        return await neuron.excite(out)

    def __repr__(self) -> str:
        return "NeuronRunner()"
