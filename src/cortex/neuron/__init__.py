"""Neurons: single external commands and the runner that executes them."""

from cortex.neuron.definition import Excitation, Neuron
from cortex.neuron.runner import NEURONS_DIR, NeuronRunner, resolve_neuron_path

__all__ = [
    "Neuron",
    "Excitation",
    "NeuronRunner",
    "resolve_neuron_path",
    "NEURONS_DIR",
]
