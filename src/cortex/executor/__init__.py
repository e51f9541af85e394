"""Synapse execution: the Executor plus its sequential and parallel schedulers."""

from cortex.executor.context import RunContext
from cortex.executor.dag import PlanSummary, level_graph, run_parallel, summarize
from cortex.executor.instance import Executor
from cortex.executor.sequential import run_sequential

__all__ = [
    "Executor",
    "RunContext",
    "run_sequential",
    "run_parallel",
    "PlanSummary",
    "summarize",
    "level_graph",
]
