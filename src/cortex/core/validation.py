"""
Structural validation of synapse definitions.

Runs once, at load time, before any neuron executes. The executor assumes a
validated synapse and never re-checks these invariants.

Checks, in order (first failure wins):
1. Name is not blank                      → EmptyNameError
2. At least one neuron                    → NoNeuronsError
3. No duplicate neuron names              → DuplicateNeuronError
4. Every dependency names a known neuron  → DanglingDependencyError
5. The dependency graph is acyclic        → CircularDependencyError

Cycle detection is a pure function over an adjacency mapping so graph
properties can be tested without building synapses or running processes.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING

from cortex.core.errors import (
    CircularDependencyError,
    DanglingDependencyError,
    DuplicateNeuronError,
    EmptyNameError,
    NoNeuronsError,
)

if TYPE_CHECKING:
    from cortex.models import Synapse


class _Color(Enum):
    UNVISITED = 0
    VISITING = 1
    VISITED = 2


def dependency_graph(synapse: Synapse) -> dict[str, list[str]]:
    """Adjacency view of a synapse: neuron name → names it depends on.

    Insertion order follows the synapse's declaration order.
    """
    return {ref.name: list(ref.depends_on) for ref in synapse.neurons}


def find_cycle(graph: Mapping[str, Sequence[str]]) -> list[str] | None:
    """Find a dependency cycle using three-color DFS.

    Nodes are visited in the mapping's iteration order and edges in list
    order, so the same input always reports the same cycle. Edges pointing at
    nodes missing from the mapping are ignored.

    Args:
        graph: Mapping of node → nodes it depends on

    Returns:
        The cycle path with its first node repeated at the end
        (e.g. ["a", "b", "a"]), or None if the graph is acyclic

    Example:
        find_cycle({"a": ["b"], "b": ["a"]})  # ["a", "b", "a"]
        find_cycle({"a": [], "b": ["a"]})     # None
    """
    color: dict[str, _Color] = {node: _Color.UNVISITED for node in graph}

    for root in graph:
        if color[root] is not _Color.UNVISITED:
            continue

        # Iterative DFS; each frame is (node, iterator over its dependencies)
        path: list[str] = [root]
        stack = [(root, iter(graph[root]))]
        color[root] = _Color.VISITING

        while stack:
            node, deps = stack[-1]
            advanced = False
            for dep in deps:
                if dep not in color:
                    continue
                if color[dep] is _Color.VISITING:
                    start = path.index(dep)
                    return path[start:] + [dep]
                if color[dep] is _Color.UNVISITED:
                    color[dep] = _Color.VISITING
                    path.append(dep)
                    stack.append((dep, iter(graph[dep])))
                    advanced = True
                    break

            if not advanced:
                color[node] = _Color.VISITED
                path.pop()
                stack.pop()

    return None


def validate_synapse(synapse: Synapse) -> None:
    """Validate a synapse's structure.

    Raises:
        EmptyNameError: Name is blank
        NoNeuronsError: No neurons declared
        DuplicateNeuronError: A neuron name appears twice
        DanglingDependencyError: A dependency names an unknown neuron
        CircularDependencyError: Dependencies form a cycle
    """
    if not synapse.name or not synapse.name.strip():
        raise EmptyNameError()

    if not synapse.neurons:
        raise NoNeuronsError(synapse.name)

    seen: set[str] = set()
    for ref in synapse.neurons:
        if ref.name in seen:
            raise DuplicateNeuronError(ref.name)
        seen.add(ref.name)

    for ref in synapse.neurons:
        for dep in ref.depends_on:
            if dep not in seen:
                raise DanglingDependencyError(ref.name, dep)

    cycle = find_cycle(dependency_graph(synapse))
    if cycle is not None:
        raise CircularDependencyError(cycle)


__all__ = ["dependency_graph", "find_cycle", "validate_synapse"]
