"""Condition gating for neuron references.

The condition language is deliberately tiny: a condition is met when it is
exactly ``<key> == '<value>'`` for some pair in the executor's environment.
There is no parser, no inequality and no boolean composition.
"""

from __future__ import annotations

from collections.abc import Mapping


def evaluate_condition(condition: str, environment: Mapping[str, str]) -> bool:
    """Return True if the condition is empty or matches an environment pair.

    Example:
        evaluate_condition("environment == 'staging'", {"environment": "staging"})  # True
        evaluate_condition("environment == 'staging'", {"environment": "prod"})     # False
        evaluate_condition("", {})                                                  # True
    """
    if not condition:
        return True

    return any(condition == f"{key} == '{value}'" for key, value in environment.items())


__all__ = ["evaluate_condition"]
