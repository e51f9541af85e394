"""Tests for RetryPolicy backoff math."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from cortex.models import BackoffStrategy, RetryPolicy


def test_default_is_single_attempt():
    assert RetryPolicy.NONE.attempts == 1
    assert RetryPolicy().attempts == 1


@pytest.mark.parametrize("max_attempts", [0, -3])
def test_attempts_never_below_one(max_attempts):
    assert RetryPolicy(max_attempts=max_attempts).attempts == 1


def test_first_attempt_never_waits():
    for backoff in BackoffStrategy:
        policy = RetryPolicy(max_attempts=5, backoff=backoff, initial_delay=3.0)
        assert policy.delay_for_attempt(1) == 0


def test_linear_backoff():
    policy = RetryPolicy(max_attempts=4, backoff=BackoffStrategy.LINEAR, initial_delay=1.0)
    assert [policy.delay_for_attempt(n) for n in range(1, 5)] == [0, 1.0, 2.0, 3.0]


def test_exponential_backoff():
    policy = RetryPolicy(max_attempts=5, backoff=BackoffStrategy.EXPONENTIAL, initial_delay=0.5)
    assert [policy.delay_for_attempt(n) for n in range(1, 6)] == [0, 0.5, 1.0, 2.0, 4.0]


def test_repr_is_readable():
    policy = RetryPolicy(max_attempts=3, backoff=BackoffStrategy.EXPONENTIAL, initial_delay=2.0)
    assert repr(policy) == "RetryPolicy(max_attempts=3, backoff=exponential, initial_delay=2.0)"


@pytest.mark.property
@given(
    backoff=st.sampled_from(list(BackoffStrategy)),
    initial_delay=st.floats(min_value=0.001, max_value=60, allow_nan=False),
    attempt=st.integers(min_value=2, max_value=20),
)
def test_delays_never_shrink(backoff, initial_delay, attempt):
    policy = RetryPolicy(max_attempts=attempt, backoff=backoff, initial_delay=initial_delay)
    assert policy.delay_for_attempt(attempt) >= policy.delay_for_attempt(attempt - 1)
    assert policy.delay_for_attempt(2) == pytest.approx(initial_delay)
