"""Tests for duration parsing and formatting."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from cortex.core.duration import format_duration, parse_duration


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("0", 0.0),
        ("5s", 5.0),
        ("1.5s", 1.5),
        ("300ms", 0.3),
        ("2m30s", 150.0),
        ("1h", 3600.0),
        ("1h2m3.5s", 3723.5),
        ("250us", 0.00025),
        ("1µs", 0.000001),
        ("10ns", 0.00000001),
        ("-1s", -1.0),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", ["", "5", "s", "5x", "1s junk", "soon", "1.s.5"])
def test_parse_duration_rejects_invalid(text):
    with pytest.raises(ValueError):
        parse_duration(text)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "0s"),
        (0.5, "500ms"),
        (1, "1s"),
        (2, "2s"),
        (120, "2m0s"),
        (3723.5, "1h2m3.5s"),
        (0.00002, "20µs"),
        (-1.5, "-1.5s"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


@pytest.mark.property
@given(millis=st.integers(min_value=1, max_value=10_000_000))
def test_formatted_durations_parse_back(millis):
    """Whatever format_duration prints, parse_duration reads back."""
    seconds = millis / 1000
    assert parse_duration(format_duration(seconds)) == pytest.approx(seconds, abs=1e-6)
