"""Duration strings in the "1m30s" / "500ms" style.

Synapse timeouts and retry delays are written the way operators write them in
shell tooling: a sequence of decimal numbers each followed by a unit
(ns, us, µs, ms, s, m, h). Values are handled internally as float seconds.
"""

from __future__ import annotations

import re

_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> float:
    """Parse a duration string into seconds.

    Args:
        text: Duration such as "5s", "1.5s", "2m30s", "300ms" or "0"

    Returns:
        Duration in seconds (may be negative with a leading "-")

    Raises:
        ValueError: If the string is empty, has no unit, or has trailing junk

    Example:
        parse_duration("1m30s")  # 90.0
        parse_duration("250ms")  # 0.25
    """
    if not isinstance(text, str):
        raise ValueError(f"duration must be a string, got {type(text).__name__}")

    s = text.strip()
    sign = 1.0
    if s[:1] in ("+", "-"):
        if s[0] == "-":
            sign = -1.0
        s = s[1:]

    if s == "0":
        return 0.0
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        match = _COMPONENT.match(s, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        total += float(number) * _UNITS[unit]
        pos = match.end()

    return sign * total


def _trim(value: float) -> str:
    return f"{value:.9f}".rstrip("0").rstrip(".")


def format_duration(seconds: float) -> str:
    """Render seconds in the same style parse_duration accepts.

    Sub-second values use the largest unit that keeps the number >= 1
    ("500ms", "20µs"); longer values are split into h/m/s ("1h2m3.5s", "2m0s").
    """
    if seconds == 0:
        return "0s"
    if seconds < 0:
        return "-" + format_duration(-seconds)

    if seconds < 1e-6:
        return f"{_trim(seconds * 1e9)}ns"
    if seconds < 1e-3:
        return f"{_trim(seconds * 1e6)}µs"
    if seconds < 1:
        return f"{_trim(seconds * 1e3)}ms"

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    out = ""
    if hours:
        out += f"{int(hours)}h"
    if hours or minutes:
        out += f"{int(minutes)}m"
    return out + f"{_trim(round(secs, 9))}s"


__all__ = ["parse_duration", "format_duration"]
