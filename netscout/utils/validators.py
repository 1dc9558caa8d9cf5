"""
utils/validators.py
Bounds checks for scan settings and Go-style duration parsing.
"""

import math
import re
from typing import Tuple

from netscout.utils.constants import (
    OUTPUT_FORMATS, TIMEOUT_MAX_S, TIMEOUT_MIN_S, WORKERS_MAX, WORKERS_MIN,
)


_DURATION_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s":  1.0,
    "m":  60.0,
    "h":  3600.0,
}


def parse_duration(text: str) -> float:
    """
    Parse a duration such as "2s", "500ms", "1m30s" or "1.5" into seconds.

    A bare number is taken as seconds. Raises ValueError on anything else.
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected duration string, got {type(text).__name__}")

    spec = text.strip()
    if not spec:
        raise ValueError("Duration is empty")

    try:
        seconds = float(spec)
    except ValueError:
        seconds = None
    if seconds is not None:
        if not math.isfinite(seconds):
            raise ValueError(f"Invalid duration: {text!r}")
        return seconds

    pos = 0
    total = 0.0
    for m in _DURATION_RE.finditer(spec):
        if m.start() != pos:
            break
        total += float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()

    if pos != len(spec) or pos == 0:
        raise ValueError(f"Invalid duration: {text!r}")
    return total


def validate_workers(workers: int) -> Tuple[bool, str]:
    """Worker count must be in [1, 10000]."""
    if not isinstance(workers, int) or isinstance(workers, bool):
        return (False, "workers must be an integer")
    if workers < WORKERS_MIN:
        return (False, "workers must be at least 1")
    if workers > WORKERS_MAX:
        return (False, f"workers cannot exceed {WORKERS_MAX} (too many concurrent tasks)")
    return (True, "")


def validate_timeout(timeout_s: float) -> Tuple[bool, str]:
    """Per-probe timeout must be in [1ms, 5min]."""
    if not timeout_s >= TIMEOUT_MIN_S:     # also rejects NaN
        return (False, "timeout must be at least 1ms")
    if timeout_s > TIMEOUT_MAX_S:
        return (False, "timeout cannot exceed 5 minutes")
    return (True, "")


def validate_rate(rate: int) -> Tuple[bool, str]:
    if rate < 0:
        return (False, "rate limit cannot be negative")
    return (True, "")


def validate_format(fmt: str) -> Tuple[bool, str]:
    if fmt not in OUTPUT_FORMATS:
        return (False, f"invalid output format: {fmt} (valid: {', '.join(OUTPUT_FORMATS)})")
    return (True, "")


__all__ = [
    "parse_duration", "validate_workers", "validate_timeout",
    "validate_rate", "validate_format",
]
