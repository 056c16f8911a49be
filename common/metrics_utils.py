"""
Shared utilities for benchmark metrics: duration formatting and operation rates.
"""

import logging
from configuration import NANOSECONDS_PER_SECOND

logger = logging.getLogger(__name__)

NANOSECONDS_PER_MICROSECOND = 1_000
NANOSECONDS_PER_MILLISECOND = 1_000_000
NANOSECONDS_PER_MINUTE = 60 * NANOSECONDS_PER_SECOND
NANOSECONDS_PER_HOUR = 60 * NANOSECONDS_PER_MINUTE


def format_duration(seconds: float) -> str:
    """
    Format a duration the way humans read latencies.

    Sub-second values use the largest fitting unit (ns, µs, ms) with trailing
    zeros trimmed; longer values are split into hours, minutes and seconds.

    Examples:
        0.0015  -> "1.5ms"
        0.00025 -> "250µs"
        90.0    -> "1m30s"

    Args:
        seconds: Duration in seconds

    Returns:
        Human readable duration string
    """
    ns = int(round(seconds * NANOSECONDS_PER_SECOND))
    if ns == 0:
        return "0s"

    sign = "-" if ns < 0 else ""
    ns = abs(ns)

    if ns < NANOSECONDS_PER_MICROSECOND:
        return f"{sign}{ns}ns"
    if ns < NANOSECONDS_PER_MILLISECOND:
        return f"{sign}{_fixed(ns, NANOSECONDS_PER_MICROSECOND)}µs"
    if ns < NANOSECONDS_PER_SECOND:
        return f"{sign}{_fixed(ns, NANOSECONDS_PER_MILLISECOND)}ms"

    hours, ns = divmod(ns, NANOSECONDS_PER_HOUR)
    minutes, ns = divmod(ns, NANOSECONDS_PER_MINUTE)

    text = sign
    if hours:
        text += f"{hours}h"
    if hours or minutes:
        text += f"{minutes}m"
    return text + f"{_fixed(ns, NANOSECONDS_PER_SECOND)}s"


def _fixed(value: int, unit: int) -> str:
    """Render value/unit as a decimal without trailing zeros."""
    whole, fraction = divmod(value, unit)
    if not fraction:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{fraction:0{digits}d}".rstrip("0")


def calculate_operations_per_second(operation_count: int, duration_seconds: float) -> int:
    """
    Calculate whole operations per second from a count and a duration.

    Args:
        operation_count: Number of operations in the window
        duration_seconds: Window length in seconds

    Returns:
        Operations per second, truncated to an integer
    """
    if duration_seconds <= 0:
        return 0
    return int(operation_count / duration_seconds)
