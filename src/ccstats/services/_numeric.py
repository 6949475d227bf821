"""Shared clamping and division guards used by every analytics component."""

from __future__ import annotations

import math
from collections.abc import Mapping


def non_negative(value: object) -> float:
    """Coerce a raw number to a finite float >= 0; anything else becomes 0."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int | float):
        number = float(value)
        if math.isfinite(number) and number > 0:
            return number
    return 0.0


def non_negative_int(value: object) -> int:
    """Like non_negative but truncated to an int."""
    return int(non_negative(value))


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` when the denominator is not positive."""
    if denominator <= 0:
        return default
    return numerator / denominator


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_to(value: float, decimals: int) -> float:
    """Round half away from zero, matching how reports display figures."""
    factor = 10**decimals
    return math.floor(abs(value) * factor + 0.5) / factor * (1 if value >= 0 else -1)


def percent_change(current: float, previous: float) -> float:
    """Percentage change, +100 from zero to a positive value, 0 from zero to zero."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def active_tool_count(tool_usage: Mapping[str, object]) -> int:
    """Number of tools invoked at least once."""
    return sum(1 for count in tool_usage.values() if non_negative_int(count) > 0)
