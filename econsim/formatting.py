"""
Display formatting for metric values.

These helpers are pure value -> string converters keyed off
MetricDefinition.format. The UI depends on their exact output:

    percent   3.14159  -> "3.1%"
    currency  4.5      -> "$4.50"
    integer   199.6    -> "200"
    index     72.4     -> "72/100"

Rounding is half-up at every precision ("0.25" -> "0.3", 2.5 -> 3), the
convention dashboards use, rather than Python's round-half-even.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from .schemas import MetricDefinition

IndexLabel = Literal["High", "Medium", "Low"]

_PERCENT_KEYS = ("inflation", "gdpGrowth", "unemployment", "governmentDebt")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward +infinity."""
    return math.floor(value + 0.5)


def to_fixed(value: float, digits: int) -> str:
    """Fixed-point string with half-up rounding on the exact value."""
    if value == 0:
        value = 0.0  # drop the sign of -0.0
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_metric_value(value: float, metric: MetricDefinition) -> str:
    """Format a single metric value for display."""
    if metric.format == "percent":
        return f"{to_fixed(value, 1)}%"
    if metric.format == "currency":
        return f"${to_fixed(value, 2)}"
    if metric.format == "integer":
        return str(round_half_up(value))
    if metric.format == "index":
        return f"{round_half_up(value)}/100"
    return _plain(value)


def format_metric_delta(delta: float, metric: MetricDefinition) -> str:
    """Signed change for round summaries ("+$12.00", "-1.5%", "+40")."""
    sign = "+" if delta >= 0 else "-"
    if metric.format == "currency":
        return f"{sign}${to_fixed(abs(delta), 2)}"
    if metric.format == "percent":
        return f"{'+' if delta >= 0 else ''}{to_fixed(delta, 1)}%"
    return f"{'+' if delta >= 0 else ''}{round_half_up(delta)}"


def _plain(value: float) -> str:
    """Shortest plain rendering; integral floats print without ".0"."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def get_index_label(value: float) -> IndexLabel:
    """Satisfaction-style label for a 0-100 index."""
    if value >= 70:
        return "High"
    if value >= 40:
        return "Medium"
    return "Low"


def format_state_value(key: str, value: float) -> str:
    """Format by metric key when no MetricDefinition is available.

    Covers the macroeconomic keys only. Prefer format_metric_value.
    """
    if key in _PERCENT_KEYS:
        return f"{to_fixed(value, 1)}%"
    if key == "publicConfidence":
        return f"{round_half_up(value)}/100"
    return _plain(value)
