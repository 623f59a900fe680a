"""
Numeric guards shared by the aggregation and regression code.

Every ratio, average and percentage in the engine goes through these helpers
so that empty inputs resolve to 0 instead of NaN or ZeroDivisionError.
"""
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

Number = Union[int, float]


def finite_or(value: Number, default: float = 0.0) -> float:
    """Return ``value`` as float, or ``default`` for NaN/inf."""
    value = float(value)
    return value if math.isfinite(value) else default


def safe_div(numerator: Number, denominator: Number, default: float = 0.0) -> float:
    """Divide, resolving a zero or non-finite denominator to ``default``."""
    if not denominator or not math.isfinite(denominator):
        return default
    return finite_or(numerator / denominator, default)


def clamp(value: Number, lower: Number, upper: Number) -> float:
    if not math.isfinite(value):
        return float(lower)
    return float(max(lower, min(upper, value)))


def clamp01(value: Number) -> float:
    return clamp(value, 0.0, 1.0)


def round_half_up(value: Number, ndigits: int = 0) -> float:
    """Round halves away from zero (``round`` in Python rounds halves to even)."""
    if not math.isfinite(value):
        return 0.0
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percent(part: Number, whole: Number) -> int:
    """Integer percentage of ``part`` in ``whole``; 0 when ``whole`` is 0."""
    return int(round_half_up(safe_div(part, whole) * 100))


def mean_or_zero(values: Iterable[Number]) -> float:
    items = [float(v) for v in values]
    return safe_div(sum(items), len(items))
