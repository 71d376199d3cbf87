"""Lenient number parsing for set fields.

Weights and reps are kept as the text the user typed. A value counts as
numeric when it starts with a number: ``"12.5kg"`` reads as 12.5 and
``"10.5"`` as 10 reps, while ``""`` and ``"abc"`` are not numbers.
"""
import math
import re

_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def parse_float(value) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if not value:
        return None
    m = _FLOAT_PREFIX.match(value)
    if not m:
        return None
    number = float(m.group(1))
    return number if math.isfinite(number) else None


def parse_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if not value:
        return None
    m = _INT_PREFIX.match(value)
    return int(m.group(1)) if m else None


def round_half_up(x: float) -> int:
    # round() is banker's rounding; displayed metrics round .5 upwards
    return math.floor(x + 0.5)
