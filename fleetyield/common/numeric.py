"""
Numeric helpers shared by the calculators.
"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 always rounds up (towards +inf)."""
    return int(math.floor(value + 0.5))


def round_to_multiple(value: float, unit: float) -> float:
    """Round to the nearest multiple of `unit`, .5 of a unit rounds up."""
    return math.floor(value / unit + 0.5) * unit


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
