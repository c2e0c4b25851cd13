"""
Shared utility functions for AnaMon.
"""

import math


def clamp(value: float, low: float, high: float) -> float:
    """
    Clamp value to the inclusive range [low, high].
    """
    if low > high:
        low, high = high, low
    return max(low, min(high, value))


def clamp_optional(value: float, low: float = None, high: float = None) -> float:
    """Clamp against either bound when it is set."""
    if low is not None:
        value = max(low, value)
    if high is not None:
        value = min(high, value)
    return value


def relax(current: float, target: float, rate: float) -> float:
    """
    First-order exponential smoothing step.

    Moves `current` a fraction `rate` of the way toward `target`.
    """
    return current + (target - current) * rate


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with .5 rounding toward +inf.

    Matches monitor display conventions; Python's round() uses banker's rounding.
    """
    return int(math.floor(value + 0.5))


def symmetric_noise(rng, width: float) -> float:
    """Uniform noise in [-width/2, +width/2] from the given generator."""
    if width <= 0.0:
        return 0.0
    half = width / 2.0
    return float(rng.uniform(-half, half))
