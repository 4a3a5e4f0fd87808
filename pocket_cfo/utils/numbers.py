"""Zero-guarded arithmetic shared by every analytics view"""

import math


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero"""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def safe_percent(numerator: float, denominator: float) -> float:
    """numerator as a percentage of denominator, or 0.0 when the denominator is zero"""
    if denominator == 0:
        return 0.0
    return numerator * 100 / denominator


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round halves upward, the way money amounts are shown.

    Python's round() uses banker's rounding, so 2.5 -> 2; amounts here round 2.5 -> 3.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_amount(value: float) -> int:
    """Whole currency units"""
    return int(math.floor(value + 0.5))
