"""Rate helpers shared by the user and platform aggregators."""

import math
from typing import Union

Number = Union[int, float]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def percentage(part: Number, whole: Number) -> int:
    """Whole-number percentage of part in whole; 0 when whole is not positive."""
    if whole <= 0:
        return 0
    return round_half_up(100 * part / whole)


def ratio(part: Number, whole: Number) -> int:
    """Rounded part/whole; 0 when whole is not positive."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole)


def growth(recent: int, previous: int) -> int:
    """
    Period-over-period growth in percent.

    previous > 0           -> round(100 * (recent - previous) / previous)
    previous == 0, recent  -> 100
    both zero              -> 0
    """
    if previous > 0:
        return round_half_up(100 * (recent - previous) / previous)
    return 100 if recent > 0 else 0
