"""Small numeric helpers shared across the learning core."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5)


def percentage(part: int, total: int) -> int:
    """Whole-number percentage of part/total; 0 when total is 0."""
    if total <= 0:
        return 0
    return round_half_up(part / total * 100)
