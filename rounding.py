"""
Rounding helpers shared by the calculators.

Whole-number figures (dollars, scores, FPL percentages, ages) round half
away from the floor, so 52.5 becomes 53 everywhere. Python's built-in
round() uses banker's rounding and would turn 52.5 into 52.
"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going up (e.g. 2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))
