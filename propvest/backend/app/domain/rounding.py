# app/domain/rounding.py
from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round with .5 going up (towards +inf): 0.5 -> 1, 2.5 -> 3, -2.5 -> -2.
    Built-in round() sends ties to the even neighbour instead.
    """
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale
