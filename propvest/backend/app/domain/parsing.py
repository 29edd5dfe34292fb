# app/domain/parsing.py
from __future__ import annotations

import math
import re
from typing import Any

# Everything a form might wrap around a number: currency symbols, thousands
# separators, spaces (incl. non-breaking), percent signs.
_CURRENCY_NOISE = re.compile(r"[£$€,\s %]")


def to_float(x: Any) -> float | None:
    if x is None or x == "":
        return None
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def parse_currency(x: Any) -> float | None:
    """
    "£250,000" -> 250000.0, "1,200.50" -> 1200.5, "" / "abc" -> None.

    Numbers pass straight through. A trailing "k" means thousands ("250k").
    """
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, (int, float)):
        return float(x)

    s = _CURRENCY_NOISE.sub("", str(x)).strip().lower()
    if not s:
        return None

    mult = 1.0
    if s.endswith("k"):
        s, mult = s[:-1], 1000.0

    v = to_float(s)
    if v is None or not math.isfinite(v):
        return None
    return v * mult
