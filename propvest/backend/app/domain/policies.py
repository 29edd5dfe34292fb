# app/domain/policies.py
from __future__ import annotations

import math


class InvalidArgument(ValueError):
    """Raised when calculator inputs break a precondition."""


def require_finite(name: str, value: float) -> float:
    if value is None or isinstance(value, bool) or not math.isfinite(float(value)):
        raise InvalidArgument(f"{name} must be a finite number")
    return float(value)


def require_non_negative(name: str, value: float) -> float:
    v = require_finite(name, value)
    if v < 0:
        raise InvalidArgument(f"{name} must be >= 0 (got {v})")
    return v


def require_positive(name: str, value: float) -> float:
    v = require_finite(name, value)
    if v <= 0:
        raise InvalidArgument(f"{name} must be > 0 (got {v})")
    return v


def require_percent(name: str, value: float) -> float:
    """
    Percentages are 0-100, never 0-1.
    """
    v = require_non_negative(name, value)
    if v > 100:
        raise InvalidArgument(f"{name} must be a percentage between 0 and 100 (got {v})")
    return v
