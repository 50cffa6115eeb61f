"""RANKLENS — Numeric Coercion Helpers."""

import math
from typing import Any, Optional


def is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def safe_float(value: Any) -> Optional[float]:
    """Finite float or None."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def safe_count(value: Any) -> int:
    """Non-negative int, 0 for anything unusable."""
    number = safe_float(value)
    return max(int(round(number)), 0) if number is not None else 0
