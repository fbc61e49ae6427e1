from __future__ import annotations

import math
from typing import Any


def coerce_positive_int(value: Any, default: int, maximum: int | None = None) -> int:
    """Return ``value`` as a positive int, or ``default`` when it is not one.

    Non-finite numbers fall back to ``default``; values above ``maximum`` are
    clamped to it.
    """
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        try:
            number = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return default
    if number <= 0:
        return default
    if maximum is not None and number > maximum:
        return maximum
    return number


def coerce_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
