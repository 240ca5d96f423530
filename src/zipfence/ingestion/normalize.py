"""Normalization helpers.

Centralizes defensive parsing of user input and document fields.
"""

from __future__ import annotations

import math
from typing import Any

from zipfence._constants import MAX_RADIUS_MILES, MIN_ZIP_LENGTH
from zipfence.exceptions import InvalidInputError


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def parse_radius(value: Any, *, max_radius: float = MAX_RADIUS_MILES) -> float:
    """Parse a service radius and clamp it to ``[0, max_radius]``.

    Accepts numbers and numeric strings (``"75"`` -> ``50.0``).

    Raises :class:`InvalidInputError` for anything non-numeric.
    """
    parsed = safe_float(value)
    if parsed is None:
        raise InvalidInputError(f"radius must be a number, got {value!r}")
    return clamp(parsed, 0.0, max_radius)


def normalize_zip(value: Any) -> str:
    """Return the trimmed ZIP string (``None`` -> ``""``)."""
    if value is None:
        return ""
    return str(value).strip()


def is_valid_zip(value: str) -> bool:
    """Minimal validity check: non-empty and at least three characters."""
    return len(value) >= MIN_ZIP_LENGTH
