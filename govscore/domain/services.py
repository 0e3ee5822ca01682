from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")


def clamp(value: float, lower: float, upper: float) -> float:
    """Pin ``value`` into ``[lower, upper]``; NaN collapses to ``lower``."""
    if math.isnan(value):
        return lower
    return min(max(value, lower), upper)


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round halves away from negative infinity.

    Python's ``round`` uses banker's rounding, which would turn an overall
    feasibility of 60.5 into 60. Scores and money are reported with
    half-up rounding so 60.5 becomes 61.

    Non-finite input (an overflowed intermediate) collapses to ``0.0`` so
    reported figures are never infinite or NaN.
    """
    if not math.isfinite(value):
        return 0.0
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(round_half_up(value))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` instead of NaN/Infinity on a zero denominator."""
    if denominator == 0:
        return default
    return numerator / denominator


def dedupe(items: Iterable[str]) -> list[str]:
    """First-seen ordering without repeats."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def band_lookup(value: float, bands: Sequence[tuple[float, T]], default: T) -> T:
    """
    Map ``value`` onto the first band whose floor it reaches.

    ``bands`` must be ordered by descending floor, e.g.
    ``((80, "high"), (60, "moderate"))``. Values below every floor get ``default``.
    """
    for floor, label in bands:
        if value >= floor:
            return label
    return default


def validate_descending_bands(bands: Sequence[tuple[float, object]], name: str) -> None:
    floors = [floor for floor, _ in bands]
    if any(a <= b for a, b in zip(floors, floors[1:])):
        raise ValueError(f"{name} floors must be strictly descending")


def validate_weights(weights: dict[str, float], name: str, tolerance: float = 1e-9) -> None:
    if any(w <= 0 for w in weights.values()):
        raise ValueError(f"{name} must all be positive")
    total = sum(weights.values())
    if abs(total - 1.0) > tolerance:
        raise ValueError(f"{name} must sum to 1.0 (got {total:.6f})")


def format_number(value: float) -> str:
    """Render integral floats without a trailing ``.0`` (``85.0`` -> ``"85"``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
