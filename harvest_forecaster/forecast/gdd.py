"""
Growing-degree-day accumulation.

``gdd_i = max(0, T_i - base)``; the running total starts at zero before the
first horizon day and never decreases.
"""

from __future__ import annotations

from bisect import bisect_left
from typing import Optional, Sequence

# Absorbs float drift when a running total lands exactly on a threshold.
_GDD_TOLERANCE = 1e-9


def daily_gdd(mean_temp_c: float, base_c: float) -> float:
    """Degree-days contributed by one day."""
    return max(0.0, mean_temp_c - base_c)


def accumulate_gdd(temperatures: Sequence[float], base_c: float) -> list[float]:
    """Return the cumulative degree-days at the end of each day."""
    cumulative: list[float] = []
    total = 0.0
    for temp in temperatures:
        total += daily_gdd(temp, base_c)
        cumulative.append(total)
    return cumulative


def first_day_reaching(cumulative: Sequence[float], required: float) -> Optional[int]:
    """Index of the first day whose running total meets ``required``.

    ``cumulative`` must be non-decreasing. Returns ``None`` if the total
    never reaches ``required`` within the sequence.
    """
    idx = bisect_left(cumulative, required - _GDD_TOLERANCE)
    return idx if idx < len(cumulative) else None


def mean_daily_gdd(cumulative: Sequence[float]) -> float:
    """Average daily gain over the sequence (``0.0`` when empty)."""
    if not cumulative:
        return 0.0
    return cumulative[-1] / len(cumulative)
