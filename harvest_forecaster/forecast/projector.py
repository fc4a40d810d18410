"""
Daily ready-mass projection.

A cohort's whole mass becomes ready on the first day its degree-day
requirement is met. Masses are returned in whole grams, the scheduling
granularity, so the harvest schedule can conserve them exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from harvest_forecaster.forecast.gdd import first_day_reaching
from harvest_forecaster.forecast.phenology import Cohort


@dataclass(frozen=True)
class ReadyProjection:
    """Per-day ready mass plus the cohorts that miss the horizon.

    Attributes:
        ready_g:   Grams becoming ready on each horizon day.
        pending:   Cohorts still short of their requirement on the last day.
    """

    ready_g: list[int]
    pending: list[Cohort]


def project_ready_mass(
    cohorts: Sequence[Cohort],
    cumulative_gdd: Sequence[float],
    grams_per_fruit: float,
) -> ReadyProjection:
    """Spread cohort masses over the horizon.

    Args:
        cohorts:         Not-yet-mature cohorts.
        cumulative_gdd:  Running degree-day totals, one per horizon day.
        grams_per_fruit: Mass one detected fruit represents after scaling
                         to the plant count.

    Returns:
        ``ReadyProjection`` with ``len(ready_g) == len(cumulative_gdd)``.
    """
    ready = [0.0] * len(cumulative_gdd)
    pending: list[Cohort] = []
    for cohort in cohorts:
        day = first_day_reaching(cumulative_gdd, cohort.gdd_required)
        if day is None:
            pending.append(cohort)
            continue
        if grams_per_fruit:
            ready[day] += cohort.fruit_count * grams_per_fruit
    return ReadyProjection(ready_g=[int(round(g)) for g in ready], pending=pending)
