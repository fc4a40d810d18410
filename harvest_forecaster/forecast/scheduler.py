"""
Capacity-constrained harvest scheduling.

Greedy FIFO over aggregate mass: the backlog is seeded with the mass already
ready at day 0, each day adds that day's newly ready mass, and up to the
daily capacity is picked. Nothing is discarded; whatever the horizon cannot
clear is reported as the closing backlog.

All quantities are integer grams.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence

# Integers below this convert to float exactly.
_EXACT_FLOAT_INT = 2 ** 53


@dataclass(frozen=True)
class HarvestSchedule:
    """Outcome of one scheduling pass.

    Attributes:
        harvest_g:  Grams picked on each horizon day.
        backlog_g:  Grams still ready but unpicked after the last day.
    """

    harvest_g: list[int]
    backlog_g: int

    @property
    def total_harvest_g(self) -> int:
        return sum(self.harvest_g)


def capacity_grams(capacity_kg: float) -> int:
    """Daily ceiling in whole grams.

    The result is the largest gram count whose reported mass,
    ``grams / 1000.0``, does not exceed ``capacity_kg``. The floor is taken
    on the exact value of the float, so nothing rounds up past the stated
    capacity.
    """
    grams = math.floor(Fraction(capacity_kg) * 1000)
    # Recover the gram whose kg float equals capacity_kg (1.001 kg -> 1001 g).
    if grams < _EXACT_FLOAT_INT and (grams + 1) / 1000.0 <= capacity_kg:
        grams += 1
    return grams


def schedule_harvest(
    initial_backlog_g: int,
    arrivals_g: Sequence[int],
    capacity_g: int,
) -> HarvestSchedule:
    """Pick up to ``capacity_g`` per day from a first-in-first-out backlog.

    Args:
        initial_backlog_g: Mass ready before the first horizon day.
        arrivals_g:        Mass becoming ready on each horizon day.
        capacity_g:        Daily ceiling; must be positive.

    Returns:
        ``HarvestSchedule`` with one entry per arrival day.

    Raises:
        ValueError: If ``capacity_g`` is not positive.
    """
    if capacity_g <= 0:
        raise ValueError(f"capacity_g must be positive, got {capacity_g}.")

    backlog = max(0, initial_backlog_g)
    harvested: list[int] = []
    for arrival in arrivals_g:
        backlog += max(0, arrival)
        picked = min(backlog, capacity_g)
        harvested.append(picked)
        backlog -= picked
    return HarvestSchedule(harvest_g=harvested, backlog_g=backlog)
