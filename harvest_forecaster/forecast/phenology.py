"""
Ripeness stage to thermal-time mapping.

Each fruit stage needs a fixed amount of accumulated growing-degree-days to
advance: immature → ripening → mature. Fruit currently in a stage is treated
as having just entered it, so a cohort's remaining requirement is the sum of
the thresholds still ahead of it. Mature fruit need nothing further; flowers
are not fruit and have no requirement.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from harvest_forecaster.config import PhenologyConfig
from harvest_forecaster.models.detection import Stage


@dataclass(frozen=True)
class Cohort:
    """Fruit of one stage that ripen together.

    Attributes:
        stage:        Stage the fruit are in at analysis time.
        fruit_count:  Number of fruit in the analysed image.
        gdd_required: Cumulative degree-days until harvest readiness.
    """

    stage: Stage
    fruit_count: int
    gdd_required: float


def gdd_to_harvest(stage: Stage, thresholds: PhenologyConfig) -> Optional[float]:
    """Return the degree-days a fruit of ``stage`` still needs to be ready.

    Returns ``None`` for flowers.
    """
    if stage == Stage.MATURE:
        return 0.0
    if stage == Stage.RIPENING:
        return thresholds.ripening_to_mature_gdd
    if stage == Stage.IMMATURE:
        return thresholds.immature_to_ripening_gdd + thresholds.ripening_to_mature_gdd
    return None


def days_to_harvest(
    stage: Stage,
    mean_daily_gdd: float,
    thresholds: PhenologyConfig,
) -> Optional[int]:
    """Estimate calendar days until ``stage`` fruit are ready.

    Assumes a constant daily degree-day gain of ``mean_daily_gdd``.

    Returns:
        Whole days (``0`` for mature fruit), or ``None`` when the fruit can
        never ripen at that rate (no thermal gain, or a flower).
    """
    required = gdd_to_harvest(stage, thresholds)
    if required is None:
        return None
    if required == 0:
        return 0
    if mean_daily_gdd <= 0 or not math.isfinite(mean_daily_gdd):
        return None
    return math.ceil(required / mean_daily_gdd)


def build_cohorts(
    immature: int,
    ripening: int,
    thresholds: PhenologyConfig,
) -> list[Cohort]:
    """Return the not-yet-mature cohorts, earliest-ripening first.

    Empty cohorts are omitted.
    """
    cohorts: list[Cohort] = []
    for stage, count in ((Stage.RIPENING, ripening), (Stage.IMMATURE, immature)):
        if count > 0:
            cohorts.append(
                Cohort(
                    stage=stage,
                    fruit_count=count,
                    gdd_required=gdd_to_harvest(stage, thresholds),
                )
            )
    return cohorts
