"""
Yield forecast engine.

``forecast(detection, controls, as_of=...)`` turns one detection snapshot
and the grower's controls into a multi-day harvest projection:

  1. Ready-now mass from the mature count, scaled to the plant count.
  2. Growing-degree-day accumulation over the horizon.
  3. Daily ready mass as ripening and immature cohorts cross their
     degree-day requirements.
  4. Sellable total after post-harvest loss (applied once).
  5. Capacity-constrained FIFO harvest schedule.

The function is pure and total. Invalid controls and malformed detections
are clamped to safe values and every clamp is explained in ``notes``; the
caller never sees an exception for a structurally valid input. Dates are
derived from the explicit ``as_of`` argument, never from the wall clock.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Optional, Sequence

from harvest_forecaster.config import ForecastSettings
from harvest_forecaster.forecast.gdd import accumulate_gdd, mean_daily_gdd
from harvest_forecaster.forecast.phenology import build_cohorts, days_to_harvest
from harvest_forecaster.forecast.projector import project_ready_mass
from harvest_forecaster.forecast.scheduler import capacity_grams, schedule_harvest
from harvest_forecaster.models.controls import AppControls
from harvest_forecaster.models.detection import DetectionResult
from harvest_forecaster.models.forecast import DailyForecast, ForecastResult, HarvestTask
from harvest_forecaster.utils.time_utils import horizon_dates
from harvest_forecaster.weather.series import resolve_temperatures

logger = logging.getLogger(__name__)

DEFAULT_GDD_BASE_C = 10.0


def forecast(
    detection: DetectionResult,
    controls: AppControls,
    *,
    as_of: date,
    live_temperatures: Optional[Sequence[Optional[float]]] = None,
    settings: ForecastSettings = ForecastSettings(),
) -> ForecastResult:
    """Project harvest readiness and a harvest schedule.

    Args:
        detection:         Snapshot from one analysed image.
        controls:          Grower configuration.
        as_of:             Analysis date; ``daily`` starts the day after.
        live_temperatures: Pre-fetched daily mean temperatures (°C) aligned
                           to the horizon, or ``None`` when unavailable.
        settings:          Engine parameters (phenology thresholds,
                           fallback temperature, reference sample size).

    Returns:
        A fresh ``ForecastResult``.
    """
    notes: list[str] = []

    # ── Controls ──────────────────────────────────────────────────────────────
    days = controls.forecast_days
    if days < 1:
        notes.append(f"Forecast horizon of {days} day(s) is invalid; using 1 day.")
        days = 1

    epsilon = settings.capacity_epsilon_kg
    capacity_kg = controls.harvest_capacity_kg_day
    if not math.isfinite(capacity_kg) or capacity_kg < epsilon:
        notes.append(
            f"Harvest capacity of {capacity_kg} kg/day is invalid; "
            f"using the minimum of {epsilon} kg/day."
        )
        capacity_kg = epsilon

    avg_weight_g = controls.avg_weight_g
    if not math.isfinite(avg_weight_g) or avg_weight_g <= 0:
        notes.append(
            f"Average fruit weight of {avg_weight_g} g is invalid; "
            "no fruit mass can be projected."
        )
        avg_weight_g = 0.0

    loss_pct = controls.post_harvest_loss_pct
    if not math.isfinite(loss_pct):
        notes.append(f"Post-harvest loss of {loss_pct}% is invalid; assuming no loss.")
        loss_pct = 0.0
    elif not 0.0 <= loss_pct <= 100.0:
        clamped = min(100.0, max(0.0, loss_pct))
        notes.append(f"Post-harvest loss of {loss_pct}% is out of range; using {clamped}%.")
        loss_pct = clamped

    num_plants = controls.num_plants
    if num_plants < 1:
        notes.append(f"Plant count of {num_plants} is invalid; using 1 plant.")
        num_plants = 1

    base_c = controls.gdd_base_c
    if not math.isfinite(base_c):
        notes.append(
            f"GDD base temperature of {base_c} °C is invalid; using {DEFAULT_GDD_BASE_C} °C."
        )
        base_c = DEFAULT_GDD_BASE_C

    # ── Detection ─────────────────────────────────────────────────────────────
    counts = detection.stage_counts
    immature, ripening, mature = counts.immature, counts.ripening, counts.mature
    negatives = [
        name for name, value in
        (("immature", immature), ("ripening", ripening), ("mature", mature))
        if value < 0
    ]
    if negatives:
        notes.append(
            f"Negative stage counts ({', '.join(negatives)}) were treated as zero."
        )
        immature, ripening, mature = max(0, immature), max(0, ripening), max(0, mature)

    fruit_total = immature + ripening + mature
    if fruit_total == 0:
        notes.append("No fruit detected in the image; the forecast shows zero yield.")
    elif detection.detections != fruit_total:
        notes.append(
            f"Detection total ({detection.detections}) does not match the stage counts "
            f"({fruit_total}); using the stage counts."
        )

    if detection.confidence is None:
        notes.append("Detection confidence is unknown; treat the counts as unverified.")
    elif detection.confidence < settings.low_confidence_threshold:
        notes.append(
            f"Detection confidence is low ({detection.confidence:.0%}); "
            "counts may be unreliable."
        )

    # ── Step 1: ready-now mass ────────────────────────────────────────────────
    grams_per_fruit = 0.0
    if avg_weight_g > 0:
        try:
            grams_per_fruit = avg_weight_g * num_plants / settings.reference_sample_size
            peak_g = grams_per_fruit * max(fruit_total, 1)
        except OverflowError:
            peak_g = math.inf
        if not math.isfinite(peak_g):
            notes.append(
                f"Average fruit weight of {avg_weight_g} g across {num_plants} plant(s) "
                "gives a mass too large to represent; no fruit mass can be projected."
            )
            grams_per_fruit = 0.0
    yield_now_g = int(round(mature * grams_per_fruit)) if grams_per_fruit else 0

    # ── Step 2: degree-day accumulation ───────────────────────────────────────
    dates = horizon_dates(as_of, days)
    series = resolve_temperatures(
        controls.district,
        dates,
        live=live_temperatures,
        use_live=controls.use_live_weather,
        fallback_c=settings.fallback_temp_c,
    )
    notes.extend(series.notes)
    cumulative = accumulate_gdd(series.values, base_c)

    # ── Step 3: daily ready mass ──────────────────────────────────────────────
    cohorts = build_cohorts(immature, ripening, settings.phenology)
    projection = project_ready_mass(cohorts, cumulative, grams_per_fruit)
    daily_gain = mean_daily_gdd(cumulative)
    for cohort in projection.pending:
        eta = days_to_harvest(cohort.stage, daily_gain, settings.phenology)
        eta_text = (
            f"about {eta} days at the current rate"
            if eta is not None
            else "no progress at current temperatures"
        )
        notes.append(
            f"{cohort.fruit_count} {cohort.stage.value} fruit per image will not be ready "
            f"within {days} day(s) ({eta_text})."
        )

    # ── Step 4: sellable total ────────────────────────────────────────────────
    yield_now_kg = yield_now_g / 1000.0
    ready_kg = [g / 1000.0 for g in projection.ready_g]
    supply_kg = yield_now_kg + sum(ready_kg)
    sellable_kg = supply_kg * (1.0 - loss_pct / 100.0)

    # ── Step 5: harvest schedule ──────────────────────────────────────────────
    schedule = schedule_harvest(yield_now_g, projection.ready_g, capacity_grams(capacity_kg))
    if schedule.backlog_g > 0:
        notes.append(
            f"Harvest capacity of {capacity_kg:g} kg/day cannot clear the ready fruit "
            f"within {days} day(s); {schedule.backlog_g / 1000.0:g} kg will remain unharvested."
        )

    daily = tuple(
        DailyForecast(date=day, ready_kg=ready, gdd_cum=round(gdd, 6))
        for day, ready, gdd in zip(dates, ready_kg, cumulative)
    )
    harvest_plan = tuple(
        HarvestTask(date=day, harvest_kg=picked / 1000.0)
        for day, picked in zip(dates, schedule.harvest_g)
    )

    logger.debug(
        "Forecast as_of=%s days=%d yield_now=%.3fkg sellable=%.3fkg backlog=%.3fkg "
        "temps=%s notes=%d",
        as_of, days, yield_now_kg, sellable_kg,
        schedule.backlog_g / 1000.0, series.source, len(notes),
    )

    return ForecastResult(
        yield_now_kg=yield_now_kg,
        sellable_kg=sellable_kg,
        daily=daily,
        harvest_plan=harvest_plan,
        notes=tuple(notes),
        unharvested_kg=schedule.backlog_g / 1000.0,
        temperature_source=series.source,
    )
