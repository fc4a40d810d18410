"""
ASCII terminal formatters for CLI forecast output.

All formatters accept a ``ForecastResult`` (or parts of it) and return plain
multi-line strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from typing import Sequence

from harvest_forecaster.models.controls import AppControls
from harvest_forecaster.models.detection import DetectionResult
from harvest_forecaster.models.forecast import DailyForecast, ForecastResult, HarvestTask


def format_forecast_summary(
    result: ForecastResult,
    controls: AppControls,
    detection: DetectionResult,
) -> str:
    """Return the headline block: inputs, ready-now and sellable totals."""
    counts = detection.stage_counts
    confidence = (
        f"{detection.confidence:.0%}" if detection.has_measured_confidence else "unknown"
    )
    lines = [
        "=" * 60,
        "  Harvest forecast",
        "=" * 60,
        f"  District:          {controls.district}",
        f"  Plants:            {controls.num_plants}",
        f"  Stage counts:      mature={counts.mature}  ripening={counts.ripening}  "
        f"immature={counts.immature}",
        f"  Growth stage:      {detection.growth_stage.value}",
        f"  Confidence:        {confidence}",
        f"  Temperatures:      {result.temperature_source}",
        "-" * 60,
        f"  Ready now:         {result.yield_now_kg:>10.2f} kg",
        f"  Ripening in range: {result.total_ready_kg - result.yield_now_kg:>10.2f} kg",
        f"  Sellable (net):    {result.sellable_kg:>10.2f} kg",
        f"  Unharvested:       {result.unharvested_kg:>10.2f} kg",
    ]
    return "\n".join(lines)


def format_daily_table(daily: Sequence[DailyForecast]) -> str:
    """One row per horizon day: date, ready mass, cumulative degree-days."""
    header = f"  {'Date':<12}{'Ready kg':>12}{'GDD cum':>12}"
    lines = [header, "  " + "-" * 36]
    for d in daily:
        lines.append(f"  {d.date.isoformat():<12}{d.ready_kg:>12.2f}{d.gdd_cum:>12.1f}")
    return "\n".join(lines)


def format_harvest_plan(
    plan: Sequence[HarvestTask],
    capacity_kg_day: float,
    include_idle_days: bool = False,
) -> str:
    """Harvest schedule with utilisation against the daily capacity.

    Days with nothing to pick are skipped unless ``include_idle_days``.
    """
    header = f"  {'Date':<12}{'Harvest kg':>12}{'Capacity %':>12}"
    lines = [header, "  " + "-" * 36]
    shown = 0
    for task in plan:
        if task.harvest_kg <= 0 and not include_idle_days:
            continue
        util = task.harvest_kg / capacity_kg_day * 100 if capacity_kg_day > 0 else 0.0
        lines.append(
            f"  {task.date.isoformat():<12}{task.harvest_kg:>12.2f}{util:>11.0f}%"
        )
        shown += 1
    if not shown:
        lines.append("  (no harvest scheduled)")
    return "\n".join(lines)


def format_notes(notes: Sequence[str]) -> str:
    """Bulleted advisories, or a single line when there are none."""
    if not notes:
        return "  No advisories."
    return "\n".join(f"  [NOTE] {n}" for n in notes)


def format_forecast_report(
    result: ForecastResult,
    controls: AppControls,
    detection: DetectionResult,
) -> str:
    """Full CLI report: summary, daily table, harvest plan, notes."""
    return "\n\n".join(
        [
            format_forecast_summary(result, controls, detection),
            "  Daily readiness\n" + format_daily_table(result.daily),
            "  Harvest plan\n"
            + format_harvest_plan(result.harvest_plan, controls.harvest_capacity_kg_day),
            "  Notes\n" + format_notes(result.notes),
        ]
    )
