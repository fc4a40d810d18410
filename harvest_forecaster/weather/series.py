"""
Day-indexed temperature series resolution.

The forecast engine never performs I/O: a live series, when one exists, is
fetched at the boundary and passed in as plain data. This module turns that
optional series into exactly one value per horizon day.

Preference order per day:
  1. Live value (finite entries only, and only when live weather is on).
  2. Climatological normal for the district and month.
  3. The configured flat fallback temperature.

Every substitution is explained in ``TemperatureSeries.notes``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from harvest_forecaster.models.forecast import TemperatureSource
from harvest_forecaster.weather.climatology import has_normals, normal_temperature


@dataclass(frozen=True)
class TemperatureSeries:
    """Resolved mean temperatures, one per horizon day.

    Attributes:
        values: Mean temperature (°C) per day.
        source: ``"live"`` if any live value was used, otherwise the
                source of the fill values.
        notes:  Advisories describing substitutions.
    """

    values: tuple[float, ...]
    source: TemperatureSource
    notes: tuple[str, ...] = ()


def resolve_temperatures(
    district: str,
    dates: Sequence[date],
    *,
    live: Optional[Sequence[Optional[float]]] = None,
    use_live: bool = False,
    fallback_c: float = 25.0,
) -> TemperatureSeries:
    """Build a complete temperature series for ``dates``.

    Args:
        district:   Climatology lookup key.
        dates:      Horizon dates, in order.
        live:       Pre-fetched live means aligned to ``dates``; may be
                    shorter than the horizon or contain gaps (``None``/NaN).
        use_live:   Whether the grower asked for live weather. A live
                    series is only used when this is set.
        fallback_c: Flat temperature when the district has no normals.
    """
    notes: list[str] = []
    climatology = has_normals(district)
    fill_source: TemperatureSource = "climatology" if climatology else "fallback"
    fill_label = (
        f"climatological normals for {district}"
        if climatology
        else f"a flat {fallback_c:.1f} °C fallback"
    )

    def fill(day: date) -> float:
        normal = normal_temperature(district, day)
        return fallback_c if normal is None else normal

    if live is not None and not use_live:
        notes.append("Live weather is switched off; ignoring the supplied live series.")
        live = None

    values: list[float] = []
    live_used = 0
    gaps = 0
    live_values = list(live) if live is not None else []

    for idx, day in enumerate(dates):
        if idx < len(live_values):
            raw = live_values[idx]
            if raw is not None and math.isfinite(raw):
                values.append(float(raw))
                live_used += 1
                continue
            gaps += 1
        values.append(fill(day))

    if live is None:
        if use_live:
            notes.append(f"Live weather unavailable; using {fill_label}.")
    else:
        if gaps:
            notes.append(
                f"Live weather had {gaps} missing day(s); filled with {fill_label}."
            )
        if len(live_values) < len(dates):
            notes.append(
                f"Live weather covers {min(len(live_values), len(dates))} of "
                f"{len(dates)} days; remaining days use {fill_label}."
            )

    if not climatology and live_used < len(dates):
        notes.append(
            f"No climatological normals for district '{district}'; "
            f"using a flat {fallback_c:.1f} °C where live data is missing."
        )

    source: TemperatureSource = "live" if live_used else fill_source
    return TemperatureSeries(values=tuple(values), source=source, notes=tuple(notes))
