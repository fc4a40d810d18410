"""
Forecast output models.

``ForecastResult`` is recomputed from scratch whenever the controls or the
detection change; it is frozen once produced. Field names match the JSON
consumed by the rendering layer and the market-pricing collaborator, which
reads only ``sellable_kg``.
"""

from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

TemperatureSource = Literal["live", "climatology", "fallback"]


class DailyForecast(BaseModel):
    """Fruit reaching harvest readiness on one horizon day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    ready_kg: float
    gdd_cum: float


class HarvestTask(BaseModel):
    """Mass scheduled for picking on one day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    harvest_kg: float


class ForecastResult(BaseModel):
    """Multi-day harvest projection for one detection snapshot.

    Attributes:
        yield_now_kg: Mature mass ready at day 0, scaled to the plant count.
        sellable_kg: Total supply over the horizon after post-harvest loss,
            including ready fruit the schedule could not clear in time.
        daily: One entry per horizon day, starting the day after analysis.
        harvest_plan: Capacity-constrained schedule on the same dates.
        notes: Human-readable advisories and clamp explanations.
        unharvested_kg: Backlog left after the last horizon day.
        temperature_source: Where the temperature series came from.
    """

    model_config = ConfigDict(frozen=True)

    yield_now_kg: float
    sellable_kg: float
    daily: tuple[DailyForecast, ...]
    harvest_plan: tuple[HarvestTask, ...]
    notes: tuple[str, ...] = ()
    unharvested_kg: float = 0.0
    temperature_source: TemperatureSource = "fallback"

    @model_validator(mode="after")
    def validate_result(self) -> "ForecastResult":
        if self.yield_now_kg < 0 or self.sellable_kg < 0 or self.unharvested_kg < 0:
            raise ValueError("Forecast masses must be non-negative.")
        if not self.daily:
            raise ValueError("daily must contain at least one day.")
        previous = 0.0
        for day in self.daily:
            if day.gdd_cum < previous:
                raise ValueError(
                    f"gdd_cum must be non-decreasing; {day.gdd_cum} follows {previous} "
                    f"on {day.date}."
                )
            previous = day.gdd_cum
        return self

    @property
    def total_ready_kg(self) -> float:
        """Ready-now mass plus all mass ripening within the horizon."""
        return self.yield_now_kg + sum(d.ready_kg for d in self.daily)

    @property
    def total_harvest_kg(self) -> float:
        return sum(t.harvest_kg for t in self.harvest_plan)
