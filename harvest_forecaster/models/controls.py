"""
Grower-supplied forecast controls.

``AppControls`` is immutable for the duration of a forecast run. Numeric
fields are not range-checked here: the forecast engine clamps invalid values
to safe minimums and explains each clamp in ``ForecastResult.notes``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from harvest_forecaster.config import ControlsConfig


class AppControls(BaseModel):
    """Grower configuration for one forecast.

    Attributes:
        avg_weight_g: Average mass of one mature fruit, grams.
        post_harvest_loss_pct: Share of harvested mass lost before sale (0–100).
        num_plants: Plants the per-image detection is scaled to.
        forecast_days: Horizon length in days.
        gdd_base_c: Base temperature for growing-degree-days, °C.
        harvest_capacity_kg_day: Daily harvest ceiling, kg.
        use_detection_model: Whether the detection came from the live model.
        use_live_weather: Whether a live temperature series was requested.
        include_price_forecast: Whether the UI requests market pricing.
        district: Market and climatology lookup key.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    avg_weight_g: float = 85.0
    post_harvest_loss_pct: float = 7.0
    num_plants: int = 10
    forecast_days: int = 14
    gdd_base_c: float = 10.0
    harvest_capacity_kg_day: float = 20.0
    use_detection_model: bool = True
    use_live_weather: bool = False
    include_price_forecast: bool = True
    district: str = "Coimbatore"

    @classmethod
    def from_config(cls, config: ControlsConfig, **overrides) -> "AppControls":
        """Build controls from the ``[controls]`` config section.

        Keyword overrides whose value is ``None`` are ignored so CLI options
        can be passed straight through.
        """
        values = config.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
