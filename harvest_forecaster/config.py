"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``HARVEST_FORECASTER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The forecast engine receives a ``ForecastSettings`` instance (the
``[forecast]`` section), never raw dicts or env var lookups.
"""

from __future__ import annotations

import math
import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class ControlsConfig(BaseModel):
    """Default grower controls used when the CLI is not given overrides."""

    model_config = ConfigDict(frozen=True)

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


class PhenologyConfig(BaseModel):
    """Thermal-time thresholds for ripeness stage transitions.

    Tomato defaults, base 10 °C: roughly three weeks from green fruit to
    breaker and about a week from breaker to red ripe in a warm season.
    """

    model_config = ConfigDict(frozen=True)

    immature_to_ripening_gdd: float = 250.0
    ripening_to_mature_gdd: float = 100.0

    @field_validator("immature_to_ripening_gdd", "ripening_to_mature_gdd")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"GDD thresholds must be positive, got {v}.")
        return v


class ForecastSettings(BaseModel):
    """Engine parameters that are not grower controls."""

    model_config = ConfigDict(frozen=True)

    phenology: PhenologyConfig = PhenologyConfig()
    fallback_temp_c: float = 25.0
    reference_sample_size: int = 1       # plants represented by one image
    capacity_epsilon_kg: float = 0.001   # one gram; the scheduling granularity
    low_confidence_threshold: float = 0.5

    @field_validator("fallback_temp_c")
    @classmethod
    def validate_fallback(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"fallback_temp_c must be a finite number, got {v}.")
        return v

    @field_validator("reference_sample_size")
    @classmethod
    def validate_sample_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"reference_sample_size must be >= 1, got {v}.")
        return v

    @field_validator("capacity_epsilon_kg")
    @classmethod
    def validate_epsilon(cls, v: float) -> float:
        if v < 0.001:
            raise ValueError(
                f"capacity_epsilon_kg must be at least 0.001 (one gram), got {v}."
            )
        return v

    @field_validator("low_confidence_threshold")
    @classmethod
    def validate_confidence_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"low_confidence_threshold must be in [0, 1], got {v}.")
        return v


class WeatherConfig(BaseModel):
    """Live-weather collaborator settings."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.open-meteo.com/v1/forecast"
    timeout_s: float = 15.0
    timezone: str = "Asia/Kolkata"

    @model_validator(mode="after")
    def validate_timeout(self) -> "WeatherConfig":
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive, got {self.timeout_s}.")
        return self


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    controls: ControlsConfig = ControlsConfig()
    forecast: ForecastSettings = ForecastSettings()
    weather: WeatherConfig = WeatherConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply HARVEST_FORECASTER_* env vars to the raw config dict.

    Supported overrides:
      HARVEST_FORECASTER_LOG_LEVEL        → raw["logging"]["level"]
      HARVEST_FORECASTER_DISTRICT         → raw["controls"]["district"]
      HARVEST_FORECASTER_FALLBACK_TEMP_C  → raw["forecast"]["fallback_temp_c"]
      HARVEST_FORECASTER_DEBUG            → raw["debug"]
    """
    if log_level := os.environ.get("HARVEST_FORECASTER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if district := os.environ.get("HARVEST_FORECASTER_DISTRICT"):
        raw.setdefault("controls", {})["district"] = district

    if fallback := os.environ.get("HARVEST_FORECASTER_FALLBACK_TEMP_C"):
        raw.setdefault("forecast", {})["fallback_temp_c"] = fallback

    if debug := os.environ.get("HARVEST_FORECASTER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})
    forecast_raw = dict(raw.get("forecast", {}))
    phenology = PhenologyConfig(**forecast_raw.pop("phenology", {}))

    return AppConfig(
        controls=ControlsConfig(**raw.get("controls", {})),
        forecast=ForecastSettings(phenology=phenology, **forecast_raw),
        weather=WeatherConfig(**raw.get("weather", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
