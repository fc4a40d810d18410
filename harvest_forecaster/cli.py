"""
Harvest Forecaster — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action.
  5. Report result to stdout.

Install and run::

    pip install -e .
    harvest-forecaster --help
    harvest-forecaster validate-config
    harvest-forecaster sample-detection --output data/sample_detection.json
    harvest-forecaster forecast --detection data/sample_detection.json --as-of 2026-10-18
    harvest-forecaster forecast --mature 5 --ripening 3 --immature 8 --live-weather
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="harvest-forecaster",
    help="Tomato yield and harvest-schedule forecaster.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from harvest_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from harvest_forecaster.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_detection_or_exit(path: Path):
    """Parse a DetectionResult JSON file, exiting with code 1 on failure."""
    from pydantic import ValidationError

    from harvest_forecaster.models.detection import DetectionResult

    if not path.exists():
        typer.echo(f"[ERROR] Detection file not found: {path}", err=True)
        raise typer.Exit(code=1)
    try:
        return DetectionResult.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid detection file {path}:\n{exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    phen = config.forecast.phenology
    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  District:          {config.controls.district}")
    typer.echo(f"  Forecast days:     {config.controls.forecast_days}")
    typer.echo(f"  Capacity kg/day:   {config.controls.harvest_capacity_kg_day}")
    typer.echo(f"  GDD base (C):      {config.controls.gdd_base_c}")
    typer.echo(
        f"  GDD thresholds:    immature->ripening {phen.immature_to_ripening_gdd}, "
        f"ripening->mature {phen.ripening_to_mature_gdd}"
    )
    typer.echo(f"  Fallback temp (C): {config.forecast.fallback_temp_c}")
    typer.echo(f"  Log level:         {config.logging.level}")
    typer.echo(f"  Debug mode:        {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("sample-detection")
def sample_detection_cmd(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the sample detection JSON here instead of stdout.",
    ),
    image_url: str = typer.Option("", "--image-url", help="Image reference to embed."),
) -> None:
    """Emit the deterministic sample detection used in mock-data mode."""
    from harvest_forecaster.detection.fixtures import sample_detection

    detection = sample_detection(image_url=image_url)
    payload = detection.model_dump_json(by_alias=True, indent=2)
    if output:
        out = Path(output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(payload, encoding="utf-8")
        typer.echo(f"[OK] Sample detection written to {out}")
    else:
        typer.echo(payload)


@app.command("forecast")
def forecast_cmd(
    detection_file: Optional[str] = typer.Option(
        None,
        "--detection",
        "-d",
        help="DetectionResult JSON file (camelCase or snake_case keys).",
    ),
    mature: Optional[int] = typer.Option(None, "--mature", help="Mature fruit count."),
    ripening: Optional[int] = typer.Option(None, "--ripening", help="Ripening fruit count."),
    immature: Optional[int] = typer.Option(None, "--immature", help="Immature fruit count."),
    confidence: Optional[float] = typer.Option(
        None, "--confidence", help="Detector confidence in [0, 1] for count input."
    ),
    as_of: Optional[str] = typer.Option(
        None, "--as-of", help="Analysis date YYYY-MM-DD (default: today, UTC)."
    ),
    days: Optional[int] = typer.Option(None, "--days", help="Forecast horizon in days."),
    capacity: Optional[float] = typer.Option(
        None, "--capacity", help="Harvest capacity, kg/day."
    ),
    plants: Optional[int] = typer.Option(None, "--plants", help="Number of plants."),
    weight: Optional[float] = typer.Option(
        None, "--weight", help="Average fruit weight, grams."
    ),
    loss: Optional[float] = typer.Option(
        None, "--loss", help="Post-harvest loss, percent."
    ),
    base_temp: Optional[float] = typer.Option(
        None, "--base-temp", help="GDD base temperature, C."
    ),
    district: Optional[str] = typer.Option(None, "--district", help="District name."),
    live_weather: Optional[bool] = typer.Option(
        None,
        "--live-weather/--no-live-weather",
        help="Fetch live temperatures (default from config).",
    ),
    output_format: str = typer.Option(
        "table", "--format", help="Output format: 'table' or 'json'."
    ),
    export_json: Optional[str] = typer.Option(
        None, "--export-json", help="Also write the forecast JSON to this path."
    ),
    export_csv: Optional[str] = typer.Option(
        None, "--export-csv", help="Also write a per-day CSV to this path."
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Forecast ready mass, sellable supply and a harvest schedule.

    \b
    Detection input, in order of precedence:
      --detection FILE          a DetectionResult JSON file
      --mature/--ripening/...   stage counts typed on the command line
      (neither)                 the deterministic sample detection
    """
    from harvest_forecaster.detection.builder import build_detection
    from harvest_forecaster.detection.fixtures import sample_detection
    from harvest_forecaster.forecast.engine import forecast
    from harvest_forecaster.models.controls import AppControls
    from harvest_forecaster.reporting.export import export_forecast, forecast_to_dict
    from harvest_forecaster.reporting.formatters import format_forecast_report
    from harvest_forecaster.utils.time_utils import horizon_dates, parse_iso_date, today_utc
    from harvest_forecaster.weather.open_meteo_client import OpenMeteoClient

    if output_format not in ("table", "json"):
        typer.echo(
            f"[ERROR] --format must be 'table' or 'json', got '{output_format}'.", err=True
        )
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        as_of_date = parse_iso_date(as_of) if as_of else today_utc()
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    controls = AppControls.from_config(
        config.controls,
        forecast_days=days,
        harvest_capacity_kg_day=capacity,
        num_plants=plants,
        avg_weight_g=weight,
        post_harvest_loss_pct=loss,
        gdd_base_c=base_temp,
        district=district,
        use_live_weather=live_weather,
    )

    if detection_file:
        detection = _load_detection_or_exit(Path(detection_file))
    elif any(v is not None for v in (mature, ripening, immature)):
        detection = build_detection(
            {
                "mature": mature or 0,
                "ripening": ripening or 0,
                "immature": immature or 0,
            },
            confidence=confidence,
        )
    else:
        typer.echo("No detection input given; using the sample detection.", err=True)
        detection = sample_detection()

    live_temps = None
    if controls.use_live_weather:
        dates = horizon_dates(as_of_date, max(1, controls.forecast_days))
        client = OpenMeteoClient.from_config(config.weather)
        live_temps = client.fetch_for_district(controls.district, dates[0], dates[-1])

    result = forecast(
        detection,
        controls,
        as_of=as_of_date,
        live_temperatures=live_temps,
        settings=config.forecast,
    )

    if output_format == "json":
        typer.echo(json.dumps(forecast_to_dict(result), indent=2))
    else:
        typer.echo(format_forecast_report(result, controls, detection))

    written = export_forecast(
        result,
        json_path=Path(export_json) if export_json else None,
        csv_path=Path(export_csv) if export_csv else None,
    )
    for path in written:
        typer.echo(f"[OK] Exported {path}", err=output_format == "json")


if __name__ == "__main__":
    app()
