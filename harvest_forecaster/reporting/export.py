"""
Export helpers for spreadsheet and manual analysis.

All functions write to disk and return the written ``Path``.

CSV exports are flat (no nested objects): ``flatten_forecast_for_export()``
joins ``daily`` and ``harvest_plan`` on date into one row per horizon day.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

from harvest_forecaster.models.forecast import ForecastResult

FORECAST_CSV_COLUMNS = ["date", "ready_kg", "gdd_cum", "harvest_kg"]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def forecast_to_dict(result: ForecastResult) -> dict:
    """JSON-ready dict of a forecast (dates as ISO strings)."""
    return result.model_dump(mode="json")


def flatten_forecast_for_export(result: ForecastResult) -> list[dict]:
    """One row per horizon day with readiness and scheduled harvest.

    Returns:
        Rows with keys ``FORECAST_CSV_COLUMNS``.
    """
    harvest_by_date = {t.date: t.harvest_kg for t in result.harvest_plan}
    return [
        {
            "date":       d.date.isoformat(),
            "ready_kg":   d.ready_kg,
            "gdd_cum":    d.gdd_cum,
            "harvest_kg": harvest_by_date.get(d.date, 0.0),
        }
        for d in result.daily
    ]


def export_forecast(
    result: ForecastResult,
    json_path: Path | None = None,
    csv_path: Path | None = None,
) -> list[Path]:
    """Write the forecast as JSON and/or CSV; returns the paths written."""
    written: list[Path] = []
    if json_path is not None:
        written.append(export_to_json(forecast_to_dict(result), json_path))
    if csv_path is not None:
        written.append(
            export_to_csv(flatten_forecast_for_export(result), csv_path, FORECAST_CSV_COLUMNS)
        )
    return written
