"""
Date helpers for forecast horizons.

Forecasts are anchored to an explicit ``as_of`` date supplied by the caller.
Only the CLI boundary reads the wall clock (``today_utc``); everything below
it receives dates as arguments so results are reproducible.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def horizon_dates(as_of: date, days: int) -> list[date]:
    """Return ``days`` consecutive dates starting the day after ``as_of``.

    Args:
        as_of: Analysis date (day 0).
        days: Horizon length.

    Returns:
        ``[as_of + 1, ..., as_of + days]``; empty when ``days < 1``.
    """
    return [as_of + timedelta(days=offset) for offset in range(1, days + 1)]


def parse_iso_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string.

    Raises:
        ValueError: If ``value`` is not an ISO calendar date.
    """
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Expected a date in YYYY-MM-DD format, got '{value}'.") from None


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(tz=timezone.utc)


def today_utc() -> date:
    """Return today's UTC calendar date."""
    return utcnow().date()
