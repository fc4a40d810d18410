"""
Open-Meteo client — live daily mean temperatures.

API:   https://api.open-meteo.com/v1/forecast
Docs:  https://open-meteo.com/en/docs

No credentials are required. Request::

    GET /v1/forecast?latitude=11.02&longitude=76.96
        &daily=temperature_2m_mean&timezone=Asia/Kolkata
        &start_date=2026-10-19&end_date=2026-11-01

Response (abridged)::

    {"daily": {"time": ["2026-10-19", ...], "temperature_2m_mean": [26.1, ...]}}

The forecast engine never calls this client. The CLI fetches the series once
and hands it to the engine as plain data; any failure here is logged and
turned into ``None`` so the engine falls back to climatology.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import ClassVar, Optional

import httpx

from harvest_forecaster.weather.climatology import normalize_district

logger = logging.getLogger(__name__)


class OpenMeteoClient:
    """Fetch daily mean temperature forecasts for a district.

    Usage::

        client = OpenMeteoClient()
        temps = client.fetch_for_district("Coimbatore", date(2026, 10, 19), date(2026, 11, 1))

    Attributes:
        base_url:  Forecast endpoint.
        timeout_s: Request timeout in seconds.
        timezone:  Timezone used to bucket days.
    """

    # District headquarters coordinates (lat, lon).
    DISTRICT_COORDS: ClassVar[dict[str, tuple[float, float]]] = {
        "chennai":         (13.0827, 80.2707),
        "coimbatore":      (11.0168, 76.9558),
        "dindigul":        (10.3624, 77.9695),
        "erode":           (11.3410, 77.7172),
        "krishnagiri":     (12.5186, 78.2137),
        "madurai":         (9.9252, 78.1198),
        "salem":           (11.6643, 78.1460),
        "the nilgiris":    (11.4102, 76.6950),
        "tiruchirappalli": (10.7905, 78.7047),
    }

    def __init__(
        self,
        base_url: str = "https://api.open-meteo.com/v1/forecast",
        timeout_s: float = 15.0,
        timezone: str = "Asia/Kolkata",
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialise the client.

        Args:
            base_url:  Forecast endpoint URL.
            timeout_s: Request timeout in seconds.
            timezone:  IANA timezone for daily aggregation.
            client:    Optional preconfigured ``httpx.Client`` (tests inject
                       one with a mock transport).
        """
        self.base_url = base_url
        self.timeout_s = timeout_s
        self.timezone = timezone
        self._client = client

    @classmethod
    def from_config(cls, config) -> "OpenMeteoClient":
        """Build from a ``WeatherConfig`` section."""
        return cls(
            base_url=config.base_url,
            timeout_s=config.timeout_s,
            timezone=config.timezone,
        )

    def fetch_daily_mean_temperatures(
        self,
        latitude: float,
        longitude: float,
        start: date,
        end: date,
    ) -> list[Optional[float]]:
        """Fetch one mean temperature per day from ``start`` to ``end``.

        Days the API omits are returned as ``None``.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx response.
            ValueError:      If the payload lacks the daily temperature block.
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "daily": "temperature_2m_mean",
            "timezone": self.timezone,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        }
        if self._client is not None:
            resp = self._client.get(self.base_url, params=params, timeout=self.timeout_s)
        else:
            resp = httpx.get(self.base_url, params=params, timeout=self.timeout_s)
        resp.raise_for_status()
        return self._parse_daily(resp.json(), start, end)

    def fetch_for_district(
        self,
        district: str,
        start: date,
        end: date,
    ) -> Optional[list[Optional[float]]]:
        """Fetch the series for a known district, or ``None`` on any failure."""
        coords = self.DISTRICT_COORDS.get(normalize_district(district))
        if coords is None:
            logger.warning("No coordinates for district '%s'; skipping live weather.", district)
            return None
        try:
            temps = self.fetch_daily_mean_temperatures(coords[0], coords[1], start, end)
        except httpx.HTTPError as exc:
            logger.warning("Live weather request failed for %s: %s", district, exc)
            return None
        except (ValueError, TypeError) as exc:
            logger.warning("Live weather response for %s unusable: %s", district, exc)
            return None
        logger.info(
            "Fetched %d live temperature day(s) for %s (%s to %s).",
            len(temps), district, start, end,
        )
        return temps

    @staticmethod
    def _parse_daily(payload: dict, start: date, end: date) -> list[Optional[float]]:
        """Align the API's ``daily`` block to the requested date range."""
        daily = payload.get("daily") if isinstance(payload, dict) else None
        if not isinstance(daily, dict):
            raise ValueError("response has no 'daily' block")
        times = daily.get("time")
        means = daily.get("temperature_2m_mean")
        if not isinstance(times, list) or not isinstance(means, list):
            raise ValueError("response lacks 'time' / 'temperature_2m_mean' arrays")

        by_day: dict[date, Optional[float]] = {}
        for raw_day, raw_temp in zip(times, means):
            day = date.fromisoformat(raw_day)
            by_day[day] = float(raw_temp) if raw_temp is not None else None

        n_days = (end - start).days + 1
        result: list[Optional[float]] = []
        for offset in range(n_days):
            day = date.fromordinal(start.toordinal() + offset)
            result.append(by_day.get(day))
        return result
