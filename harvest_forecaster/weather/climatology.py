"""
Climatological daily mean temperatures by district.

Approximate monthly normals (°C, mean of daily max and min) for the Tamil
Nadu districts the market-pricing collaborator covers. Used when no live
series is available. Index 0 is January.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

MONTHLY_MEAN_TEMP_C: dict[str, tuple[float, ...]] = {
    "chennai":         (24.9, 26.1, 28.1, 30.4, 32.7, 32.3, 31.0, 30.4, 29.9, 28.3, 26.3, 25.2),
    "coimbatore":      (24.0, 25.6, 27.6, 28.6, 28.1, 25.9, 25.1, 25.3, 25.8, 25.6, 24.7, 23.9),
    "dindigul":        (23.9, 25.2, 27.2, 28.4, 28.5, 27.3, 26.7, 26.5, 26.3, 25.4, 24.3, 23.6),
    "erode":           (25.0, 26.9, 29.4, 30.6, 30.1, 28.0, 27.2, 27.2, 27.4, 26.6, 25.3, 24.5),
    "krishnagiri":     (21.8, 24.0, 26.8, 28.6, 28.5, 26.1, 25.1, 25.0, 25.0, 24.2, 22.6, 21.3),
    "madurai":         (25.9, 27.3, 29.5, 30.9, 31.2, 30.8, 30.1, 29.8, 29.3, 28.0, 26.6, 25.8),
    "salem":           (24.2, 26.2, 28.8, 30.2, 29.7, 27.5, 26.6, 26.5, 26.5, 25.9, 24.5, 23.6),
    "the nilgiris":    (12.5, 13.4, 15.2, 16.5, 16.6, 14.6, 13.8, 14.0, 14.2, 14.3, 13.4, 12.6),
    "tiruchirappalli": (25.7, 27.4, 30.0, 32.0, 32.6, 31.4, 30.6, 30.1, 29.8, 28.3, 26.5, 25.4),
}

# Common alternative spellings.
_ALIASES: dict[str, str] = {
    "nilgiris": "the nilgiris",
    "ooty": "the nilgiris",
    "trichy": "tiruchirappalli",
    "kovai": "coimbatore",
}


def normalize_district(district: str) -> str:
    key = " ".join(district.strip().lower().split())
    return _ALIASES.get(key, key)


def has_normals(district: str) -> bool:
    return normalize_district(district) in MONTHLY_MEAN_TEMP_C


def normal_temperature(district: str, day: date) -> Optional[float]:
    """Return the climatological mean for ``district`` in ``day``'s month.

    Returns ``None`` for districts without normals.
    """
    normals = MONTHLY_MEAN_TEMP_C.get(normalize_district(district))
    if normals is None:
        return None
    return normals[day.month - 1]
