"""
Shared pytest fixtures for the harvest forecaster test suite.

Provides:
  - ``as_of``: fixed analysis date so horizon dates are reproducible.
  - ``make_detection``: factory for ``DetectionResult`` snapshots from counts.
  - ``controls`` / ``make_controls``: default grower controls and a factory.
  - ``flat_temps``: factory for constant live-temperature series.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest

from harvest_forecaster.models.controls import AppControls
from harvest_forecaster.models.detection import DetectionResult, GrowthStage, StageCounts

AS_OF = date(2026, 3, 1)


@pytest.fixture
def as_of() -> date:
    return AS_OF


@pytest.fixture
def make_detection() -> Callable[..., DetectionResult]:
    """Build a detection whose ``detections`` equals the fruit total by default."""

    def _make(
        mature: int = 0,
        ripening: int = 0,
        immature: int = 0,
        flower: int = 0,
        detections: int | None = None,
        confidence: float | None = 0.9,
    ) -> DetectionResult:
        counts = StageCounts(
            immature=immature, ripening=ripening, mature=mature, flower=flower
        )
        return DetectionResult(
            plant_id=1,
            detections=counts.fruit_total if detections is None else detections,
            stage_counts=counts,
            growth_stage=GrowthStage.RIPENING,
            confidence=confidence,
            image_url="https://example.test/plant.jpg",
        )

    return _make


@pytest.fixture
def make_controls() -> Callable[..., AppControls]:
    def _make(**overrides) -> AppControls:
        return AppControls(**overrides)

    return _make


@pytest.fixture
def controls() -> AppControls:
    """Dashboard default controls."""
    return AppControls()


@pytest.fixture
def flat_temps() -> Callable[[float, int], list[float]]:
    def _make(temp_c: float, days: int) -> list[float]:
        return [temp_c] * days

    return _make
