"""Tests for harvest_forecaster.forecast.phenology."""

from __future__ import annotations

import pytest

from harvest_forecaster.config import PhenologyConfig
from harvest_forecaster.forecast.phenology import (
    Cohort,
    build_cohorts,
    days_to_harvest,
    gdd_to_harvest,
)
from harvest_forecaster.models.detection import Stage

THRESHOLDS = PhenologyConfig(immature_to_ripening_gdd=250.0, ripening_to_mature_gdd=100.0)


class TestGddToHarvest:
    def test_mature_needs_nothing(self):
        assert gdd_to_harvest(Stage.MATURE, THRESHOLDS) == 0.0

    def test_ripening_needs_final_threshold(self):
        assert gdd_to_harvest(Stage.RIPENING, THRESHOLDS) == 100.0

    def test_immature_needs_both_thresholds(self):
        assert gdd_to_harvest(Stage.IMMATURE, THRESHOLDS) == 350.0

    def test_flower_has_no_requirement(self):
        assert gdd_to_harvest(Stage.FLOWER, THRESHOLDS) is None


class TestDaysToHarvest:
    def test_mature_is_zero_days(self):
        assert days_to_harvest(Stage.MATURE, 0.0, THRESHOLDS) == 0

    def test_rounds_up_partial_days(self):
        # 100 / 15 = 6.67 → 7 days
        assert days_to_harvest(Stage.RIPENING, 15.0, THRESHOLDS) == 7

    def test_exact_division(self):
        assert days_to_harvest(Stage.IMMATURE, 17.5, THRESHOLDS) == 20

    @pytest.mark.parametrize("gain", [0.0, -3.0, float("inf")])
    def test_no_usable_gain(self, gain):
        assert days_to_harvest(Stage.RIPENING, gain, THRESHOLDS) is None

    def test_flower_never_ready(self):
        assert days_to_harvest(Stage.FLOWER, 20.0, THRESHOLDS) is None


class TestBuildCohorts:
    def test_ripening_first(self):
        cohorts = build_cohorts(immature=4, ripening=2, thresholds=THRESHOLDS)
        assert cohorts == [
            Cohort(stage=Stage.RIPENING, fruit_count=2, gdd_required=100.0),
            Cohort(stage=Stage.IMMATURE, fruit_count=4, gdd_required=350.0),
        ]

    def test_empty_cohorts_omitted(self):
        assert build_cohorts(immature=0, ripening=3, thresholds=THRESHOLDS) == [
            Cohort(stage=Stage.RIPENING, fruit_count=3, gdd_required=100.0),
        ]
        assert build_cohorts(immature=0, ripening=0, thresholds=THRESHOLDS) == []
