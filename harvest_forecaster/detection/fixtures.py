"""
Deterministic sample detection.

Used when ``use_detection_model`` is off, so the forecast, export and CLI
paths can be exercised without calling the vision model. The boxes are
fixed; repeated calls return identical snapshots.
"""

from __future__ import annotations

from typing import ClassVar

from harvest_forecaster.detection.builder import detection_from_boxes
from harvest_forecaster.models.detection import DetectionBox, DetectionResult, Stage


class SampleDetection:
    """Fixed detector output for one tomato plant photo."""

    FIXTURE_BOXES: ClassVar[list[tuple[tuple[float, float, float, float], Stage]]] = [
        ((0.12, 0.18, 0.21, 0.27), Stage.MATURE),
        ((0.25, 0.22, 0.33, 0.31), Stage.MATURE),
        ((0.41, 0.15, 0.49, 0.24), Stage.MATURE),
        ((0.55, 0.30, 0.62, 0.38), Stage.MATURE),
        ((0.18, 0.45, 0.26, 0.53), Stage.RIPENING),
        ((0.36, 0.48, 0.43, 0.56), Stage.RIPENING),
        ((0.67, 0.42, 0.74, 0.50), Stage.RIPENING),
        ((0.22, 0.64, 0.28, 0.71), Stage.IMMATURE),
        ((0.47, 0.66, 0.53, 0.72), Stage.IMMATURE),
        ((0.60, 0.61, 0.66, 0.68), Stage.IMMATURE),
        ((0.71, 0.70, 0.76, 0.76), Stage.IMMATURE),
        ((0.80, 0.20, 0.84, 0.24), Stage.FLOWER),
    ]

    @classmethod
    def boxes(cls) -> list[DetectionBox]:
        return [DetectionBox(box=box, stage=stage) for box, stage in cls.FIXTURE_BOXES]


def sample_detection(image_url: str = "", plant_id: int = 1) -> DetectionResult:
    """Return the fixture snapshot tagged with ``image_url`` and ``plant_id``.

    Confidence is left unknown: the fixture is not a measurement.
    """
    return detection_from_boxes(
        SampleDetection.boxes(),
        plant_id=plant_id,
        image_url=image_url,
        confidence=None,
    )
