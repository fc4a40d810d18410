"""
Detection snapshot models.

A ``DetectionResult`` is produced once per analysed image by the upstream
vision model and is read-only from then on. The forecaster consumes only
``stage_counts`` (and ``detections`` / ``confidence`` for advisories); the
remaining fields are carried for display.

Counts are deliberately permissive: the upstream model is an opaque external
service, so negative or inconsistent counts are accepted here and sanitised by
the forecast engine instead of being rejected at construction.

Field names are snake_case in Python; the camelCase names used by the web
client (``stageCounts``, ``growthStage``, ...) are accepted as aliases.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Stage(str, Enum):
    """Per-object ripeness class emitted by the detector."""

    IMMATURE = "immature"
    RIPENING = "ripening"
    MATURE = "mature"
    FLOWER = "flower"


class GrowthStage(str, Enum):
    """Plant-level summary label derived from the stage counts."""

    IMMATURE = "Immature"
    RIPENING = "Ripening"
    MATURE = "Mature"


class DetectionBox(BaseModel):
    """One detected object.

    Attributes:
        box: ``(x1, y1, x2, y2)`` as fractions of the image size.
        stage: Ripeness class of the object.
    """

    model_config = ConfigDict(frozen=True)

    box: tuple[float, float, float, float]
    stage: Stage

    @property
    def area(self) -> float:
        x1, y1, x2, y2 = self.box
        return max(0.0, x2 - x1) * max(0.0, y2 - y1)


class StageCounts(BaseModel):
    """Object counts per ripeness stage.

    ``flower`` is only populated by detector variants that also count
    flowers; flowers are not fruit and never contribute mass.
    """

    model_config = ConfigDict(frozen=True)

    immature: int = 0
    ripening: int = 0
    mature: int = 0
    flower: int = 0

    @property
    def fruit_total(self) -> int:
        """Sum of the three fruit stages, as reported (may include negatives)."""
        return self.immature + self.ripening + self.mature


class DetectionResult(BaseModel):
    """Snapshot of one analysed plant image.

    Attributes:
        plant_id: Identifier assigned by the caller.
        detections: Total fruit count reported by the detector.
        boxes: Bounding boxes, when the detector returns them.
        stage_counts: Counts per ripeness stage.
        growth_stage: Summary label for the plant.
        avg_bbox_area: Mean box area as a fraction of the image.
        confidence: Detector confidence, nominally in ``[0, 1]``, or ``None``
            when the detector did not report one. ``None`` is never replaced
            by a synthesised value.
        image_url: Source image reference for display.
        summary: Free-text summary from the detector.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    plant_id: int = 0
    detections: int
    boxes: tuple[DetectionBox, ...] = ()
    stage_counts: StageCounts
    growth_stage: GrowthStage
    avg_bbox_area: float = 0.0
    confidence: Optional[float] = None
    image_url: str = ""
    summary: Optional[str] = None

    @property
    def has_measured_confidence(self) -> bool:
        return self.confidence is not None
