"""
Build ``DetectionResult`` snapshots from upstream analysis output.

The vision model returns either per-stage counts (the image-analysis flow)
or a list of bounding boxes (the detector flow). Both are normalised here
into one ``DetectionResult``. When the model does not report a confidence,
the result carries ``confidence=None`` rather than a synthesised score.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from harvest_forecaster.models.detection import (
    DetectionBox,
    DetectionResult,
    GrowthStage,
    Stage,
    StageCounts,
)


def growth_stage_for(counts: StageCounts) -> GrowthStage:
    """Summarise stage counts as a plant-level label.

    ``Mature`` when more than half the fruit are mature, ``Ripening`` when
    more than a third are ripening, otherwise ``Immature``.
    """
    total = max(0, counts.immature) + max(0, counts.ripening) + max(0, counts.mature)
    if total and counts.mature > total / 2:
        return GrowthStage.MATURE
    if total and counts.ripening > total / 3:
        return GrowthStage.RIPENING
    return GrowthStage.IMMATURE


def build_detection(
    counts: Mapping[str, int],
    *,
    plant_id: int = 0,
    image_url: str = "",
    summary: Optional[str] = None,
    confidence: Optional[float] = None,
) -> DetectionResult:
    """Build a snapshot from per-stage counts.

    Args:
        counts:     Mapping with any of ``immature``, ``ripening``,
                    ``mature``, ``flower``; missing stages count as zero.
        plant_id:   Caller-assigned identifier.
        image_url:  Source image reference.
        summary:    Free-text summary from the model.
        confidence: Reported confidence, or ``None`` when not reported.

    Returns:
        ``DetectionResult`` whose ``detections`` is the fruit total
        (flowers excluded).
    """
    stage_counts = StageCounts(
        immature=int(counts.get(Stage.IMMATURE.value, 0)),
        ripening=int(counts.get(Stage.RIPENING.value, 0)),
        mature=int(counts.get(Stage.MATURE.value, 0)),
        flower=int(counts.get(Stage.FLOWER.value, 0)),
    )
    return DetectionResult(
        plant_id=plant_id,
        detections=stage_counts.fruit_total,
        stage_counts=stage_counts,
        growth_stage=growth_stage_for(stage_counts),
        confidence=confidence,
        image_url=image_url,
        summary=summary,
    )


def detection_from_boxes(
    boxes: Sequence[DetectionBox],
    *,
    plant_id: int = 0,
    image_url: str = "",
    confidence: Optional[float] = None,
) -> DetectionResult:
    """Build a snapshot from bounding boxes.

    Stage counts are tallied from the boxes and ``avg_bbox_area`` is the mean
    box area (``0.0`` when there are no boxes).
    """
    tally = {stage: 0 for stage in Stage}
    for b in boxes:
        tally[b.stage] += 1

    stage_counts = StageCounts(
        immature=tally[Stage.IMMATURE],
        ripening=tally[Stage.RIPENING],
        mature=tally[Stage.MATURE],
        flower=tally[Stage.FLOWER],
    )
    fruit_boxes = [b for b in boxes if b.stage != Stage.FLOWER]
    avg_area = (
        sum(b.area for b in fruit_boxes) / len(fruit_boxes) if fruit_boxes else 0.0
    )
    return DetectionResult(
        plant_id=plant_id,
        detections=len(fruit_boxes),
        boxes=tuple(boxes),
        stage_counts=stage_counts,
        growth_stage=growth_stage_for(stage_counts),
        avg_bbox_area=avg_area,
        confidence=confidence,
        image_url=image_url,
    )
