"""
Greedy non-max suppression over decoded boxes.
"""

from __future__ import annotations

from typing import Iterable, List

from models.detection import BoundingBox

DEFAULT_IOU_THRESHOLD = 0.4


def calculate_iou(box1: BoundingBox, box2: BoundingBox) -> float:
    """
    Calculate Intersection over Union (IoU) between two boxes.

    Returns:
        IoU value between 0 and 1. Pairs whose union has no area give 0.0.
    """
    x1 = max(box1.x1, box2.x1)
    y1 = max(box1.y1, box2.y1)
    x2 = min(box1.x2, box2.x2)
    y2 = min(box1.y2, box2.y2)

    intersection = max(0.0, x2 - x1) * max(0.0, y2 - y1)
    area1 = (box1.x2 - box1.x1) * (box1.y2 - box1.y1)
    area2 = (box2.x2 - box2.x1) * (box2.y2 - box2.y1)
    union = area1 + area2 - intersection

    if union <= 0:
        return 0.0

    return intersection / union


def non_max_suppression(
    boxes: Iterable[BoundingBox],
    iou_threshold: float = DEFAULT_IOU_THRESHOLD,
) -> List[BoundingBox]:
    """
    Keep the strongest box of every overlapping group.

    Boxes are visited by descending confidence; equal confidences keep their
    input order. A box is dropped when its IoU with an already kept box is
    at least iou_threshold.
    """
    remaining = sorted(boxes, key=lambda b: b.confidence, reverse=True)
    selected: List[BoundingBox] = []

    while remaining:
        best = remaining.pop(0)
        selected.append(best)
        remaining = [b for b in remaining if calculate_iou(best, b) < iou_threshold]

    return selected
