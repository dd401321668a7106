"""
Detection result listeners.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Protocol

from models.detection import BoundingBox


class DetectorListener(Protocol):
    def on_empty_detect(self) -> None:
        ...

    def on_detect(self, boxes: List[BoundingBox], inference_time_ms: int) -> None:
        ...


class LoggingListener:
    """Listener that reports results to the log and keeps running totals."""

    def __init__(self) -> None:
        self.frames_with_detections = 0
        self.empty_frames = 0
        self.class_counts: Counter = Counter()
        self.last_inference_ms = 0

    def on_empty_detect(self) -> None:
        self.empty_frames += 1

    def on_detect(self, boxes: List[BoundingBox], inference_time_ms: int) -> None:
        self.frames_with_detections += 1
        self.last_inference_ms = inference_time_ms
        self.class_counts.update(b.class_name for b in boxes)
        summary = ", ".join(f"{b.class_name}:{b.confidence:.2f}" for b in boxes)
        logging.debug(f"[DETECT] {len(boxes)} boxes in {inference_time_ms}ms ({summary})")
