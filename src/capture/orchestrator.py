"""
Evidence capture triggered by detection results.

When a frame contains a trigger class (truck, bus, van by default), the full
frame is saved right away and a zoomed crop of the triggering box is saved
after a fixed delay. Both files share one timestamp:

    IMG_<timestamp>.jpg
    IMG_<timestamp>_zoom.jpg

Consecutive triggering frames are not deduplicated; each starts its own
sequence, so sequences may overlap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, List, Optional

import cv2
import numpy as np

from models.config import DEFAULT_TRIGGER_CLASSES
from models.detection import BoundingBox
from storage.images import ImageStore
from .scheduler import ScheduledTask, Scheduler

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_CAPTURE_DELAY_MS = 4000


def original_filename(timestamp: str) -> str:
    return f"IMG_{timestamp}.jpg"


def zoom_filename(timestamp: str) -> str:
    return f"IMG_{timestamp}_zoom.jpg"


def zoom_region(frame: np.ndarray, box: BoundingBox) -> np.ndarray:
    """
    Crop the box region from a frame and scale it back up to the frame size.

    Pixel corners are clamped to the frame and the crop is at least 1x1.
    """
    height, width = frame.shape[:2]
    x1, y1, x2, y2 = box.to_pixels(width, height)

    crop_w = max(1, x2 - x1)
    crop_h = max(1, y2 - y1)
    cropped = frame[y1:y1 + crop_h, x1:x1 + crop_w]

    return cv2.resize(cropped, (width, height), interpolation=cv2.INTER_LINEAR)


@dataclass
class CaptureSequence:
    """State of one two-phase capture."""
    timestamp: str
    box: BoundingBox
    original_path: Optional[str] = None
    zoom_path: Optional[str] = None
    task: Optional[ScheduledTask] = None
    completed: bool = False


class CaptureOrchestrator:
    """
    Watches detection results and schedules two-phase captures.

    Register handle() as a detector frame callback.
    """

    def __init__(
        self,
        store: ImageStore,
        scheduler: Scheduler,
        trigger_classes: Iterable[str] = DEFAULT_TRIGGER_CLASSES,
        delay_ms: int = DEFAULT_CAPTURE_DELAY_MS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.scheduler = scheduler
        self.trigger_classes = frozenset(trigger_classes)
        self.delay_ms = delay_ms
        self._clock = clock
        self.sequences_started = 0

    def find_trigger(self, boxes: List[BoundingBox]) -> Optional[BoundingBox]:
        """Return the first box in scan order whose class is a trigger class."""
        for box in boxes:
            if box.class_name in self.trigger_classes:
                return box
        return None

    def handle(self, frame: np.ndarray, boxes: List[BoundingBox]) -> Optional[CaptureSequence]:
        """
        Start a capture sequence if any box is a trigger class.

        The original frame is written synchronously; the zoom capture runs on
        the scheduler with its own copy of the frame.
        """
        box = self.find_trigger(boxes)
        if box is None:
            return None

        timestamp = self._clock().strftime(TIMESTAMP_FORMAT)
        sequence = CaptureSequence(timestamp=timestamp, box=box)
        self.sequences_started += 1
        logging.info(
            f"[CAPTURE] {box.class_name} ({box.confidence:.2f}) triggered capture {timestamp}"
        )

        snapshot = frame.copy()
        sequence.original_path = self.store.save(
            snapshot, original_filename(timestamp), message="Original image saved"
        )

        try:
            sequence.task = self.scheduler.schedule(
                self.delay_ms, lambda: self._capture_zoom(snapshot, sequence)
            )
        except RuntimeError as e:
            logging.warning(f"Zoom capture for {timestamp} not scheduled: {e}")

        return sequence

    def _capture_zoom(self, frame: np.ndarray, sequence: CaptureSequence) -> None:
        zoomed = zoom_region(frame, sequence.box)
        sequence.zoom_path = self.store.save(
            zoomed, zoom_filename(sequence.timestamp), message="Zoomed image saved"
        )
        sequence.completed = True

    def close(self, cancel_pending: bool = False, timeout: Optional[float] = None) -> None:
        """Shut down the scheduler, waiting for or cancelling pending zoom captures."""
        self.scheduler.shutdown(cancel_pending=cancel_pending, timeout=timeout)
