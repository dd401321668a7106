"""
Object detector: preprocessing, inference, decoding and suppression.

The detector drives one inference engine. Results are pushed to a listener
instead of being returned, and the raw frame plus the surviving boxes are
handed to any registered frame callbacks (e.g. the capture orchestrator).

Calls to detect() must be serialized by the caller (one frame worker). A
detector that has not been set up, or has been cleared, drops frames silently.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional

import numpy as np

from inference.backend import InferenceEngine
from models.detection import BoundingBox
from .decoder import DEFAULT_CONF_THRESHOLD, decode_output
from .labels import load_labels, validate_labels
from .listener import DetectorListener
from .nms import DEFAULT_IOU_THRESHOLD, non_max_suppression
from .preprocess import preprocess_frame

FrameCallback = Callable[[np.ndarray, List[BoundingBox]], None]


class ObjectDetector:
    """
    Example:
        detector = ObjectDetector(engine, "config/labels.txt", listener)
        detector.setup()
        detector.add_callback(orchestrator.handle)
        for frame_data in source:
            detector.detect(frame_data.frame)
        detector.clear()
    """

    def __init__(
        self,
        engine: InferenceEngine,
        labels_path: str,
        listener: DetectorListener,
        conf_threshold: float = DEFAULT_CONF_THRESHOLD,
        iou_threshold: float = DEFAULT_IOU_THRESHOLD,
        input_mean: float = 0.0,
        input_std: float = 255.0,
    ):
        self._engine: Optional[InferenceEngine] = engine
        self.labels_path = labels_path
        self.listener = listener
        self.conf_threshold = conf_threshold
        self.iou_threshold = iou_threshold
        self.input_mean = input_mean
        self.input_std = input_std

        self.labels: List[str] = []
        self.tensor_width = 0
        self.tensor_height = 0
        self.num_channels = 0
        self.num_elements = 0

        self._lock = threading.Lock()
        self._callbacks: List[FrameCallback] = []

    def setup(self) -> None:
        """
        Read tensor shapes from the engine and load the label list.

        Raises:
            LabelMismatchError: If the labels do not match the class channels.
        """
        if self._engine is None:
            raise RuntimeError("Detector has been cleared")

        input_shape = self._engine.input_shape
        output_shape = self._engine.output_shape
        num_channels = int(output_shape[1])

        labels = load_labels(self.labels_path)
        validate_labels(labels, num_channels)

        self.labels = labels
        self.tensor_width = int(input_shape[1])
        self.tensor_height = int(input_shape[2])
        self.num_channels = num_channels
        self.num_elements = int(output_shape[2])

        logging.info(
            f"Detector ready: input={self.tensor_width}x{self.tensor_height}, "
            f"channels={self.num_channels}, candidates={self.num_elements}, "
            f"classes={len(self.labels)}"
        )

    def add_callback(self, callback: FrameCallback) -> None:
        """
        Add a callback to be called with (frame, boxes) for every non-empty result.
        """
        self._callbacks.append(callback)

    @property
    def is_ready(self) -> bool:
        return self._engine is not None and all(
            (self.tensor_width, self.tensor_height, self.num_channels, self.num_elements)
        )

    def detect(self, frame: np.ndarray) -> bool:
        """
        Run detection on one frame and notify the listener.

        Returns:
            False if the frame was dropped because the detector is not ready.
        """
        with self._lock:
            if not self.is_ready:
                logging.debug("Detector not ready, frame dropped")
                return False

            start = time.monotonic()
            input_tensor = preprocess_frame(
                frame,
                self.tensor_width,
                self.tensor_height,
                mean=self.input_mean,
                std=self.input_std,
            )
            output = self._engine.run(input_tensor)
            boxes = decode_output(
                output,
                self.num_elements,
                self.num_channels,
                self.labels,
                conf_threshold=self.conf_threshold,
            )
            if boxes:
                boxes = non_max_suppression(boxes, iou_threshold=self.iou_threshold)
            inference_time_ms = int((time.monotonic() - start) * 1000)

        if not boxes:
            self.listener.on_empty_detect()
            return True

        self.listener.on_detect(boxes, inference_time_ms)

        for callback in self._callbacks:
            try:
                callback(frame, boxes)
            except Exception as e:
                logging.warning(f"Frame callback error: {e}")

        return True

    def clear(self) -> None:
        """Release the inference engine. Later detect() calls are no-ops."""
        with self._lock:
            if self._engine is not None:
                self._engine.close()
                self._engine = None
        logging.info("Detector cleared")
