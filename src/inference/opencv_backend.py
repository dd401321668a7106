"""
OpenCV DNN inference engine.

Loads an exported detection model (ONNX or any format cv2.dnn reads) and
exposes it through the fixed-shape InferenceEngine contract. cv2.dnn does not
report tensor shapes up front, so the input size comes from configuration and
the output shape is discovered with one warm-up pass at load time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import cv2
import numpy as np


@dataclass(frozen=True)
class OpenCvDnnConfig:
    model: str
    input_width: int = 640
    input_height: int = 640


class OpenCvDnnEngine:
    def __init__(self, cfg: OpenCvDnnConfig):
        self.cfg = cfg
        try:
            self._net: Optional[cv2.dnn.Net] = cv2.dnn.readNet(cfg.model)
        except cv2.error as e:
            raise RuntimeError(f"Failed to load model {cfg.model}: {e}") from e

        self._input_shape = [1, cfg.input_width, cfg.input_height, 3]
        warmup = np.zeros((1, cfg.input_height, cfg.input_width, 3), dtype=np.float32)
        out = self._forward(warmup)
        self._output_shape = self._normalize_output_shape(out.shape)
        logging.info(
            f"OpenCV DNN engine loaded: model={cfg.model}, "
            f"input={self._input_shape}, output={self._output_shape}"
        )

    @staticmethod
    def _normalize_output_shape(shape: Sequence[int]) -> List[int]:
        dims = [int(d) for d in shape]
        if len(dims) == 2:
            dims = [1] + dims
        if len(dims) != 3:
            raise RuntimeError(f"Unsupported output tensor shape: {dims}")
        return dims

    @property
    def input_shape(self) -> List[int]:
        return list(self._input_shape)

    @property
    def output_shape(self) -> List[int]:
        return list(self._output_shape)

    def _forward(self, input_tensor: np.ndarray) -> np.ndarray:
        if self._net is None:
            raise RuntimeError("Engine has been closed")
        # NHWC -> NCHW
        blob = np.ascontiguousarray(input_tensor.transpose(0, 3, 1, 2), dtype=np.float32)
        self._net.setInput(blob)
        return self._net.forward()

    def run(self, input_tensor: np.ndarray) -> np.ndarray:
        out = self._forward(input_tensor)
        return np.asarray(out, dtype=np.float32).ravel()

    def close(self) -> None:
        self._net = None
