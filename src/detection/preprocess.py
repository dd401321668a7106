"""
Frame preprocessing for the model input tensor.
"""

from __future__ import annotations

import cv2
import numpy as np


def preprocess_frame(
    frame: np.ndarray,
    width: int,
    height: int,
    mean: float = 0.0,
    std: float = 255.0,
) -> np.ndarray:
    """
    Convert a BGR frame into a normalized float32 input tensor.

    Args:
        frame: HxWx3 uint8 frame (BGR).
        width: Model input width.
        height: Model input height.
        mean: Value subtracted from every channel.
        std: Divisor applied after mean subtraction.

    Returns:
        Array of shape (1, height, width, 3), RGB, float32.
    """
    resized = cv2.resize(frame, (width, height), interpolation=cv2.INTER_NEAREST)
    rgb = cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
    tensor = (rgb.astype(np.float32) - mean) / std
    return tensor[np.newaxis, ...]
