"""
FrameData model for frames handed to the detector.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass
class FrameData:
    """
    A captured video frame.

    Attributes:
        frame: Pixel data as an HxWx3 numpy array (BGR).
        timestamp: Unix timestamp when the frame was read.
        frame_index: Sequential frame number since the source was opened.
        source: Identifier of the producing source.
    """
    frame: np.ndarray
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @property
    def width(self) -> int:
        return int(self.frame.shape[1])

    @property
    def height(self) -> int:
        return int(self.frame.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
