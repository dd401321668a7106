"""
Inference engine interface.

Engines expose fixed tensor shapes and run synchronously:
- input  [1, W, H, 3] float32
- output [1, C, N] float32, channel-major (C = 4 + num_classes)
"""

from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np


class InferenceEngine(Protocol):
    @property
    def input_shape(self) -> Sequence[int]:
        ...

    @property
    def output_shape(self) -> Sequence[int]:
        ...

    def run(self, input_tensor: np.ndarray) -> np.ndarray:
        """Run one blocking inference pass and return the flat output buffer."""
        ...

    def close(self) -> None:
        ...
