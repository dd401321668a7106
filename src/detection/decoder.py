"""
Decode a raw detection output tensor into candidate boxes.

The output buffer is channel-major with shape [1, C, N]: the value for
candidate c and channel j lives at flat index c + N * j. Channels 0-3 are
cx, cy, w, h (normalized); channels 4..C-1 are per-class scores.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from models.detection import BoundingBox

DEFAULT_CONF_THRESHOLD = 0.5


def decode_output(
    output: Sequence[float],
    num_elements: int,
    num_channels: int,
    labels: Sequence[str],
    conf_threshold: float = DEFAULT_CONF_THRESHOLD,
) -> List[BoundingBox]:
    """
    Decode candidates whose best class score exceeds the confidence threshold.

    Candidates whose box reaches outside the [0, 1] frame are dropped rather
    than clamped. Results are returned in candidate order.

    Args:
        output: Flat float buffer of at least num_channels * num_elements values.
        num_elements: Number of spatial candidates (N).
        num_channels: Channels per candidate (C = 4 + number of classes).
        labels: Class labels, one per class channel.
        conf_threshold: Exclusive lower bound on the best class score.

    Returns:
        List of BoundingBox, possibly empty.
    """
    if num_channels < 5:
        raise ValueError(f"Output needs at least 5 channels, got {num_channels}")

    flat = np.asarray(output, dtype=np.float32).ravel()
    expected = num_channels * num_elements
    if flat.size < expected:
        raise ValueError(f"Output buffer has {flat.size} values, expected {expected}")

    grid = flat[:expected].reshape(num_channels, num_elements)
    scores = grid[4:]

    # argmax keeps the lowest class index on ties
    class_idx = scores.argmax(axis=0)
    max_conf = scores[class_idx, np.arange(num_elements)]

    cx, cy, w, h = grid[0], grid[1], grid[2], grid[3]
    x1 = cx - w / 2
    y1 = cy - h / 2
    x2 = cx + w / 2
    y2 = cy + h / 2

    keep = (max_conf > conf_threshold) & (w >= 0.0) & (h >= 0.0)
    for corner in (x1, y1, x2, y2):
        keep &= (corner >= 0.0) & (corner <= 1.0)

    boxes: List[BoundingBox] = []
    for c in np.flatnonzero(keep):
        k = int(class_idx[c])
        left, top = float(x1[c]), float(y1[c])
        right, bottom = float(x2[c]), float(y2[c])
        # size is taken from the emitted corners so that w == x2 - x1 exactly
        boxes.append(
            BoundingBox(
                x1=left,
                y1=top,
                x2=right,
                y2=bottom,
                cx=float(cx[c]),
                cy=float(cy[c]),
                w=right - left,
                h=bottom - top,
                confidence=float(max_conf[c]),
                class_index=k,
                class_name=labels[k],
            )
        )
    return boxes
