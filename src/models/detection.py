"""
Detection models for decoded model output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


def _to_pixel(value: float, dimension: int) -> int:
    """Scale a normalized coordinate to a pixel index inside [0, dimension - 1]."""
    px = int(value * dimension + 0.5)
    return min(max(px, 0), dimension - 1)


@dataclass(frozen=True)
class BoundingBox:
    """
    A single decoded detection, normalized to the model input frame.

    Attributes:
        x1: Left edge (0-1).
        y1: Top edge (0-1).
        x2: Right edge (0-1).
        y2: Bottom edge (0-1).
        cx: Center x as read from the output tensor.
        cy: Center y as read from the output tensor.
        w: Width, always exactly x2 - x1.
        h: Height, always exactly y2 - y1.
        confidence: Best per-class score for the candidate cell.
        class_index: Index into the label list.
        class_name: Resolved label.
    """
    x1: float
    y1: float
    x2: float
    y2: float
    cx: float
    cy: float
    w: float
    h: float
    confidence: float
    class_index: int
    class_name: str

    @property
    def area(self) -> float:
        return self.w * self.h

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x1, self.y1, self.x2, self.y2)

    def to_pixels(self, width: int, height: int) -> Tuple[int, int, int, int]:
        """
        Project the corners onto a frame of the given pixel size.

        Each corner is rounded and clamped to a valid pixel index, so a
        coordinate of 1.0 on a 100px wide frame maps to 99.
        """
        return (
            _to_pixel(self.x1, width),
            _to_pixel(self.y1, height),
            _to_pixel(self.x2, width),
            _to_pixel(self.y2, height),
        )

    @classmethod
    def from_center(
        cls,
        cx: float,
        cy: float,
        w: float,
        h: float,
        confidence: float,
        class_index: int,
        class_name: str,
    ) -> "BoundingBox":
        """Create from center/size, deriving the corners. Size is recomputed from them."""
        x1, y1 = cx - w / 2, cy - h / 2
        x2, y2 = cx + w / 2, cy + h / 2
        return cls(
            x1=x1,
            y1=y1,
            x2=x2,
            y2=y2,
            cx=cx,
            cy=cy,
            w=x2 - x1,
            h=y2 - y1,
            confidence=confidence,
            class_index=class_index,
            class_name=class_name,
        )
