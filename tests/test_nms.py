"""
Tests for IoU and non-max suppression.
"""

import pytest

from detection.decoder import decode_output
from detection.nms import calculate_iou, non_max_suppression
from models.detection import BoundingBox
from conftest import LABELS, make_output


def _box(x1, y1, x2, y2, confidence=0.9, class_name="truck"):
    return BoundingBox(
        x1=x1, y1=y1, x2=x2, y2=y2,
        cx=(x1 + x2) / 2, cy=(y1 + y2) / 2, w=x2 - x1, h=y2 - y1,
        confidence=confidence, class_index=LABELS.index(class_name), class_name=class_name,
    )


class TestIoUCalculation:
    def test_iou_identical_boxes(self):
        box = _box(0.1, 0.2, 0.4, 0.6)
        assert calculate_iou(box, box) == 1.0

    def test_iou_no_overlap(self):
        assert calculate_iou(_box(0.0, 0.0, 0.2, 0.2), _box(0.5, 0.5, 0.7, 0.7)) == 0.0

    def test_iou_touching_edges(self):
        assert calculate_iou(_box(0.0, 0.0, 0.2, 0.2), _box(0.2, 0.0, 0.4, 0.2)) == 0.0

    def test_iou_partial_overlap(self):
        # Intersection 0.1x0.2, union 2*(0.2x0.2) - 0.02 => 1/3
        iou = calculate_iou(_box(0.0, 0.0, 0.2, 0.2), _box(0.1, 0.0, 0.3, 0.2))
        assert iou == pytest.approx(1 / 3)

    def test_iou_contained(self):
        iou = calculate_iou(_box(0.0, 0.0, 0.4, 0.4), _box(0.1, 0.1, 0.3, 0.3))
        assert iou == pytest.approx(0.25)

    @pytest.mark.parametrize("a,b", [
        ((0.0, 0.0, 0.2, 0.2), (0.1, 0.0, 0.3, 0.2)),
        ((0.1, 0.1, 0.5, 0.9), (0.3, 0.0, 0.6, 0.4)),
        ((0.0, 0.0, 1.0, 1.0), (0.25, 0.25, 0.5, 0.5)),
        ((0.0, 0.0, 0.1, 0.1), (0.9, 0.9, 1.0, 1.0)),
    ])
    def test_iou_symmetric(self, a, b):
        box_a, box_b = _box(*a), _box(*b)
        assert calculate_iou(box_a, box_b) == calculate_iou(box_b, box_a)

    def test_zero_area_pair_is_zero(self):
        """Degenerate boxes give IoU 0 rather than NaN."""
        point = _box(0.5, 0.5, 0.5, 0.5)
        assert calculate_iou(point, point) == 0.0

    def test_zero_area_against_box(self):
        line = _box(0.5, 0.2, 0.5, 0.6)
        assert calculate_iou(line, _box(0.4, 0.3, 0.6, 0.5)) == 0.0


class TestNonMaxSuppression:
    def test_empty(self):
        assert non_max_suppression([]) == []

    def test_overlapping_keeps_higher_confidence(self):
        weak = _box(0.1, 0.1, 0.5, 0.5, confidence=0.6)
        strong = _box(0.12, 0.12, 0.52, 0.52, confidence=0.9)
        assert calculate_iou(weak, strong) >= 0.4

        result = non_max_suppression([weak, strong])
        assert result == [strong]

    def test_low_overlap_keeps_both(self):
        a = _box(0.0, 0.0, 0.2, 0.2, confidence=0.7)
        b = _box(0.1, 0.0, 0.3, 0.2, confidence=0.8)
        assert calculate_iou(a, b) < 0.4

        result = non_max_suppression([a, b])
        assert result == [b, a]

    def test_iou_exactly_at_threshold_suppresses(self):
        a = _box(0.0, 0.0, 0.2, 0.2, confidence=0.9)
        b = _box(0.1, 0.0, 0.3, 0.2, confidence=0.8)
        iou = calculate_iou(a, b)

        assert non_max_suppression([a, b], iou_threshold=iou) == [a]

    def test_suppression_ignores_class(self):
        truck = _box(0.1, 0.1, 0.5, 0.5, confidence=0.9, class_name="truck")
        bus = _box(0.1, 0.1, 0.5, 0.5, confidence=0.8, class_name="bus")
        assert non_max_suppression([bus, truck]) == [truck]

    def test_ties_keep_input_order(self):
        first = _box(0.0, 0.0, 0.2, 0.2, confidence=0.8)
        second = _box(0.5, 0.5, 0.7, 0.7, confidence=0.8)
        overlapping = _box(0.01, 0.0, 0.21, 0.2, confidence=0.8)

        result = non_max_suppression([first, second, overlapping])
        assert result == [first, second]

    def test_chain_only_removes_against_kept(self):
        """A box suppressed by the winner does not suppress others."""
        a = _box(0.0, 0.0, 0.4, 0.2, confidence=0.9)
        b = _box(0.15, 0.0, 0.55, 0.2, confidence=0.8)
        c = _box(0.3, 0.0, 0.7, 0.2, confidence=0.7)
        assert calculate_iou(a, b) >= 0.4
        assert calculate_iou(a, c) < 0.4

        assert non_max_suppression([a, b, c]) == [a, c]

    def test_idempotent(self):
        boxes = [
            _box(0.1, 0.1, 0.5, 0.5, confidence=0.6),
            _box(0.12, 0.12, 0.52, 0.52, confidence=0.9),
            _box(0.6, 0.6, 0.9, 0.9, confidence=0.7),
            _box(0.62, 0.6, 0.92, 0.9, confidence=0.75),
            _box(0.0, 0.7, 0.1, 0.8, confidence=0.55),
        ]
        once = non_max_suppression(boxes)
        twice = non_max_suppression(once)
        assert twice == once

    def test_decoded_single_box_unchanged(self):
        output = make_output([[0.5, 0.5, 0.2, 0.2, 0.1, 0.9, 0.05, 0.0, 0.0]])
        decoded = decode_output(output, 1, 9, LABELS)

        assert non_max_suppression(decoded) == decoded
