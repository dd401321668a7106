"""
Smoke tests for typed models and adapters.
"""

import time
from dataclasses import FrozenInstanceError
import pytest
import numpy as np

from models.frame import FrameData
from models.detection import BoundingBox
from models.config import Config, CaptureConfig, DetectionConfig, PipelineSettings


def _box(x1, y1, x2, y2, confidence=0.9, class_index=3, class_name="truck"):
    return BoundingBox(
        x1=x1, y1=y1, x2=x2, y2=y2,
        cx=(x1 + x2) / 2, cy=(y1 + y2) / 2, w=x2 - x1, h=y2 - y1,
        confidence=confidence, class_index=class_index, class_name=class_name,
    )


class TestBoundingBox:
    def test_from_center(self):
        box = BoundingBox.from_center(0.5, 0.5, 0.2, 0.4, 0.8, 1, "motorcycle")
        assert box.as_tuple() == pytest.approx((0.4, 0.3, 0.6, 0.7))
        assert box.cx == 0.5
        assert box.w == pytest.approx(0.2)
        assert (box.w, box.h) == (box.x2 - box.x1, box.y2 - box.y1)
        assert box.class_name == "motorcycle"

    def test_area(self):
        box = BoundingBox.from_center(0.5, 0.5, 0.5, 0.2, 0.8, 0, "car")
        assert box.area == pytest.approx(0.1)

    def test_immutable(self):
        box = _box(0.1, 0.1, 0.2, 0.2)
        with pytest.raises(FrozenInstanceError):
            box.x1 = 0.5

    def test_to_pixels_scales_and_rounds(self):
        box = _box(0.256, 0.5, 0.76, 0.75)
        assert box.to_pixels(100, 200) == (26, 100, 76, 150)

    def test_to_pixels_clamps_right_edge(self):
        """A coordinate of 1.0 maps to the last pixel, never past it."""
        box = _box(0.0, 0.0, 1.0, 1.0)
        assert box.to_pixels(100, 50) == (0, 0, 99, 49)


class TestFrameData:
    def test_dimensions_from_array(self):
        data = FrameData(frame=np.zeros((480, 640, 3), dtype=np.uint8), timestamp=time.time())
        assert data.width == 640
        assert data.height == 480
        assert data.size == (640, 480)


class TestConfigModels:
    def test_defaults(self):
        cfg = Config.from_dict({})
        assert cfg.detection.conf_threshold == 0.5
        assert cfg.detection.iou_threshold == 0.4
        assert cfg.detection.input_mean == 0.0
        assert cfg.detection.input_std == 255.0
        assert cfg.capture.trigger_classes == ["truck", "bus", "van"]
        assert cfg.capture.delay_ms == 4000
        assert cfg.pipeline.frame_skip_interval == 1
        assert cfg.pipeline.cancel_pending_on_stop is False

    def test_from_dict(self, valid_config):
        cfg = Config.from_dict(valid_config)
        assert cfg.camera.device_id == 0
        assert cfg.camera.resolution == [1280, 720]
        assert cfg.detection.model_path == "models/test.onnx"
        assert cfg.capture.output_dir == "output/test"
        assert cfg.log_level == "INFO"

    def test_roundtrip(self, valid_config):
        cfg = Config.from_dict(valid_config)
        again = Config.from_dict(cfg.to_dict())
        assert again == cfg

    def test_section_defaults_are_independent(self):
        a = CaptureConfig()
        b = CaptureConfig()
        a.trigger_classes.append("car")
        assert b.trigger_classes == ["truck", "bus", "van"]

    def test_detection_coerces_numbers(self):
        det = DetectionConfig.from_dict({"conf_threshold": 1, "input_std": 128})
        assert isinstance(det.conf_threshold, float)
        assert det.input_std == 128.0

    def test_pipeline_settings(self):
        settings = PipelineSettings.from_dict({"frame_skip_interval": 3})
        assert settings.frame_skip_interval == 3
        assert settings.max_consecutive_failures == 10
