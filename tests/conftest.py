"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from typing import List, Optional, Sequence

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

LABELS = ["car", "motorcycle", "bus", "truck", "van"]


def make_output(candidates: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Build a flat channel-major output buffer from per-candidate rows.

    Each row is [cx, cy, w, h, score_0, ..., score_k].
    """
    grid = np.asarray(candidates, dtype=np.float32).T  # (C, N)
    return grid.ravel()


class FakeEngine:
    """In-memory inference engine returning a preset output buffer."""

    def __init__(self, output: np.ndarray, num_channels: int, num_elements: int,
                 input_size: int = 32):
        self.output = output
        self._input_shape = [1, input_size, input_size, 3]
        self._output_shape = [1, num_channels, num_elements]
        self.inputs: List[np.ndarray] = []
        self.closed = False

    @property
    def input_shape(self):
        return self._input_shape

    @property
    def output_shape(self):
        return self._output_shape

    def run(self, input_tensor):
        self.inputs.append(input_tensor)
        return self.output

    def close(self):
        self.closed = True


class RecordingListener:
    """Listener collecting every notification."""

    def __init__(self):
        self.empty_calls = 0
        self.results = []

    def on_empty_detect(self):
        self.empty_calls += 1

    def on_detect(self, boxes, inference_time_ms):
        self.results.append((boxes, inference_time_ms))


class ManualScheduler:
    """Scheduler that only runs tasks when the test advances its clock."""

    def __init__(self):
        self.now_ms = 0
        self.tasks = []
        self.shutdown_calls = []

    class _Handle:
        def __init__(self):
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def schedule(self, delay_ms, task):
        handle = self._Handle()
        self.tasks.append([self.now_ms + delay_ms, delay_ms, task, handle, False])
        return handle

    def advance(self, ms):
        self.now_ms += ms
        for entry in self.tasks:
            due, _, task, handle, done = entry
            if not done and not handle.cancelled and due <= self.now_ms:
                entry[4] = True
                task()

    def shutdown(self, cancel_pending=False, timeout=None):
        self.shutdown_calls.append(cancel_pending)


class RecordingStore:
    """ImageStore stand-in that keeps saved images in memory."""

    def __init__(self, clock: Optional[ManualScheduler] = None, fail: bool = False):
        self.saved = []
        self.clock = clock
        self.fail = fail

    def save(self, image, filename, message=None):
        at = self.clock.now_ms if self.clock is not None else None
        self.saved.append((filename, image.copy(), at))
        return None if self.fail else f"/captures/{filename}"


@pytest.fixture
def labels_file(tmp_path):
    path = tmp_path / "labels.txt"
    path.write_text("car\nmotorcycle\n\nbus\ntruck\nvan\n")
    return str(path)


@pytest.fixture
def frame():
    """A 480x640 BGR frame with a gradient so crops are distinguishable."""
    img = np.zeros((480, 640, 3), dtype=np.uint8)
    img[..., 0] = np.arange(640, dtype=np.uint16)[None, :] % 256
    img[..., 1] = np.arange(480, dtype=np.uint16)[:, None] % 256
    return img


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  resolution: [640, 480]
  fps: 30

detection:
  model_path: "models/test.onnx"
  labels_path: "config/labels.txt"
  input_size: [320, 320]
  conf_threshold: 0.5
  iou_threshold: 0.4

capture:
  trigger_classes: ["truck", "bus", "van"]
  delay_ms: 4000
  output_dir: "output/test"

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [1280, 720],
            "fps": 30,
        },
        "detection": {
            "model_path": "models/test.onnx",
            "labels_path": "config/labels.txt",
            "input_size": [640, 640],
            "conf_threshold": 0.5,
            "iou_threshold": 0.4,
        },
        "capture": {
            "trigger_classes": ["truck", "bus", "van"],
            "delay_ms": 4000,
            "output_dir": "output/test",
        },
        "pipeline": {
            "frame_skip_interval": 2,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
