"""
Typed models for the vehicle capture application.
"""

from .frame import FrameData
from .detection import BoundingBox
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    CaptureConfig,
    PipelineSettings,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "BoundingBox",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "CaptureConfig",
    "PipelineSettings",
]
