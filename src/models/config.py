"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

DEFAULT_TRIGGER_CLASSES = ["truck", "bus", "van"]


@dataclass
class CameraConfig:
    """Frame source configuration."""
    device_id: Union[int, str] = 0
    resolution: Optional[List[int]] = None
    fps: Optional[int] = None
    swap_rb: bool = False
    rotate: int = 0
    flip_horizontal: bool = False
    flip_vertical: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution"),
            fps=d.get("fps"),
            swap_rb=d.get("swap_rb", False),
            rotate=d.get("rotate", 0) or 0,
            flip_horizontal=d.get("flip_horizontal", False),
            flip_vertical=d.get("flip_vertical", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "device_id": self.device_id,
            "swap_rb": self.swap_rb,
            "rotate": self.rotate,
            "flip_horizontal": self.flip_horizontal,
            "flip_vertical": self.flip_vertical,
        }
        if self.resolution is not None:
            d["resolution"] = self.resolution
        if self.fps is not None:
            d["fps"] = self.fps
        return d


@dataclass
class DetectionConfig:
    """Model and post-processing configuration."""
    model_path: str = ""
    labels_path: str = ""
    input_size: List[int] = field(default_factory=lambda: [640, 640])
    conf_threshold: float = 0.5
    iou_threshold: float = 0.4
    input_mean: float = 0.0
    input_std: float = 255.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            model_path=d.get("model_path", ""),
            labels_path=d.get("labels_path", ""),
            input_size=list(d.get("input_size", [640, 640])),
            conf_threshold=float(d.get("conf_threshold", 0.5)),
            iou_threshold=float(d.get("iou_threshold", 0.4)),
            input_mean=float(d.get("input_mean", 0.0)),
            input_std=float(d.get("input_std", 255.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model_path": self.model_path,
            "labels_path": self.labels_path,
            "input_size": self.input_size,
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
            "input_mean": self.input_mean,
            "input_std": self.input_std,
        }


@dataclass
class CaptureConfig:
    """Evidence capture configuration."""
    enabled: bool = True
    trigger_classes: List[str] = field(default_factory=lambda: list(DEFAULT_TRIGGER_CLASSES))
    delay_ms: int = 4000
    output_dir: str = "output/VehicleDetections"
    jpeg_quality: int = 100

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CaptureConfig":
        return cls(
            enabled=d.get("enabled", True),
            trigger_classes=list(d.get("trigger_classes", DEFAULT_TRIGGER_CLASSES)),
            delay_ms=int(d.get("delay_ms", 4000)),
            output_dir=d.get("output_dir", "output/VehicleDetections"),
            jpeg_quality=int(d.get("jpeg_quality", 100)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "trigger_classes": self.trigger_classes,
            "delay_ms": self.delay_ms,
            "output_dir": self.output_dir,
            "jpeg_quality": self.jpeg_quality,
        }


@dataclass
class PipelineSettings:
    """Frame loop configuration."""
    frame_skip_interval: int = 1
    max_consecutive_failures: int = 10
    stats_log_interval: float = 60.0
    cancel_pending_on_stop: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PipelineSettings":
        return cls(
            frame_skip_interval=int(d.get("frame_skip_interval", 1)),
            max_consecutive_failures=int(d.get("max_consecutive_failures", 10)),
            stats_log_interval=float(d.get("stats_log_interval", 60.0)),
            cancel_pending_on_stop=bool(d.get("cancel_pending_on_stop", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_skip_interval": self.frame_skip_interval,
            "max_consecutive_failures": self.max_consecutive_failures,
            "stats_log_interval": self.stats_log_interval,
            "cancel_pending_on_stop": self.cancel_pending_on_stop,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)
    log_path: str = "logs/vehicle_capture.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            capture=CaptureConfig.from_dict(d.get("capture", {}) or {}),
            pipeline=PipelineSettings.from_dict(d.get("pipeline", {}) or {}),
            log_path=d.get("log_path", "logs/vehicle_capture.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "capture": self.capture.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
