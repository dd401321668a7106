"""
Vehicle capture application.

Runs object detection on a camera or video stream and saves evidence images
(full frame plus a delayed zoomed crop) whenever a truck, bus or van is seen.

Usage:
    python src/main.py --config config/config.yaml
    python src/main.py --config config/config.yaml --source traffic.mp4

Arguments:
    --config: Path to configuration file
    --source: Override camera.device_id (camera index, URL or file path)
    --no-capture: Run detection only, without saving evidence images
"""

import os
import sys
import argparse
import logging
from typing import Any, Dict, Optional, Tuple

import yaml

from capture.orchestrator import CaptureOrchestrator
from capture.scheduler import TimerScheduler
from detection.detector import ObjectDetector
from detection.errors import DetectionError
from detection.listener import LoggingListener
from inference.opencv_backend import OpenCvDnnConfig, OpenCvDnnEngine
from models.config import Config
from observation.opencv_source import OpenCVSource, OpenCVSourceConfig
from ops.logging import setup_logging
from pipeline.engine import PipelineConfig, PipelineEngine
from storage.images import ImageStore


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        config_dir = os.path.dirname(config_path)
        base_path = os.path.join(config_dir, "default.yaml")
        local_overrides_path = os.path.join(config_dir, "config.yaml")

        merged: Dict[str, Any] = _read_yaml(base_path) if os.path.exists(base_path) else {}
        if os.path.exists(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        if os.path.exists(config_path) and os.path.abspath(config_path) not in (
            os.path.abspath(local_overrides_path),
            os.path.abspath(base_path),
        ):
            merged = _deep_merge(merged, _read_yaml(config_path))

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'detection', 'capture', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    camera = config.get('camera') or {}
    if 'device_id' not in camera:
        return False, "Missing camera.device_id"
    if not isinstance(camera['device_id'], (int, str)) or isinstance(camera['device_id'], bool):
        return False, "camera.device_id must be an integer (index) or string (URL/path)"
    if isinstance(camera['device_id'], int) and camera['device_id'] < 0:
        return False, "camera.device_id integer must be non-negative"
    if camera.get('rotate', 0) not in (0, 90, 180, 270, None):
        return False, "camera.rotate must be one of: 0, 90, 180, 270"

    detection = config.get('detection') or {}
    for key in ('model_path', 'labels_path'):
        if not isinstance(detection.get(key), str) or not detection.get(key):
            return False, f"detection.{key} is required"
    input_size = detection.get('input_size', [640, 640])
    if not isinstance(input_size, list) or len(input_size) != 2:
        return False, "detection.input_size must be a list of [width, height]"
    if not all(isinstance(x, int) and x > 0 for x in input_size):
        return False, "detection.input_size values must be positive integers"
    for key in ('conf_threshold', 'iou_threshold'):
        if key in detection:
            value = detection[key]
            if not _is_number(value) or not (0 <= value <= 1):
                return False, f"detection.{key} must be a number between 0 and 1"
    if 'input_std' in detection:
        if not _is_number(detection['input_std']) or detection['input_std'] == 0:
            return False, "detection.input_std must be a non-zero number"

    capture = config.get('capture') or {}
    triggers = capture.get('trigger_classes', [])
    if not isinstance(triggers, list) or not all(isinstance(t, str) for t in triggers):
        return False, "capture.trigger_classes must be a list of class names"
    if 'delay_ms' in capture:
        if not isinstance(capture['delay_ms'], int) or capture['delay_ms'] < 0:
            return False, "capture.delay_ms must be a non-negative integer"
    if 'jpeg_quality' in capture:
        quality = capture['jpeg_quality']
        if not isinstance(quality, int) or not (0 <= quality <= 100):
            return False, "capture.jpeg_quality must be an integer between 0 and 100"
    if 'output_dir' in capture and not isinstance(capture['output_dir'], str):
        return False, "capture.output_dir must be a string"

    pipeline = config.get('pipeline') or {}
    if 'frame_skip_interval' in pipeline:
        interval = pipeline['frame_skip_interval']
        if not isinstance(interval, int) or interval <= 0:
            return False, "pipeline.frame_skip_interval must be a positive integer"
    if 'cancel_pending_on_stop' in pipeline and not isinstance(pipeline['cancel_pending_on_stop'], bool):
        return False, "pipeline.cancel_pending_on_stop must be true or false"

    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def _parse_source(value: str):
    return int(value) if value.isdigit() else value


def build_pipeline(cfg: Config, capture_enabled: bool = True) -> PipelineEngine:
    """Wire engine, detector, capture and frame source from typed config."""
    det = cfg.detection
    engine = OpenCvDnnEngine(
        OpenCvDnnConfig(
            model=det.model_path,
            input_width=det.input_size[0],
            input_height=det.input_size[1],
        )
    )
    detector = ObjectDetector(
        engine,
        det.labels_path,
        LoggingListener(),
        conf_threshold=det.conf_threshold,
        iou_threshold=det.iou_threshold,
        input_mean=det.input_mean,
        input_std=det.input_std,
    )
    detector.setup()

    orchestrator = None
    if capture_enabled and cfg.capture.enabled:
        store = ImageStore(
            cfg.capture.output_dir,
            jpeg_quality=cfg.capture.jpeg_quality,
            notifier=lambda msg: logging.info(f"[NOTIFY] {msg}"),
        )
        orchestrator = CaptureOrchestrator(
            store,
            TimerScheduler(),
            trigger_classes=cfg.capture.trigger_classes,
            delay_ms=cfg.capture.delay_ms,
        )
        detector.add_callback(orchestrator.handle)
        logging.info(
            f"Evidence capture enabled: triggers={sorted(orchestrator.trigger_classes)}, "
            f"delay={cfg.capture.delay_ms}ms, dir={cfg.capture.output_dir}"
        )

    source = OpenCVSource(OpenCVSourceConfig.from_camera_config(cfg.camera, source_id="main-camera"))
    return PipelineEngine(source, detector, orchestrator, PipelineConfig.from_settings(cfg.pipeline))


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Vehicle detection and evidence capture')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--source', type=str, default=None,
                        help='Camera index, stream URL or video file (overrides camera.device_id)')
    parser.add_argument('--no-capture', action='store_true',
                        help='Disable evidence capture')
    args = parser.parse_args()

    config = load_config(args.config)
    if args.source is not None:
        config.setdefault('camera', {})['device_id'] = _parse_source(args.source)

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    setup_logging(config['log_path'], config['log_level'])
    logging.info("Starting vehicle capture")

    cfg = Config.from_dict(config)
    try:
        engine = build_pipeline(cfg, capture_enabled=not args.no_capture)
    except (DetectionError, OSError, RuntimeError) as e:
        logging.error(f"Failed to initialize detection pipeline: {e}")
        sys.exit(1)

    try:
        engine.run()
    except RuntimeError as e:
        logging.error(f"Pipeline error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
