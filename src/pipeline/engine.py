"""
Pipeline engine for the vehicle capture system.

Runs the frame loop: read from an ObservationSource, skip frames according
to the configured interval, and hand the rest to the detector on this
thread. Capture work triggered by detections happens through the
detector's frame callbacks.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from capture.orchestrator import CaptureOrchestrator
from detection.detector import ObjectDetector
from models.config import PipelineSettings
from models.frame import FrameData
from observation import ObservationSource


@dataclass
class PipelineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        frame_skip_interval: Process every Nth frame (1 = every frame).
        max_consecutive_failures: Max frame read failures before stopping.
        stats_log_interval: Seconds between status log messages.
        retry_delay: Seconds to wait after a failed read.
        cancel_pending_on_stop: Cancel delayed zoom captures on shutdown
            instead of letting them finish.
    """
    frame_skip_interval: int = 1
    max_consecutive_failures: int = 10
    stats_log_interval: float = 60.0
    retry_delay: float = 0.5
    cancel_pending_on_stop: bool = False

    @classmethod
    def from_settings(cls, settings: PipelineSettings) -> "PipelineConfig":
        return cls(
            frame_skip_interval=max(1, settings.frame_skip_interval),
            max_consecutive_failures=settings.max_consecutive_failures,
            stats_log_interval=settings.stats_log_interval,
            cancel_pending_on_stop=settings.cancel_pending_on_stop,
        )


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frame_count: int = 0
    processed_count: int = 0
    dropped_count: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    consecutive_failures: int = 0


class PipelineEngine:
    """
    Example:
        source = OpenCVSource(OpenCVSourceConfig(device_id=0))
        engine = PipelineEngine(source, detector, orchestrator, PipelineConfig())
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        detector: ObjectDetector,
        orchestrator: Optional[CaptureOrchestrator],
        config: PipelineConfig,
    ):
        self.source = source
        self.detector = detector
        self.orchestrator = orchestrator
        self.config = config
        self.stats = PipelineStats()
        self._running = False

    def run(self) -> None:
        """
        Open the source and process frames until stopped or exhausted.
        """
        self._running = True
        self.stats = PipelineStats()

        try:
            self.source.open()
            logging.info(f"Pipeline started: source={self.source.source_id}")

            while self._running:
                frame_data = self.source.read()

                if frame_data is None:
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures})"
                    )
                    time.sleep(self.config.retry_delay)
                    continue

                self.stats.consecutive_failures = 0
                self._process_frame(frame_data)
                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Signal the pipeline to stop after the current frame."""
        self._running = False

    def _process_frame(self, frame_data: FrameData) -> None:
        self.stats.frame_count += 1
        if (self.stats.frame_count - 1) % self.config.frame_skip_interval != 0:
            return

        if self.detector.detect(frame_data.frame):
            self.stats.processed_count += 1
        else:
            self.stats.dropped_count += 1

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            captures = self.orchestrator.sequences_started if self.orchestrator else 0
            logging.info(
                f"Pipeline stats: frames={self.stats.frame_count}, "
                f"processed={self.stats.processed_count}, "
                f"dropped={self.stats.dropped_count}, captures={captures}"
            )
            self.stats.last_stats_log_time = now

    def _cleanup(self) -> None:
        self._running = False

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        self.detector.clear()

        if self.orchestrator is not None:
            self.orchestrator.close(cancel_pending=self.config.cancel_pending_on_stop)

        logging.info("Pipeline stopped")
