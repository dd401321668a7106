"""
Evidence capture: trigger detection, delayed zoom scheduling.
"""

from .orchestrator import CaptureOrchestrator, CaptureSequence, zoom_region
from .scheduler import Scheduler, TimerScheduler

__all__ = [
    "CaptureOrchestrator",
    "CaptureSequence",
    "Scheduler",
    "TimerScheduler",
    "zoom_region",
]
