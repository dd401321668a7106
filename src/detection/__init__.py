"""
Vehicle Capture - Detection Module

Decodes model output into boxes, suppresses duplicates and notifies listeners.
"""

from .decoder import decode_output
from .detector import ObjectDetector
from .errors import DetectionError, LabelMismatchError
from .listener import DetectorListener, LoggingListener
from .nms import calculate_iou, non_max_suppression

__all__ = [
    'ObjectDetector',
    'DetectorListener',
    'LoggingListener',
    'DetectionError',
    'LabelMismatchError',
    'decode_output',
    'calculate_iou',
    'non_max_suppression',
]
