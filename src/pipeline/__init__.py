"""
Pipeline module for the vehicle capture system.

The pipeline orchestrates the frame loop:
- Frame acquisition from observation sources
- Detection (preprocess, inference, decode, NMS)
- Evidence capture via detector callbacks
"""

from .engine import PipelineEngine, PipelineConfig, PipelineStats

__all__ = [
    "PipelineEngine",
    "PipelineConfig",
    "PipelineStats",
]
