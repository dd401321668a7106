"""
Label list loading and validation.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from .errors import LabelMismatchError


def load_labels(path: str) -> List[str]:
    """
    Load class labels, one per line.

    Blank lines are skipped; the remaining order is the class index order.
    """
    with open(path, "r", encoding="utf-8") as f:
        labels = [line.strip() for line in f if line.strip()]
    logging.info(f"Loaded {len(labels)} labels from {path}")
    return labels


def validate_labels(labels: Sequence[str], num_channels: int) -> None:
    """Raise LabelMismatchError unless there is exactly one label per class channel."""
    num_classes = num_channels - 4
    if len(labels) != num_classes:
        raise LabelMismatchError(len(labels), num_classes)
