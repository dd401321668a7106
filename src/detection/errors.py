"""
Detection error types.
"""


class DetectionError(Exception):
    """Base class for detection pipeline errors."""


class LabelMismatchError(DetectionError):
    """Label list does not match the model's class channel count."""

    def __init__(self, num_labels: int, num_classes: int):
        super().__init__(
            f"Label list has {num_labels} entries but the model outputs {num_classes} classes"
        )
        self.num_labels = num_labels
        self.num_classes = num_classes
