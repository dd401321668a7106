"""
JPEG evidence storage.

Every save writes a temporary file in the output directory and renames it
onto the target, so concurrent saves to the same name never interleave.
Failures are logged and reported through the return value; they never
propagate into the detection loop.
"""

from __future__ import annotations

import logging
import os
import tempfile
from typing import Callable, Optional

import cv2
import numpy as np


class ImageStore:
    """Write frames as JPEG files under a fixed directory."""

    def __init__(
        self,
        output_dir: str,
        jpeg_quality: int = 100,
        notifier: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Args:
            output_dir: Directory for saved images (created on first save).
            jpeg_quality: JPEG quality 0-100.
            notifier: Optional callable receiving a short message after each save.
        """
        self.output_dir = output_dir
        self.jpeg_quality = jpeg_quality
        self.notifier = notifier

    def save(self, image: np.ndarray, filename: str, message: Optional[str] = None) -> Optional[str]:
        """
        Encode and write an image.

        Returns:
            Absolute path of the written file, or None on failure.
        """
        path = os.path.abspath(os.path.join(self.output_dir, filename))
        try:
            if not os.path.exists(self.output_dir):
                os.makedirs(self.output_dir, exist_ok=True)

            ok, encoded = cv2.imencode(
                ".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), int(self.jpeg_quality)]
            )
            if not ok:
                logging.error(f"JPEG encoding failed for {filename}")
                return None

            self._write_atomic(path, encoded.tobytes())
        except (OSError, cv2.error) as e:
            logging.error(f"Failed to save image {path}: {e}")
            return None

        logging.info(f"Image saved: {path}")

        if self.notifier is not None and message:
            try:
                self.notifier(message)
            except Exception as e:
                logging.warning(f"Notifier error: {e}")

        return path

    def _write_atomic(self, path: str, data: bytes) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.output_dir, prefix=".tmp_", suffix=".jpg")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
