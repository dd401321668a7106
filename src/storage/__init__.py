"""
Storage for captured evidence images.
"""

from .images import ImageStore

__all__ = ["ImageStore"]
