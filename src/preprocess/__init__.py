"""
Image preprocessing for the inference worker.
"""

from .letterbox import (
    DEFAULT_TARGET_SIZE,
    compute_letterbox_geometry,
    preprocess,
    process_image,
)

__all__ = [
    "DEFAULT_TARGET_SIZE",
    "compute_letterbox_geometry",
    "preprocess",
    "process_image",
]
