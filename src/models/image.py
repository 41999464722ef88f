"""
ImageData model for user-selected source images.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from .errors import InvalidImageError


@dataclass(frozen=True)
class ImageData:
    """
    A decoded source image.

    Attributes:
        pixels: uint8 array, (H, W) grayscale, (H, W, 3) RGB or (H, W, 4) RGBA.
        width: Image width in pixels.
        height: Image height in pixels.
        source: Optional identifier (e.g. file path) for logging.
    """
    pixels: np.ndarray
    width: int
    height: int
    source: Optional[str] = None

    @classmethod
    def from_numpy(cls, pixels: np.ndarray, source: Optional[str] = None) -> "ImageData":
        """Create ImageData from an RGB/RGBA/grayscale numpy array."""
        if pixels is None or not isinstance(pixels, np.ndarray):
            raise InvalidImageError("Image pixels must be a numpy array")
        if pixels.ndim not in (2, 3):
            raise InvalidImageError(f"Unsupported image shape: {pixels.shape}")
        if pixels.ndim == 3 and pixels.shape[2] not in (3, 4):
            raise InvalidImageError(f"Unsupported channel count: {pixels.shape[2]}")
        if pixels.dtype != np.uint8:
            raise InvalidImageError(f"Unsupported pixel dtype: {pixels.dtype} (expected uint8)")
        h, w = pixels.shape[:2]
        return cls(pixels=pixels, width=int(w), height=int(h), source=source)

    @classmethod
    def from_file(cls, path: Union[str, os.PathLike]) -> "ImageData":
        """
        Decode an image file with OpenCV.

        OpenCV decodes to BGR(A); channels are swapped to RGB(A) so that
        channel 0 is always red.
        """
        path = os.fspath(path)
        raw = cv2.imread(path, cv2.IMREAD_UNCHANGED)
        if raw is None:
            raise InvalidImageError(f"Could not decode image: {path}")
        if raw.dtype == np.uint16:
            raw = (raw >> 8).astype(np.uint8)
        if raw.ndim == 3 and raw.shape[2] == 4:
            raw = cv2.cvtColor(raw, cv2.COLOR_BGRA2RGBA)
        elif raw.ndim == 3 and raw.shape[2] == 3:
            raw = cv2.cvtColor(raw, cv2.COLOR_BGR2RGB)
        return cls.from_numpy(raw, source=path)

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
