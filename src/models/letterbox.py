"""
Letterbox models: resize/pad geometry and the preprocessed tensor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class LetterboxGeometry:
    """
    Forward transform from the original image onto the square canvas.

    Attributes:
        target_size: Side of the square canvas (S).
        orig_width: Source image width.
        orig_height: Source image height.
        new_width: Width of the resized (unpadded) content.
        new_height: Height of the resized (unpadded) content.
        pad_left: Column where resized content starts.
        pad_top: Row where resized content starts.
        scale: Uniform scale factor applied to the source image.
    """
    target_size: int
    orig_width: int
    orig_height: int
    new_width: int
    new_height: int
    pad_left: int
    pad_top: int
    scale: float

    @property
    def pad_right(self) -> int:
        return self.target_size - self.new_width - self.pad_left

    @property
    def pad_bottom(self) -> int:
        return self.target_size - self.new_height - self.pad_top

    def to_dict(self):
        return {
            "target_size": self.target_size,
            "orig_size": [self.orig_width, self.orig_height],
            "resized_size": [self.new_width, self.new_height],
            "pad": [self.pad_left, self.pad_top, self.pad_right, self.pad_bottom],
            "scale": self.scale,
        }


@dataclass(frozen=True)
class LetterboxResult:
    """
    Output of the letterbox preprocessor.

    ``tensor`` is a flat, read-only float32 array in (C, H, W) order with
    values in [0, 1]; ``dims`` is always (1, 3, S, S).
    """
    tensor: np.ndarray
    dims: Tuple[int, int, int, int]
    pad_left: int
    pad_top: int
    scale: float
    geometry: LetterboxGeometry

    @property
    def target_size(self) -> int:
        return self.geometry.target_size

    @property
    def orig_size(self) -> Tuple[int, int]:
        return (self.geometry.orig_width, self.geometry.orig_height)

    @property
    def resized_size(self) -> Tuple[int, int]:
        return (self.geometry.new_width, self.geometry.new_height)

    @property
    def pad_right(self) -> int:
        return self.geometry.pad_right

    @property
    def pad_bottom(self) -> int:
        return self.geometry.pad_bottom

    def as_nchw(self) -> np.ndarray:
        """Return a (1, 3, S, S) view of the tensor."""
        return self.tensor.reshape(self.dims)
