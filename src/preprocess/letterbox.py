"""
Letterbox preprocessing.

Resizes an image so its longer side equals the target size, centers it on a
black square canvas, and converts the canvas into a channel-planar (C, H, W)
float32 tensor in [0, 1]. The geometry (padding offsets and scale) is kept so
detections can later be mapped back onto the original image.
"""

from __future__ import annotations

import logging
import math
import os
from typing import Union

import cv2
import numpy as np

from models.errors import InvalidImageError
from models.image import ImageData
from models.letterbox import LetterboxGeometry, LetterboxResult

DEFAULT_TARGET_SIZE = 320


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; pixel sizes round .5 up.
    return int(math.floor(value + 0.5))


def compute_letterbox_geometry(
    width: int,
    height: int,
    target_size: int = DEFAULT_TARGET_SIZE,
) -> LetterboxGeometry:
    """
    Compute the resize and padding for a width x height image.

    The longer side becomes ``target_size``; the shorter side is scaled
    proportionally and rounded to the nearest pixel. Odd padding totals put
    the extra pixel on the right/bottom.

    Raises:
        InvalidImageError: If either dimension is not positive.
        ValueError: If target_size is not positive.
    """
    if target_size <= 0:
        raise ValueError(f"target_size must be positive, got {target_size}")
    if width <= 0 or height <= 0:
        raise InvalidImageError(f"Image has a zero dimension: {width}x{height}")

    aspect = width / height
    if width >= height:
        new_width = target_size
        new_height = _round_half_up(target_size / aspect)
    else:
        new_height = target_size
        new_width = _round_half_up(target_size * aspect)

    # Aspect ratios beyond 2*S:1 would round the short side to 0.
    new_width = max(1, new_width)
    new_height = max(1, new_height)

    pad_left = (target_size - new_width) // 2
    pad_top = (target_size - new_height) // 2

    return LetterboxGeometry(
        target_size=target_size,
        orig_width=width,
        orig_height=height,
        new_width=new_width,
        new_height=new_height,
        pad_left=pad_left,
        pad_top=pad_top,
        scale=min(target_size / width, target_size / height),
    )


def _as_rgb(pixels: np.ndarray) -> np.ndarray:
    """Drop alpha, replicate grayscale; always returns (H, W, 3) uint8."""
    if pixels.ndim == 2:
        return np.repeat(pixels[:, :, None], 3, axis=2)
    return pixels[:, :, :3]


def preprocess(
    image: Union[ImageData, np.ndarray],
    target_size: int = DEFAULT_TARGET_SIZE,
) -> LetterboxResult:
    """
    Letterbox an image into a (1, 3, S, S) float32 tensor.

    Args:
        image: ImageData or an RGB/RGBA/grayscale uint8 array.
        target_size: Side of the square output canvas.

    Returns:
        LetterboxResult with a flat, read-only tensor of length 3*S*S.

    Raises:
        InvalidImageError: If the image has a zero dimension or bad shape.
    """
    if not isinstance(image, ImageData):
        image = ImageData.from_numpy(image)

    geom = compute_letterbox_geometry(image.width, image.height, target_size)
    rgb = _as_rgb(image.pixels)

    if (geom.new_width, geom.new_height) == (image.width, image.height):
        resized = rgb
    else:
        # cv2.resize takes (width, height)
        resized = cv2.resize(
            np.ascontiguousarray(rgb),
            (geom.new_width, geom.new_height),
            interpolation=cv2.INTER_LINEAR,
        )

    canvas = np.zeros((target_size, target_size, 3), dtype=np.uint8)
    canvas[
        geom.pad_top:geom.pad_top + geom.new_height,
        geom.pad_left:geom.pad_left + geom.new_width,
    ] = resized

    # HWC interleaved -> CHW planar; channel c of pixel p lands at p + c*S*S.
    planar = canvas.transpose(2, 0, 1).astype(np.float32) / np.float32(255.0)
    tensor = np.ascontiguousarray(planar).reshape(-1)
    tensor.setflags(write=False)

    logging.debug(
        f"Letterboxed {image.width}x{image.height} -> "
        f"{geom.new_width}x{geom.new_height} at ({geom.pad_left}, {geom.pad_top}), "
        f"scale={geom.scale:.4f}"
    )

    return LetterboxResult(
        tensor=tensor,
        dims=(1, 3, target_size, target_size),
        pad_left=geom.pad_left,
        pad_top=geom.pad_top,
        scale=geom.scale,
        geometry=geom,
    )


def process_image(
    image: Union[ImageData, np.ndarray, str, os.PathLike],
    target_size: int = DEFAULT_TARGET_SIZE,
) -> LetterboxResult:
    """UI-facing entry point: accepts a file path as well as decoded images."""
    if isinstance(image, (str, os.PathLike)):
        image = ImageData.from_file(image)
    return preprocess(image, target_size=target_size)
