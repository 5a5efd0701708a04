"""Pixel-array helpers: resizing, greyscale and classifier sample extraction."""

from __future__ import annotations

import logging
from typing import Tuple

import cv2
import numpy as np

from skintone.types import Rectangle, Size

LOGGER = logging.getLogger("skintone.imaging")


def resize_rgb(pixels: np.ndarray, size: Size) -> np.ndarray:
    """Resize an (H, W, 3) array to ``(width, height)``."""
    width, height = [max(1, int(v)) for v in size]
    src_h, src_w = pixels.shape[:2]
    if src_h == height and src_w == width:
        return pixels.copy()
    interpolation = cv2.INTER_AREA if (width < src_w and height < src_h) else cv2.INTER_LINEAR
    return cv2.resize(pixels, (width, height), interpolation=interpolation)


def downscaled_size(size: Size, divide_by: float) -> Size:
    if divide_by <= 0:
        raise ValueError(f"divide_by must be positive (got {divide_by})")
    width, height = size
    return max(1, int(round(width / divide_by))), max(1, int(round(height / divide_by)))


def to_greyscale(pixels: np.ndarray) -> np.ndarray:
    """Greyscale intensities (float64) of an (H, W, 3) RGB array."""
    pixels = np.asarray(pixels, dtype=np.float64)
    return (0.2989 * pixels[..., 0]) + (0.5870 * pixels[..., 1]) + (0.1140 * pixels[..., 2])


def _fit_to_aspect(region: Rectangle, sample_aspect: float) -> Rectangle:
    aspect = region.width / region.height
    if aspect >= sample_aspect:
        ideal_height = int(round(region.width / sample_aspect))
        return region.inflate(0, max(0, ideal_height - region.height))
    ideal_width = int(round(region.height * sample_aspect))
    return region.inflate(max(0, ideal_width - region.width), 0)


def extract_section_and_resize(pixels: np.ndarray, region: Rectangle, destination: Size) -> np.ndarray:
    """Crop ``region`` and resize it to ``destination`` (width, height).

    The crop is first grown to the destination aspect ratio where the image
    allows. If it cannot be grown far enough (near an edge) the resized crop is
    centred on a black canvas, leaving bars above/below or to the sides.
    """
    image_h, image_w = pixels.shape[:2]
    dest_w, dest_h = destination
    if region.is_empty or not region.within((image_w, image_h)):
        raise ValueError(f"Region {region} is not a non-empty area of the {image_w}x{image_h} image")
    if dest_w <= 0 or dest_h <= 0:
        raise ValueError(f"Destination size must be positive (got {dest_w}x{dest_h})")

    sample_aspect = dest_w / dest_h
    fitted = _fit_to_aspect(region, sample_aspect).intersect(Rectangle(0, 0, image_w, image_h))
    crop = pixels[fitted.top : fitted.bottom, fitted.left : fitted.right]

    aspect = fitted.width / fitted.height
    if aspect >= sample_aspect:
        resize_to: Tuple[int, int] = (dest_w, max(1, int(round(dest_w / aspect))))
    else:
        resize_to = (max(1, int(round(dest_h * aspect))), dest_h)
    resized = resize_rgb(crop, resize_to)

    canvas = np.zeros((dest_h, dest_w) + pixels.shape[2:], dtype=pixels.dtype)
    offset_x = (dest_w - resized.shape[1]) // 2
    offset_y = (dest_h - resized.shape[0]) // 2
    if offset_x or offset_y:
        LOGGER.debug("Letterboxed %s (fitted %s) into %dx%d sample", region, fitted, dest_w, dest_h)
    canvas[offset_y : offset_y + resized.shape[0], offset_x : offset_x + resized.shape[1]] = resized
    return canvas
