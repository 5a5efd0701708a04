"""Filtering, padding and rescaling of candidate face rectangles."""

from __future__ import annotations

import logging
from typing import Iterable, List

from skintone.types import Rectangle, Size

LOGGER = logging.getLogger("skintone.region_filter")

MAX_ASPECT_RATIO = 2.4
REDUNDANT_AREA_RATIO = 2.0
REDUNDANT_OVERLAP_FRACTION = 0.4


def aspect_ratio(region: Rectangle) -> float:
    if region.width <= 0 or region.height <= 0:
        raise ValueError(f"Encountered invalid region {region} (both dimensions must be positive)")
    return max(region.width, region.height) / min(region.width, region.height)


def filter_by_aspect_ratio(regions: Iterable[Rectangle], max_ratio: float = MAX_ASPECT_RATIO) -> List[Rectangle]:
    return [region for region in regions if aspect_ratio(region) <= max_ratio]


def remove_redundant_regions(regions: List[Rectangle]) -> List[Rectangle]:
    """Drop regions that mostly sit inside a much larger region.

    A region is redundant when another one has more than twice its area and
    covers more than 40% of it. Every region is compared against the full input
    list, not against the survivors.
    """
    kept: List[Rectangle] = []
    for region in regions:
        area = region.area
        obsolete = any(
            other.area > area * REDUNDANT_AREA_RATIO
            and other.intersect(region).area > REDUNDANT_OVERLAP_FRACTION * area
            for other in regions
        )
        if obsolete:
            LOGGER.debug("Dropping region %s overlapped by a larger region", region)
            continue
        kept.append(region)
    return kept


def filter_face_regions(regions: Iterable[Rectangle]) -> List[Rectangle]:
    """Default aspect-ratio policy: reject long thin regions, then remove redundant ones."""
    if regions is None:
        raise ValueError("regions are required")
    return remove_redundant_regions(filter_by_aspect_ratio(regions))


def expand_region(region: Rectangle, percent: float, image_size: Size) -> Rectangle:
    """Pad a region by ``percent`` of its size on each axis and clamp to the image."""
    width, height = image_size
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive (got {width}x{height})")
    if percent < 0:
        raise ValueError(f"percent must not be negative (got {percent})")
    if not region.within(image_size):
        raise ValueError(f"Region {region} lies outside the {width}x{height} image")
    padded = region.inflate(int(round(region.width * percent)), int(round(region.height * percent)))
    return padded.intersect(Rectangle(0, 0, width, height))


def scale_region(region: Rectangle, scale: float, limits: Size) -> Rectangle:
    """Map a region found on a downscaled image back onto the original image."""
    if scale <= 0:
        raise ValueError(f"scale must be positive (got {scale})")
    limit_width, limit_height = limits
    if limit_width <= 0 or limit_height <= 0:
        raise ValueError(f"Limits must be positive (got {limit_width}x{limit_height})")
    left = int(round(region.x * scale))
    top = int(round(region.y * scale))
    width = int(round(region.width * scale))
    height = int(round(region.height * scale))
    return Rectangle.from_ltrb(
        left,
        top,
        min(left + width, limit_width),
        min(top + height, limit_height),
    )
