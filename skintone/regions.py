"""Connected-component extraction from a skin mask and enclosed-hole confirmation."""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Set

from skintone.grid import Grid
from skintone.types import Point, Rectangle

LOGGER = logging.getLogger("skintone.regions")

# Components smaller than this many pixels per unit of scale are treated as noise
MIN_COMPONENT_PIXELS_PER_SCALE = 64


def flood_fill(mask: Grid, start: Point, limit_to: Optional[Rectangle] = None) -> Set[Point]:
    """Return the 4-connected positions sharing ``start``'s value inside ``limit_to``.

    Uses an explicit stack so large components never hit the recursion limit.
    """
    if mask is None:
        raise ValueError("mask is required")
    bounds = limit_to if limit_to is not None else mask.bounds
    if not bounds.within(mask.size):
        raise ValueError(f"Fill bounds {bounds} exceed the {mask.width}x{mask.height} mask")
    if not bounds.contains(start):
        raise ValueError(f"Start point {start} lies outside fill bounds {bounds}")

    values = mask.values
    target = values[start[1], start[0]]
    filled: Set[Point] = set()
    stack: List[Point] = [start]
    while stack:
        x, y = stack.pop()
        if x < bounds.left or x >= bounds.right or y < bounds.top or y >= bounds.bottom:
            continue
        if (x, y) in filled or values[y, x] != target:
            continue
        filled.add((x, y))
        stack.append((x - 1, y))
        stack.append((x + 1, y))
        stack.append((x, y - 1))
        stack.append((x, y + 1))
    return filled


def iter_components(mask: Grid, value: bool = True, limit_to: Optional[Rectangle] = None) -> Iterator[Set[Point]]:
    """Yield connected components of ``value`` pixels inside ``limit_to`` one at a time.

    Only the ``limit_to`` window is scanned. Components come in row-major order
    of their first pixel.
    """
    if mask is None:
        raise ValueError("mask is required")
    bounds = limit_to if limit_to is not None else mask.bounds
    window = mask.crop(bounds)
    remaining = [
        (bounds.left + x, bounds.top + y)
        for (x, y), _ in window.enumerate(lambda position, is_masked: bool(is_masked) == value)
    ]
    unvisited = set(remaining)
    for position in remaining:
        if position not in unvisited:
            continue
        component = flood_fill(mask, position, bounds)
        unvisited -= component
        yield component


def find_components(mask: Grid, value: bool = True, limit_to: Optional[Rectangle] = None) -> List[Set[Point]]:
    """Every connected component of ``value`` pixels inside ``limit_to``."""
    return list(iter_components(mask, value, limit_to))


def touches_edge(points: Set[Point], bounds: Rectangle) -> bool:
    return any(
        x == bounds.left or x == bounds.right - 1 or y == bounds.top or y == bounds.bottom - 1
        for x, y in points
    )


def has_enclosed_hole(mask: Grid, bounds: Rectangle, min_hole_pixels: int) -> bool:
    """True if an unmasked region inside ``bounds`` is fully enclosed and bigger than ``min_hole_pixels``.

    Stops at the first qualifying hole.
    """
    return any(
        len(hole) > min_hole_pixels and not touches_edge(hole, bounds)
        for hole in iter_components(mask, value=False, limit_to=bounds)
    )


def identify_face_regions(mask: Grid, scale: int) -> List[Rectangle]:
    """Bounding rectangles of skin components that contain an enclosed hole.

    The hole (eyes, mouth) is what marks a skin blob as face-like; blobs
    without one are discarded however well shaped they are.
    """
    if mask is None:
        raise ValueError("mask is required")
    if scale < 1:
        raise ValueError(f"scale must be at least 1 (got {scale})")

    components = find_components(mask, value=True)
    minimum = MIN_COMPONENT_PIXELS_PER_SCALE * scale
    objects = [component for component in components if len(component) >= minimum]
    LOGGER.debug(
        "Found %d skin component(s), %d at or above %d pixels",
        len(components),
        len(objects),
        minimum,
    )

    regions: List[Rectangle] = []
    for component in objects:
        bounds = Rectangle.bounding(component)
        if has_enclosed_hole(mask, bounds, min_hole_pixels=scale):
            regions.append(bounds)
        else:
            LOGGER.debug("Discarding skin component %s without an enclosed hole", bounds)
    return regions
