"""Preview rendering for intermediate grids and detected regions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple

import cv2
import numpy as np

from skintone.grid import Grid
from skintone.io_utils import save_rgb_pixels
from skintone.types import Point, Rectangle

LOGGER = logging.getLogger("skintone.viz.overlay")

Colour = Tuple[int, int, int]

CANDIDATE_COLOUR: Colour = (255, 0, 0)
CONFIRMED_COLOUR: Colour = (173, 255, 47)
COMPONENT_COLOURS: Sequence[Colour] = (
    (255, 0, 0),
    (0, 255, 0),
    (0, 0, 255),
    (128, 128, 0),
    (0, 128, 128),
    (128, 0, 128),
)


def _grey(intensity: np.ndarray) -> np.ndarray:
    channel = np.clip(intensity, 0, 255).astype(np.uint8)
    return np.stack([channel, channel, channel], axis=-1)


def mask_preview(mask: Grid) -> np.ndarray:
    return _grey(np.where(mask.values, 255, 0))


def hue_preview(samples: Grid) -> np.ndarray:
    # hue spans -180..180, halve after shifting to land in 0..180
    return _grey((samples.values["hue"] + 180.0) / 2.0)


def saturation_preview(samples: Grid) -> np.ndarray:
    return _grey(samples.values["saturation"])


def texture_preview(samples: Grid) -> np.ndarray:
    return _grey(samples.values["texture_amplitude"] * 16.0)


def components_preview(size: Tuple[int, int], components: Iterable[Set[Point]]) -> np.ndarray:
    """Paint each component in a rotating palette colour on a black canvas."""
    width, height = size
    canvas = np.zeros((height, width, 3), dtype=np.uint8)
    for index, component in enumerate(components):
        colour = COMPONENT_COLOURS[index % len(COMPONENT_COLOURS)]
        for x, y in component:
            if not canvas[y, x].any():
                canvas[y, x] = colour
    return canvas


def draw_regions(
    pixels: np.ndarray,
    regions: Iterable[Rectangle],
    colour: Colour = CANDIDATE_COLOUR,
    thickness: int = 2,
    labels: Optional[List[str]] = None,
) -> np.ndarray:
    """Return a copy of ``pixels`` with a rectangle drawn around every region."""
    frame = np.ascontiguousarray(pixels).copy()
    for index, region in enumerate(regions):
        x1, y1, x2, y2 = region.as_xyxy()
        cv2.rectangle(frame, (x1, y1), (x2 - 1, y2 - 1), colour, thickness)
        if labels and index < len(labels):
            text_y = max(15, y1 - 10)
            cv2.putText(frame, labels[index], (x1, text_y), cv2.FONT_HERSHEY_SIMPLEX, 0.5, colour, 1)
    return frame


def save_progress_image(directory: Optional[Path], name: str, pixels: np.ndarray) -> Path:
    path = (directory or Path(".")) / name
    save_rgb_pixels(path, pixels)
    LOGGER.info("Progress image written to %s", path)
    return path
