"""Skin mask construction: strict pass, relaxed expansion, intensity confirmation."""

from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np

from skintone.grid import Grid
from skintone.types import to_greyscale

LOGGER = logging.getLogger("skintone.skin_mask")

MIN_SKIN_GREYSCALE = 90.0
MAX_SKIN_GREYSCALE = 240.0


def initial_skin_mask(samples: Grid, strict_filter: Callable[[Any, Any, Any], Any]) -> Grid:
    """Apply the strict hue/saturation/texture test to every sample."""
    mask = samples.transform(
        lambda values: strict_filter(values["hue"], values["saturation"], values["texture_amplitude"]),
        vectorized=True,
        dtype=bool,
    )
    LOGGER.debug("Strict skin filter matched %d of %d pixel(s)", int(mask.values.sum()), len(mask))
    return mask


def expand_skin_mask(
    mask: Grid,
    samples: Grid,
    relaxed_filter: Callable[[Any, Any], Any],
    iterations: int,
) -> Grid:
    """Grow the mask into neighbouring pixels that pass the relaxed filter.

    Each iteration only reads the mask produced by the previous one, so the
    mask grows by at most one pixel in every direction per iteration.
    """
    if iterations < 0:
        raise ValueError(f"iterations must not be negative (got {iterations})")
    relaxed = samples.transform(
        lambda values: relaxed_filter(values["hue"], values["saturation"]),
        vectorized=True,
        dtype=bool,
    )
    for _ in range(iterations):
        previous = mask

        def _expand(is_skin: bool, passes_relaxed: bool, position) -> bool:
            if is_skin:
                return True
            if not passes_relaxed:
                return False
            surrounding = previous.get_rectangle_around(position, 1, 1)
            return previous.any_values_match(surrounding, bool)

        mask = previous.combine_with(relaxed, _expand, with_position=True, dtype=bool)
        LOGGER.debug("Relaxed expansion pass grew mask to %d pixel(s)", int(mask.values.sum()))
    return mask


def confirm_with_intensity(colours: Grid, mask: Grid) -> Grid:
    """Keep only masked pixels whose greyscale value is within the skin band."""

    def _confirm(rgb: np.ndarray, is_skin: np.ndarray) -> np.ndarray:
        intensity = to_greyscale(rgb)
        return is_skin & (intensity >= MIN_SKIN_GREYSCALE) & (intensity <= MAX_SKIN_GREYSCALE)

    confirmed = colours.combine_with(mask, _confirm, vectorized=True, dtype=bool)
    LOGGER.debug(
        "Intensity band kept %d of %d masked pixel(s)", int(confirmed.values.sum()), int(mask.values.sum())
    )
    return confirmed
