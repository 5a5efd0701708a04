"""Colour and texture conversions feeding the skin mask.

The intensity / opponent-colour model follows Jay Kapur's skin detection write
up (itself based on Fleck & Forsyth): a logarithmic channel response ``L``,
two opponent channels ``Rg`` and ``By``, and a texture amplitude built from
two median filter passes over intensity.
"""

from __future__ import annotations

import logging

import numpy as np

from skintone.grid import Grid
from skintone.types import CHROMA_DTYPE, HUE_SATURATION_DTYPE, RGB_DTYPE

LOGGER = logging.getLogger("skintone.colour")


def log_response(channel: np.ndarray) -> np.ndarray:
    return 105.0 * np.log10(np.asarray(channel, dtype=np.float64) + 1.0)


def correct_zero_response(colours: Grid) -> Grid:
    """Subtract the smallest channel value found anywhere from every channel."""
    values = colours.values
    smallest = int(min(values["r"].min(), values["g"].min(), values["b"].min()))

    def _subtract(rgb: np.ndarray) -> np.ndarray:
        corrected = np.empty(rgb.shape, dtype=RGB_DTYPE)
        for channel in ("r", "g", "b"):
            corrected[channel] = np.clip(rgb[channel].astype(np.int16) - smallest, 0, 255)
        return corrected

    LOGGER.debug("Zero response correction subtracting %d", smallest)
    return colours.transform(_subtract, vectorized=True)


def to_chroma(colours: Grid) -> Grid:
    """Per-pixel intensity ``i`` and opponent channels ``rg`` / ``by``."""

    def _convert(rgb: np.ndarray) -> np.ndarray:
        lr = log_response(rgb["r"])
        lg = log_response(rgb["g"])
        lb = log_response(rgb["b"])
        chroma = np.empty(rgb.shape, dtype=CHROMA_DTYPE)
        chroma["rg"] = lr - lg
        chroma["by"] = lb - ((lg + lr) / 2.0)
        chroma["i"] = (lr + lb + lg) / 3.0
        return chroma

    return colours.transform(_convert, vectorized=True)


def texture_amplitude(chroma: Grid, first_pass_radius: int, second_pass_radius: int) -> Grid:
    """Local intensity variation.

    Intensity is smoothed with a median filter, subtracted from the original, and
    the absolute differences are smoothed by a second, wider median filter.
    """
    smoothed = chroma.median_filter(lambda values: values["i"], first_pass_radius)
    difference = chroma.combine_with(
        smoothed,
        lambda values, smooth: np.abs(values["i"] - smooth),
        vectorized=True,
        dtype=np.float64,
    )
    return difference.median_filter(lambda values: values, second_pass_radius)


def hue_saturation_texture(smoothed_rg: Grid, smoothed_by: Grid, texture: Grid) -> Grid:
    """Combine smoothed opponent channels with texture amplitude."""
    if texture.size != smoothed_rg.size:
        raise ValueError(
            f"Texture grid {texture.width}x{texture.height} does not match "
            f"colour grid {smoothed_rg.width}x{smoothed_rg.height}"
        )

    def _combine(rg: np.ndarray, by: np.ndarray) -> np.ndarray:
        samples = np.empty(rg.shape, dtype=HUE_SATURATION_DTYPE)
        samples["hue"] = np.degrees(np.arctan2(rg, by))
        samples["saturation"] = np.sqrt((rg * rg) + (by * by))
        samples["texture_amplitude"] = texture.values
        return samples

    return smoothed_rg.combine_with(smoothed_by, _combine, vectorized=True)


def compute_hue_saturation_texture(
    colours: Grid,
    scale: int,
    first_pass_multiplier: int,
    second_pass_multiplier: int,
    rgby_smoothen_multiplier: int,
) -> Grid:
    """Full colour/texture pipeline for an already zero-corrected RGB grid."""
    if scale < 1:
        raise ValueError(f"scale must be at least 1 (got {scale})")
    chroma = to_chroma(colours)
    LOGGER.debug("Calculated I/RgBy values")

    texture = texture_amplitude(
        chroma,
        first_pass_radius=first_pass_multiplier * scale,
        second_pass_radius=second_pass_multiplier * scale,
    )
    LOGGER.debug("Calculated texture amplitude")

    radius = rgby_smoothen_multiplier * scale
    smoothed_rg = chroma.median_filter(lambda values: values["rg"], radius)
    smoothed_by = chroma.median_filter(lambda values: values["by"], radius)
    samples = hue_saturation_texture(smoothed_rg, smoothed_by, texture)
    LOGGER.debug("Calculated hue data")
    return samples
