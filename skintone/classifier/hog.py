"""Histogram of oriented gradients: the nine-bin descriptor and feature extraction."""

from __future__ import annotations

from dataclasses import astuple, dataclass, fields
from typing import Iterable, List

import numpy as np
from skimage.feature import hog

from skintone.imaging import to_greyscale

BIN_CENTRES = (10, 30, 50, 70, 90, 110, 130, 150, 170)
NUMBER_OF_BINS = len(BIN_CENTRES)


@dataclass(frozen=True)
class HistogramOfGradient:
    """Gradient magnitudes binned by unsigned orientation (0-180 degrees)."""

    degrees_10: float
    degrees_30: float
    degrees_50: float
    degrees_70: float
    degrees_90: float
    degrees_110: float
    degrees_130: float
    degrees_150: float
    degrees_170: float

    def __post_init__(self) -> None:
        for field_ in fields(self):
            if getattr(self, field_.name) < 0:
                raise ValueError(f"{field_.name} must not be negative")

    @classmethod
    def from_values(cls, values: Iterable[float]) -> "HistogramOfGradient":
        values = [float(v) for v in values]
        if len(values) != NUMBER_OF_BINS:
            raise ValueError(f"Expected {NUMBER_OF_BINS} bin values, got {len(values)}")
        return cls(*values)

    @property
    def values(self) -> List[float]:
        return list(astuple(self))

    @property
    def sum_of_magnitudes(self) -> float:
        return sum(self.values)

    @property
    def greatest_magnitude(self) -> float:
        return max(self.values)

    def multiply(self, factor: float) -> "HistogramOfGradient":
        return HistogramOfGradient.from_values(value * factor for value in self.values)

    def rotate_90_degrees(self) -> "HistogramOfGradient":
        """Rotate by 90 degrees.

        Bins are 20 degrees apart, so each bin lands exactly between two others
        and its weight is split evenly across them:

            10 -> 100 =>  90 / 110      90 -> 180 => 170 / 10
            30 -> 120 => 110 / 130     110 ->  20 =>  10 / 30
            50 -> 140 => 130 / 150     130 ->  40 =>  30 / 50
            70 -> 160 => 150 / 170     150 ->  60 =>  50 / 70
                                       170 ->  80 =>  70 / 90
        """
        return HistogramOfGradient(
            degrees_10=(self.degrees_90 / 2) + (self.degrees_110 / 2),
            degrees_30=(self.degrees_110 / 2) + (self.degrees_130 / 2),
            degrees_50=(self.degrees_130 / 2) + (self.degrees_150 / 2),
            degrees_70=(self.degrees_150 / 2) + (self.degrees_170 / 2),
            degrees_90=(self.degrees_170 / 2) + (self.degrees_10 / 2),
            degrees_110=(self.degrees_10 / 2) + (self.degrees_30 / 2),
            degrees_130=(self.degrees_30 / 2) + (self.degrees_50 / 2),
            degrees_150=(self.degrees_50 / 2) + (self.degrees_70 / 2),
            degrees_170=(self.degrees_70 / 2) + (self.degrees_90 / 2),
        )

    def normalise(self) -> "HistogramOfGradient":
        """Rescale so the magnitudes sum to one.

        A flat region has no gradients at all; it is spread evenly over the
        nine bins rather than left as zeros.
        """
        total = self.sum_of_magnitudes
        if total == 0:
            return HistogramOfGradient.from_values([1.0 / NUMBER_OF_BINS] * NUMBER_OF_BINS)
        return HistogramOfGradient.from_values(value / total for value in self.values)


def compute_cell_histograms(greyscale: np.ndarray, cell_size: int = 8) -> List[List[HistogramOfGradient]]:
    """One histogram per full ``cell_size`` square cell, rows of cells top to bottom.

    Cells come from ``skimage.feature.hog`` with one cell per block, so each
    histogram is already L1 normalised. Orientations are unsigned and fall into
    20 degree bins centred on 10, 30, ... 170.
    """
    if cell_size <= 0:
        raise ValueError(f"cell_size must be positive (got {cell_size})")
    greyscale = np.asarray(greyscale, dtype=np.float64)
    if greyscale.ndim != 2:
        raise ValueError(f"Expected a 2D greyscale array, got shape {greyscale.shape}")
    rows = greyscale.shape[0] // cell_size
    cols = greyscale.shape[1] // cell_size
    if rows == 0 or cols == 0:
        raise ValueError(
            f"Image {greyscale.shape[1]}x{greyscale.shape[0]} is smaller than one {cell_size}px cell"
        )

    cells = hog(
        greyscale,
        orientations=NUMBER_OF_BINS,
        pixels_per_cell=(cell_size, cell_size),
        cells_per_block=(1, 1),
        block_norm="L1",
        feature_vector=False,
    )
    return [
        [HistogramOfGradient.from_values(cells[r, c, 0, 0]) for c in range(cells.shape[1])]
        for r in range(cells.shape[0])
    ]


def extract_features(pixels: np.ndarray, cell_size: int = 8) -> np.ndarray:
    """Concatenated normalised cell histograms of an RGB (or greyscale) sample.

    Every value lies in ``[0, 1]``, which keeps models built on these features
    inside the range the model codec can store.
    """
    pixels = np.asarray(pixels)
    greyscale = to_greyscale(pixels) if pixels.ndim == 3 else pixels
    features = [
        value
        for row in compute_cell_histograms(greyscale, cell_size)
        for histogram in row
        for value in histogram.normalise().values
    ]
    return np.asarray(features, dtype=np.float64)
