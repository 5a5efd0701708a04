"""Confirms candidate face regions with HOG features and a linear SVM."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

import numpy as np

from skintone.classifier.codec import load_model
from skintone.classifier.hog import NUMBER_OF_BINS, extract_features
from skintone.classifier.svm import SupportVectorMachine
from skintone.imaging import extract_section_and_resize
from skintone.types import Rectangle, Size

LOGGER = logging.getLogger("skintone.classifier.face")


class FaceClassifier:
    """Scores fixed-size samples cut from candidate regions."""

    def __init__(
        self,
        svm: SupportVectorMachine,
        sample_size: Size = (128, 128),
        cell_size: int = 8,
    ) -> None:
        if svm is None:
            raise ValueError("svm is required")
        width, height = sample_size
        if width <= 0 or height <= 0:
            raise ValueError(f"sample_size must be positive (got {width}x{height})")
        expected = (width // cell_size) * (height // cell_size) * NUMBER_OF_BINS
        if svm.number_of_inputs != expected:
            raise ValueError(
                f"Model expects {svm.number_of_inputs} inputs but {width}x{height} samples "
                f"with {cell_size}px cells produce {expected}"
            )
        self.svm = svm
        self.sample_size = (width, height)
        self.cell_size = cell_size

    @classmethod
    def from_file(cls, path: Path, sample_size: Size = (128, 128), cell_size: int = 8) -> "FaceClassifier":
        return cls(load_model(path), sample_size=sample_size, cell_size=cell_size)

    def sample(self, pixels: np.ndarray, region: Rectangle) -> np.ndarray:
        return extract_section_and_resize(pixels, region, self.sample_size)

    def score_sample(self, sample: np.ndarray) -> float:
        return self.svm.score(extract_features(sample, self.cell_size))

    def is_face(self, sample: np.ndarray) -> bool:
        """Decide whether an already-sized sample image shows a face."""
        return self.score_sample(sample) >= 0.0

    def classify_regions(self, pixels: np.ndarray, regions: List[Rectangle]) -> List[Tuple[Rectangle, float, bool]]:
        """Score every region of ``pixels``; returns ``(region, score, is_face)`` triples."""
        results: List[Tuple[Rectangle, float, bool]] = []
        for index, region in enumerate(regions):
            score = self.score_sample(self.sample(pixels, region))
            is_face = score >= 0.0
            LOGGER.debug("Region %d %s score=%.4f face=%s", index, region, score, is_face)
            results.append((region, score, is_face))
        return results
