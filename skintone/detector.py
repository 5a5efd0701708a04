"""Skin-tone face region detector orchestration."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

import numpy as np

from skintone.colour import compute_hue_saturation_texture, correct_zero_response
from skintone.config import DetectorConfig
from skintone.grid import Grid
from skintone.imaging import downscaled_size, resize_rgb
from skintone.region_filter import expand_region, scale_region
from skintone.regions import find_components, identify_face_regions
from skintone.skin_mask import confirm_with_intensity, expand_skin_mask, initial_skin_mask
from skintone.types import Rectangle, rgb_array
from skintone.viz import overlay

LOGGER = logging.getLogger("skintone.detector")

ProgressCallback = Callable[[str], None]


class SkinToneFaceDetector:
    """Finds possible face regions from skin colour, texture and enclosed holes."""

    def __init__(self, config: DetectorConfig, progress: Optional[ProgressCallback] = None) -> None:
        if config is None:
            raise ValueError("config is required")
        self.config = config
        self._progress = progress

    def _report(self, message: str, *args) -> None:
        LOGGER.info(message, *args)
        if self._progress is not None:
            self._progress(message % args if args else message)

    def _save_preview(self, name: str, pixels: np.ndarray) -> None:
        if self.config.save_progress_images:
            overlay.save_progress_image(self.config.progress_image_dir, name, pixels)

    def get_possible_face_regions(self, pixels: np.ndarray) -> List[Rectangle]:
        """Candidate face rectangles for an (H, W, 3) RGB image, in its own coordinates."""
        if pixels is None:
            raise ValueError("pixels are required")
        started = time.perf_counter()
        height, width = pixels.shape[:2]
        largest = max(width, height)
        limit = self.config.maximum_image_dimension
        scale_down = (largest / limit) if largest > limit else 1.0
        if scale_down > 1:
            working = resize_rgb(pixels, downscaled_size((width, height), scale_down))
            self._report("Loaded pixel colour data (scale down: %.3f)", scale_down)
        else:
            working = pixels
            self._report("Loaded pixel colour data")

        regions = self.get_possible_face_regions_from_colours(Grid(rgb_array(working)))
        if scale_down > 1:
            regions = [scale_region(region, scale_down, (width, height)) for region in regions]
        self._report(
            "Complete - %d region(s) identified by skin tone face detector [total time: %dms]",
            len(regions),
            int((time.perf_counter() - started) * 1000),
        )
        return regions

    def get_possible_face_regions_from_colours(self, colours: Grid) -> List[Rectangle]:
        """Run the skin-tone pipeline on an RGB grid without any resizing."""
        if colours is None:
            raise ValueError("colours are required")
        config = self.config
        scale = config.calculate_scale(colours.width, colours.height)
        self._report(
            "Loaded image - Dimensions: %dx%d, Skin Tone Filter Scale: %d",
            colours.width,
            colours.height,
            scale,
        )

        corrected = correct_zero_response(colours)
        self._report("Corrected zero response")

        samples = compute_hue_saturation_texture(
            corrected,
            scale=scale,
            first_pass_multiplier=config.texture_amplitude_first_pass_multiplier,
            second_pass_multiplier=config.texture_amplitude_second_pass_multiplier,
            rgby_smoothen_multiplier=config.rgby_smoothen_multiplier,
        )
        self._report("Calculated hue, saturation and texture amplitude")
        self._save_preview("SkinMaskGeneration-Hue.png", overlay.hue_preview(samples))
        self._save_preview("SkinMaskGeneration-Saturation.png", overlay.saturation_preview(samples))
        self._save_preview("SkinMaskGeneration-TextureAmplitude.png", overlay.texture_preview(samples))

        mask = initial_skin_mask(samples, config.strict_skin_filter)
        self._report("Built initial skin mask")
        self._save_preview("SkinMask1.png", overlay.mask_preview(mask))

        mask = expand_skin_mask(mask, samples, config.relaxed_skin_filter, config.number_of_relaxed_expansions)
        self._report("Expanded initial skin mask (fixed loop count of %d)", config.number_of_relaxed_expansions)
        self._save_preview("SkinMask2.png", overlay.mask_preview(mask))

        mask = confirm_with_intensity(corrected, mask)
        self._report("Completed final skin mask")
        self._save_preview("SkinMask3.png", overlay.mask_preview(mask))
        if config.save_progress_images:
            components = find_components(mask, value=True)
            self._save_preview("SkinObjects.png", overlay.components_preview(mask.size, components))

        candidates = identify_face_regions(mask, scale)
        filtered = list(config.aspect_ratio_filter(candidates))
        regions = [
            expand_region(region, config.percent_to_expand_final_region_by, colours.size)
            for region in filtered
        ]
        self._report("Identified %d face region(s)", len(regions))
        return regions


def detect_face_regions(
    pixels: np.ndarray,
    config: Optional[DetectorConfig] = None,
    progress: Optional[ProgressCallback] = None,
) -> List[Rectangle]:
    """Convenience wrapper building a detector for a single call."""
    detector = SkinToneFaceDetector(config or DetectorConfig(), progress=progress)
    return detector.get_possible_face_regions(pixels)
