"""Detector configuration: tuning values and skin policies passed to the detector."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from skintone.io_utils import load_yaml
from skintone.region_filter import filter_face_regions
from skintone.types import Rectangle

LOGGER = logging.getLogger("skintone.config")


def calculate_scale(width: int, height: int) -> int:
    """Smoothing scale for an image of the given size.

    Images are downscaled to ``maximum_image_dimension`` before detection, so a
    low fixed value works for everything that reaches this point.
    """
    if width <= 0:
        raise ValueError(f"width must be positive (got {width})")
    if height <= 0:
        raise ValueError(f"height must be positive (got {height})")
    return 2


def strict_skin_filter(hue: Any, saturation: Any, texture_amplitude: Any) -> Any:
    """First-pass skin test. Accepts scalars or numpy arrays."""
    return (
        (
            (hue >= 105) & (hue <= 160) & (saturation >= 10) & (saturation <= 60)
        )
        | (
            (hue >= 160) & (hue <= 180) & (saturation >= 30) & (saturation <= 30)
        )
    ) & (texture_amplitude <= 5)


def relaxed_skin_filter(hue: Any, saturation: Any) -> Any:
    """Looser test used when growing the mask into neighbouring pixels."""
    return (hue >= 110) & (hue <= 180) & (saturation >= 0) & (saturation <= 180)


@dataclass(frozen=True)
class DetectorConfig:
    maximum_image_dimension: int = 200
    calculate_scale: Callable[[int, int], int] = calculate_scale
    texture_amplitude_first_pass_multiplier: int = 2
    texture_amplitude_second_pass_multiplier: int = 3
    rgby_smoothen_multiplier: int = 2
    strict_skin_filter: Callable[[Any, Any, Any], Any] = strict_skin_filter
    relaxed_skin_filter: Callable[[Any, Any], Any] = relaxed_skin_filter
    number_of_relaxed_expansions: int = 2
    aspect_ratio_filter: Callable[[List[Rectangle]], List[Rectangle]] = filter_face_regions
    percent_to_expand_final_region_by: float = 0.13
    # Diagnostic only: writes intermediate masks to progress_image_dir
    save_progress_images: bool = False
    progress_image_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.maximum_image_dimension <= 0:
            raise ValueError("maximum_image_dimension must be positive")
        for name in (
            "texture_amplitude_first_pass_multiplier",
            "texture_amplitude_second_pass_multiplier",
            "rgby_smoothen_multiplier",
            "number_of_relaxed_expansions",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.percent_to_expand_final_region_by < 0:
            raise ValueError("percent_to_expand_final_region_by must not be negative")


_CALLABLE_FIELDS = {"calculate_scale", "strict_skin_filter", "relaxed_skin_filter", "aspect_ratio_filter"}


def config_from_dict(data: Dict[str, Any], base: Optional[DetectorConfig] = None) -> DetectorConfig:
    """Overlay plain values from ``data`` on ``base`` (defaults when omitted)."""
    base = base or DetectorConfig()
    known = {f.name for f in fields(DetectorConfig)} - _CALLABLE_FIELDS
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown detector config keys: {', '.join(unknown)}")
    overrides: Dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if key == "progress_image_dir":
            value = Path(value)
        elif key == "save_progress_images":
            value = bool(value)
        elif key == "percent_to_expand_final_region_by":
            value = float(value)
        else:
            value = int(value)
        overrides[key] = value
    return replace(base, **overrides)


def load_detector_config(path: Optional[Path] = None) -> DetectorConfig:
    """Build a config from YAML, falling back to defaults when no path is given."""
    if path is None:
        return DetectorConfig()
    data = load_yaml(path)
    section = data.get("detector", data)
    config = config_from_dict(section)
    LOGGER.info(
        "Loaded detector config %s (max_dim=%d expansions=%d pad=%.2f)",
        path,
        config.maximum_image_dimension,
        config.number_of_relaxed_expansions,
        config.percent_to_expand_final_region_by,
    )
    return config
