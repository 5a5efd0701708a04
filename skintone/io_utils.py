"""I/O helpers shared across CLI entrypoints and pipeline modules."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List

import numpy as np
import yaml
from PIL import Image

from skintone.grid import Grid
from skintone.types import rgb_array, unpack_rgb

LOGGER = logging.getLogger("skintone.io")

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".gif", ".bmp"}


def ensure_dir(path: Path) -> Path:
    """Create directory (and parents) if it does not exist."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return a dictionary."""
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    LOGGER.debug("Loaded YAML config %s -> keys=%s", path, list(data.keys()))
    return data


def dump_json(path: Path, data: Any, indent: int = 2) -> None:
    """Write JSON to disk (with dataclass support)."""
    def _default(obj: Any) -> Any:
        if is_dataclass(obj):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

    with path.open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=indent, default=_default)
    LOGGER.debug("Wrote JSON file %s", path)


def setup_logging(level: int = logging.INFO) -> None:
    """Configure application logging if not already configured."""
    if logging.getLogger().handlers:
        logging.getLogger().setLevel(level)
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def list_images(directory: Path) -> List[Path]:
    """Return image paths sorted in lexicographic order."""
    if not directory.exists():
        return []
    return sorted(p for p in directory.iterdir() if p.suffix.lower() in IMAGE_SUFFIXES)


def expand_image_paths(paths: Iterable[Path]) -> List[Path]:
    """Flatten a mix of image files and directories into image file paths."""
    resolved: List[Path] = []
    for path in paths:
        if path.is_dir():
            resolved.extend(list_images(path))
        else:
            resolved.append(path)
    return resolved


def load_rgb_pixels(path: Path) -> np.ndarray:
    """Read an image as an (H, W, 3) uint8 RGB array (first frame for animations)."""
    with Image.open(path) as image:
        pixels = np.asarray(image.convert("RGB"), dtype=np.uint8)
    LOGGER.debug("Loaded %s (%dx%d)", path, pixels.shape[1], pixels.shape[0])
    return pixels


def load_rgb_image(path: Path) -> Grid:
    """Read an image file into an RGB grid."""
    return Grid(rgb_array(load_rgb_pixels(path)))


def save_rgb_pixels(path: Path, pixels: np.ndarray) -> None:
    ensure_dir(path.parent)
    Image.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path)
    LOGGER.debug("Wrote image %s", path)


def save_rgb_image(path: Path, colours: Grid) -> None:
    """Persist an RGB grid as an image file."""
    save_rgb_pixels(path, unpack_rgb(colours.values))
