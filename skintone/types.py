"""Common dataclasses, dtypes and type aliases used across the skintone package."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

import numpy as np

# Grid position order: x (column, grows right), y (row, grows down)
Point = Tuple[int, int]
Size = Tuple[int, int]

RGB_DTYPE = np.dtype([("r", np.uint8), ("g", np.uint8), ("b", np.uint8)])
CHROMA_DTYPE = np.dtype([("i", np.float64), ("rg", np.float64), ("by", np.float64)])
HUE_SATURATION_DTYPE = np.dtype(
    [("hue", np.float64), ("saturation", np.float64), ("texture_amplitude", np.float64)]
)


def rgb_array(pixels: np.ndarray) -> np.ndarray:
    """Pack an (H, W, 3) uint8 pixel array into an (H, W) RGB structured array."""
    pixels = np.asarray(pixels)
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ValueError(f"Expected an (H, W, 3) pixel array, got shape {pixels.shape}")
    packed = np.empty(pixels.shape[:2], dtype=RGB_DTYPE)
    packed["r"] = pixels[..., 0]
    packed["g"] = pixels[..., 1]
    packed["b"] = pixels[..., 2]
    return packed


def unpack_rgb(values: np.ndarray) -> np.ndarray:
    """Inverse of :func:`rgb_array`: return an (H, W, 3) uint8 array."""
    return np.stack([values["r"], values["g"], values["b"]], axis=-1).astype(np.uint8)


def to_greyscale(values: np.ndarray) -> np.ndarray:
    """Greyscale intensity of RGB structured values (scalar record or array)."""
    return (
        0.2989 * np.asarray(values["r"], dtype=np.float64)
        + 0.5870 * np.asarray(values["g"], dtype=np.float64)
        + 0.1140 * np.asarray(values["b"], dtype=np.float64)
    )


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned integer rectangle; right and bottom are exclusive."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 0:
            raise ValueError(f"Rectangle width must not be negative (got {self.width})")
        if self.height < 0:
            raise ValueError(f"Rectangle height must not be negative (got {self.height})")

    @classmethod
    def from_ltrb(cls, left: int, top: int, right: int, bottom: int) -> "Rectangle":
        return cls(left, top, right - left, bottom - top)

    @classmethod
    def bounding(cls, points: Iterable[Point]) -> "Rectangle":
        """Tight bounding rectangle of a non-empty collection of points."""
        xs: List[int] = []
        ys: List[int] = []
        for x, y in points:
            xs.append(x)
            ys.append(y)
        if not xs:
            raise ValueError("Cannot bound an empty set of points")
        left = min(xs)
        top = min(ys)
        return cls(left, top, max(xs) - left + 1, max(ys) - top + 1)

    @property
    def left(self) -> int:
        return self.x

    @property
    def top(self) -> int:
        return self.y

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def contains(self, point: Point) -> bool:
        px, py = point
        return self.left <= px < self.right and self.top <= py < self.bottom

    def within(self, size: Size) -> bool:
        """True if the rectangle lies inside an image of ``(width, height)``."""
        width, height = size
        return self.left >= 0 and self.top >= 0 and self.right <= width and self.bottom <= height

    def intersect(self, other: "Rectangle") -> "Rectangle":
        """Overlap of two rectangles; an empty rectangle at the origin if disjoint."""
        left = max(self.left, other.left)
        top = max(self.top, other.top)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if left >= right or top >= bottom:
            return Rectangle(0, 0, 0, 0)
        return Rectangle.from_ltrb(left, top, right, bottom)

    def inflate(self, width: int, height: int) -> "Rectangle":
        """Grow by ``width``/``height`` in total, shifting the origin by half of each."""
        if width < 0:
            raise ValueError(f"Cannot inflate by a negative width ({width})")
        if height < 0:
            raise ValueError(f"Cannot inflate by a negative height ({height})")
        return Rectangle(
            self.x - width // 2,
            self.y - height // 2,
            self.width + width,
            self.height + height,
        )

    def as_xyxy(self) -> Tuple[int, int, int, int]:
        return self.left, self.top, self.right, self.bottom

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    def __str__(self) -> str:
        return f"(X: {self.left}-{self.right}, Y: {self.top}-{self.bottom})"
