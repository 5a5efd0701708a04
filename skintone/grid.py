"""Immutable 2D grid used as the substrate for every per-pixel transform."""

from __future__ import annotations

from typing import Any, Callable, Iterator, Optional, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from skintone.types import Point, Rectangle

# Upper bound on window elements materialised per median-filter chunk
_MEDIAN_CHUNK_ELEMENTS = 4_000_000


class GridSizeMismatchError(ValueError):
    """Raised when two grids of different dimensions are combined."""


class Grid:
    """Read-only ``width x height`` grid of values, addressed as ``grid[x, y]``.

    Values live in a numpy array indexed ``[y, x]``. Structured dtypes are used
    for multi-channel samples (see :mod:`skintone.types`), so vectorized
    callbacks can read fields such as ``values["hue"]``. Every operation returns
    a new grid; the backing array is flagged read-only.
    """

    __slots__ = ("_values",)

    def __init__(self, values: np.ndarray) -> None:
        if values is None:
            raise ValueError("Grid values are required")
        array = np.array(values)
        if array.ndim != 2:
            raise ValueError(f"Grid values must be two dimensional, got shape {array.shape}")
        if array.shape[0] <= 0 or array.shape[1] <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {array.shape[1]}x{array.shape[0]}")
        array.setflags(write=False)
        self._values = array

    @property
    def width(self) -> int:
        return int(self._values.shape[1])

    @property
    def height(self) -> int:
        return int(self._values.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def bounds(self) -> Rectangle:
        return Rectangle(0, 0, self.width, self.height)

    def __getitem__(self, position: Point) -> Any:
        x, y = position
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Position {position} outside {self.width}x{self.height} grid")
        return self._values[y, x]

    def __len__(self) -> int:
        return self.width * self.height

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, dtype={self._values.dtype})"

    def transform(
        self,
        func: Callable[..., Any],
        vectorized: bool = False,
        with_position: bool = False,
        dtype: Any = None,
    ) -> "Grid":
        """Apply ``func`` to every value, keeping positions.

        Scalar callbacks receive ``(value)`` or ``(value, (x, y))``. Vectorized
        callbacks receive the whole value array (plus ``xs, ys`` coordinate
        arrays when ``with_position``) and must return an array of the same shape.
        """
        if vectorized:
            if with_position:
                ys, xs = np.indices(self._values.shape)
                result = func(self._values, xs, ys)
            else:
                result = func(self._values)
            return Grid(self._check_shape(result, dtype))

        out = np.empty(self._values.shape, dtype=object)
        for y in range(self.height):
            for x in range(self.width):
                value = self._values[y, x]
                out[y, x] = func(value, (x, y)) if with_position else func(value)
        return Grid(_settle_dtype(out, dtype))

    def combine_with(
        self,
        other: "Grid",
        func: Callable[..., Any],
        vectorized: bool = False,
        with_position: bool = False,
        dtype: Any = None,
    ) -> "Grid":
        """Pairwise combine with a same-sized grid."""
        if other is None:
            raise ValueError("Grid to combine with is required")
        if other.size != self.size:
            raise GridSizeMismatchError(
                f"Cannot combine {self.width}x{self.height} grid with {other.width}x{other.height} grid"
            )
        if vectorized:
            if with_position:
                ys, xs = np.indices(self._values.shape)
                result = func(self._values, other.values, xs, ys)
            else:
                result = func(self._values, other.values)
            return Grid(self._check_shape(result, dtype))

        out = np.empty(self._values.shape, dtype=object)
        for y in range(self.height):
            for x in range(self.width):
                a = self._values[y, x]
                b = other.values[y, x]
                out[y, x] = func(a, b, (x, y)) if with_position else func(a, b)
        return Grid(_settle_dtype(out, dtype))

    def median_filter(self, extract: Callable[[np.ndarray], np.ndarray], radius: int) -> "Grid":
        """Median of ``extract(values)`` over the square window of ``radius`` around each position.

        Windows are clipped to the grid, so boundary positions take the median of
        fewer values. ``extract`` is vectorized and must return a numeric array.
        """
        if radius < 0:
            raise ValueError(f"Median filter radius must not be negative (got {radius})")
        radius = int(radius)
        source = self._check_shape(extract(self._values), np.float64)
        if radius == 0:
            return Grid(source)

        side = (2 * radius) + 1
        padded = np.pad(source, radius, mode="constant", constant_values=np.nan)
        windows = sliding_window_view(padded, (side, side))
        rows_per_chunk = max(1, _MEDIAN_CHUNK_ELEMENTS // (self.width * side * side))
        result = np.empty(source.shape, dtype=np.float64)
        for start in range(0, self.height, rows_per_chunk):
            stop = min(self.height, start + rows_per_chunk)
            chunk = windows[start:stop].reshape(stop - start, self.width, side * side)
            result[start:stop] = np.nanmedian(chunk, axis=-1)
        return Grid(result)

    def get_rectangle_around(self, position: Point, expand_left_up: int, expand_right_down: int) -> Rectangle:
        """Window around ``position`` clamped to the grid bounds."""
        if expand_left_up < 0 or expand_right_down < 0:
            raise ValueError("Expansion distances must not be negative")
        x, y = position
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError(f"Position {position} outside {self.width}x{self.height} grid")
        left = max(0, x - expand_left_up)
        top = max(0, y - expand_left_up)
        right = min(self.width, x + expand_right_down + 1)
        bottom = min(self.height, y + expand_right_down + 1)
        return Rectangle.from_ltrb(left, top, right, bottom)

    def crop(self, region: Rectangle) -> "Grid":
        if region.is_empty or not region.within(self.size):
            raise ValueError(f"Region {region} is not a non-empty window of the {self.width}x{self.height} grid")
        return Grid(self._values[region.top : region.bottom, region.left : region.right])

    def enumerate(
        self, predicate: Optional[Callable[[Point, Any], bool]] = None
    ) -> Iterator[Tuple[Point, Any]]:
        """Yield ``((x, y), value)`` pairs in row-major order, optionally filtered."""
        for y in range(self.height):
            for x in range(self.width):
                value = self._values[y, x]
                if predicate is None or predicate((x, y), value):
                    yield (x, y), value

    def any_values_match(self, region: Rectangle, predicate: Callable[[Any], bool]) -> bool:
        """True if any value inside ``region`` satisfies ``predicate``."""
        if not region.within(self.size):
            raise ValueError(f"Region {region} exceeds the {self.width}x{self.height} grid")
        window = self._values[region.top : region.bottom, region.left : region.right]
        return any(predicate(value) for value in window.flat)

    def _check_shape(self, result: Any, dtype: Any) -> np.ndarray:
        array = np.asarray(result, dtype=dtype)
        if array.shape != self._values.shape:
            raise ValueError(
                f"Vectorized callback returned shape {array.shape}, expected {self._values.shape}"
            )
        return array


def _settle_dtype(out: np.ndarray, dtype: Any) -> np.ndarray:
    """Narrow an object array of per-position results to a native dtype when possible."""
    if dtype is not None:
        if np.dtype(dtype).names:
            settled = np.empty(out.shape, dtype=dtype)
            for index, value in np.ndenumerate(out):
                settled[index] = value
            return settled
        return out.astype(dtype)
    try:
        settled = np.array(out.tolist())
    except ValueError:
        return out
    if settled.shape != out.shape or settled.dtype.kind in {"U", "S"}:
        return out
    return settled
