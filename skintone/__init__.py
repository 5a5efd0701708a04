"""
Core package init for the skin-tone face detector.

Makes the `skintone` modules importable without requiring an editable install.
"""

__all__ = [
    "classifier",
    "colour",
    "config",
    "detector",
    "grid",
    "imaging",
    "io_utils",
    "region_filter",
    "regions",
    "skin_mask",
    "types",
    "viz",
]
