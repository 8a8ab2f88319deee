"""Raster preprocessing: decoding, DPI normalisation and projection profiles."""

from .normalize import DEFAULT_DPI, iter_rgba_frames, normalize_image_dpi
from .projection import (
    compute_profile,
    horizontal_projection,
    rgba_from_buffer,
    to_binary,
    to_grayscale,
)

__all__ = [
    "DEFAULT_DPI",
    "compute_profile",
    "horizontal_projection",
    "iter_rgba_frames",
    "normalize_image_dpi",
    "rgba_from_buffer",
    "to_binary",
    "to_grayscale",
]
