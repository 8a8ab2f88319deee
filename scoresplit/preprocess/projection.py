"""Turn a rasterized RGBA page into a vertical content-density profile.

The detection stages only look at how much ink every pixel row carries.  The
helpers in this module reduce a page to that profile in three small steps:

* luma grayscale conversion,
* fixed-threshold binarisation (``1`` marks ink), and
* a horizontal projection summing the ink of every row.
"""
from __future__ import annotations

import numpy as np

# ITU-R BT.601 luma weights.
_LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def rgba_from_buffer(data: bytes | bytearray | memoryview, width: int, height: int) -> np.ndarray:
    """View a packed RGBA byte buffer as an ``(height, width, 4)`` array."""

    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid raster size {width}x{height}")
    expected = width * height * 4
    buffer = np.frombuffer(data, dtype=np.uint8)
    if buffer.size != expected:
        raise ValueError(
            f"RGBA buffer holds {buffer.size} bytes, expected {expected} for {width}x{height}"
        )
    return buffer.reshape(height, width, 4)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Return the luma of ``image`` rounded to ``uint8``.

    ``image`` must be an ``(H, W, 4)`` RGBA or ``(H, W, 3)`` RGB array.  The
    alpha channel is ignored and halves are rounded up.
    """

    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an RGB or RGBA image, got shape {image.shape}")
    luma = image[..., :3].astype(np.float64) @ _LUMA_WEIGHTS
    return np.floor(luma + 0.5).astype(np.uint8)


def to_binary(grayscale: np.ndarray, threshold: int = 128) -> np.ndarray:
    """Mark pixels darker than ``threshold`` as ink (``1``)."""

    return (grayscale < threshold).astype(np.uint8)


def horizontal_projection(binary: np.ndarray, width: int, height: int) -> np.ndarray:
    """Count the ink pixels of every row."""

    rows = np.asarray(binary).reshape(height, width)
    return rows.sum(axis=1, dtype=np.int64)


def compute_profile(image: np.ndarray, threshold: int = 128) -> np.ndarray:
    """Run the grayscale, binary and projection steps on ``image``."""

    height, width = image.shape[:2]
    gray = to_grayscale(image)
    binary = to_binary(gray, threshold=threshold)
    return horizontal_projection(binary, width, height)
