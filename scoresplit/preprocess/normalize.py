"""Decoding and DPI normalisation of page images.

Pages reach the detector as RGBA arrays rendered at a known DPI.  This module
turns image files (or in-memory uploads) into such arrays:

* every frame of the image is decoded with Pillow and converted to RGBA,
* its DPI is read from the metadata, falling back to :data:`DEFAULT_DPI`, and
* the raster is rescaled with OpenCV so it matches the detection DPI.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import Iterator, Tuple

import cv2
import numpy as np
from PIL import Image, ImageSequence, UnidentifiedImageError

# DPI assumed when the source image does not specify one.
DEFAULT_DPI = 72


def normalize_image_dpi(
    image: np.ndarray,
    *,
    current_dpi: int,
    target_dpi: int,
    interpolation: int | None = None,
) -> np.ndarray:
    """Rescale ``image`` so that it matches ``target_dpi``.

    Parameters
    ----------
    image:
        Image array, any channel count.
    current_dpi:
        DPI reported by the input image.  When this information is unknown, the
        caller should use :data:`DEFAULT_DPI`.
    target_dpi:
        DPI expected by the detector.  Values below ``current_dpi`` downscale
        the image while higher values upscale it.
    interpolation:
        Optional OpenCV interpolation flag.  If omitted, the function chooses an
        interpolation mode appropriate for upsampling or downsampling.
    """

    if current_dpi <= 0:
        raise ValueError("current_dpi must be a positive integer")
    if target_dpi <= 0:
        raise ValueError("target_dpi must be a positive integer")

    if target_dpi == current_dpi:
        return image.copy()

    scale = target_dpi / float(current_dpi)
    interpolation_mode = interpolation
    if interpolation_mode is None:
        interpolation_mode = cv2.INTER_CUBIC if scale > 1 else cv2.INTER_AREA

    new_width = max(1, int(round(image.shape[1] * scale)))
    new_height = max(1, int(round(image.shape[0] * scale)))
    return cv2.resize(image, (new_width, new_height), interpolation=interpolation_mode)


def _frame_dpi(frame: Image.Image) -> int:
    # ``info["dpi"]`` is an ``(x_dpi, y_dpi)`` tuple when present.  TIFF frames
    # report ``IFDRational`` values, so every entry goes through ``float``.
    raw = frame.info.get("dpi")
    if raw is None:
        return DEFAULT_DPI
    values = raw if isinstance(raw, (tuple, list)) else (raw,)
    try:
        dpi = int(round(sum(float(value) for value in values) / len(values)))
    except (TypeError, ValueError, ZeroDivisionError, OverflowError) as exc:
        raise ValueError(f"Malformed DPI metadata: {raw!r}") from exc
    return dpi if dpi > 0 else DEFAULT_DPI


def iter_rgba_frames(source: Path | bytes) -> Iterator[Tuple[np.ndarray, int]]:
    """Yield ``(rgba, dpi)`` for every frame of an image file or buffer."""

    stream = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        document = Image.open(stream)
    except UnidentifiedImageError as exc:
        raise ValueError(f"Unreadable image: {exc}") from exc
    with document:
        for frame in ImageSequence.Iterator(document):
            rgba = np.array(frame.convert("RGBA"), dtype=np.uint8)
            yield rgba, _frame_dpi(frame)
