"""Load page rasters for detection from image files or uploaded bytes."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import numpy as np

from ..config import DETECTION_DPI
from ..layout.coordinates import get_scale
from ..preprocess.normalize import iter_rgba_frames, normalize_image_dpi


class UnsupportedFormatError(ValueError):
    """Raised when the user provides an unsupported file type."""


SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".pgm"}


@dataclass(frozen=True)
class RasterPage:
    """One page rendered at ``dpi``; ``page_height`` is in page units (points)."""

    page_index: int
    rgba: np.ndarray = field(repr=False, compare=False)
    page_height: float
    dpi: int = DETECTION_DPI

    @property
    def width(self) -> int:
        return int(self.rgba.shape[1])

    @property
    def height(self) -> int:
        return int(self.rgba.shape[0])

    @property
    def scale(self) -> float:
        return get_scale(self.dpi)

    def rgba_bytes(self) -> bytes:
        """Return an independent copy of the pixel buffer for a worker task."""

        return np.ascontiguousarray(self.rgba, dtype=np.uint8).tobytes()


def validate_source(path: Path) -> Path:
    """Validate and normalise the provided ``path``."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    check_extension(path.name)
    return path


def check_extension(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(f"Unsupported input format: {suffix or filename}")
    return suffix


def _to_pages(frames, target_dpi: int, first_index: int) -> List[RasterPage]:
    pages: List[RasterPage] = []
    for offset, (rgba, current_dpi) in enumerate(frames):
        # Page height in points follows from the source raster and its DPI.
        page_height = rgba.shape[0] * 72 / current_dpi
        normalised = normalize_image_dpi(rgba, current_dpi=current_dpi, target_dpi=target_dpi)
        pages.append(
            RasterPage(
                page_index=first_index + offset,
                rgba=normalised,
                page_height=page_height,
                dpi=target_dpi,
            )
        )
    return pages


def load_raster_pages(path: Path, *, target_dpi: int = DETECTION_DPI, first_index: int = 0) -> List[RasterPage]:
    """Load every frame of ``path`` as a page rendered at ``target_dpi``."""

    path = validate_source(path)
    return _to_pages(iter_rgba_frames(path), target_dpi, first_index)


def raster_pages_from_bytes(
    data: bytes,
    filename: str,
    *,
    target_dpi: int = DETECTION_DPI,
) -> List[RasterPage]:
    """Same as :func:`load_raster_pages` for an in-memory upload."""

    check_extension(filename)
    return _to_pages(iter_rgba_frames(data), target_dpi, 0)
