"""Gap and content-band analysis over a horizontal projection profile."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class Boundary:
    """Half-open pixel row span ``[top_px, bottom_px)`` on a page raster."""

    top_px: int
    bottom_px: int

    @property
    def height(self) -> int:
        return self.bottom_px - self.top_px

    def to_slice(self) -> slice:
        return slice(self.top_px, self.bottom_px)

    def offset(self, rows: int) -> "Boundary":
        return Boundary(top_px=self.top_px + rows, bottom_px=self.bottom_px + rows)


@dataclass(frozen=True)
class Gap:
    """Run of near-empty rows ``[start, end)``."""

    start: int
    end: int

    @property
    def center(self) -> int:
        return (self.start + self.end) // 2


def as_profile(projection: Sequence[float] | np.ndarray) -> np.ndarray:
    return np.asarray(projection, dtype=np.float64).ravel()


def absolute_threshold(profile: np.ndarray, low_threshold_fraction: float) -> float | None:
    """Return the ink threshold for ``profile`` or ``None`` for a blank profile."""

    if profile.size == 0:
        return None
    peak = float(profile.max())
    if peak == 0:
        return None
    return peak * low_threshold_fraction


def find_gaps(
    projection: Sequence[float] | np.ndarray,
    min_gap_height: int,
    threshold: float,
) -> List[Gap]:
    """Find maximal runs of rows at or below ``threshold``.

    Runs shorter than ``min_gap_height`` are discarded.  Runs touching either
    end of the profile are reported like any other.
    """

    profile = as_profile(projection)
    if profile.size == 0:
        return []

    low = np.concatenate(([0], (profile <= threshold).astype(np.int8), [0]))
    edges = np.diff(low)
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1)
    return [
        Gap(start=int(start), end=int(end))
        for start, end in zip(starts, ends)
        if end - start >= min_gap_height
    ]


def has_content(profile: np.ndarray, start: int, end: int, threshold: float) -> bool:
    return bool(np.any(profile[start:end] > threshold))


def find_content_bounds(
    projection: Sequence[float] | np.ndarray,
    start: int,
    end: int,
    threshold: float,
) -> Optional[Boundary]:
    """Return the tight span of rows above ``threshold`` within ``[start, end)``."""

    profile = as_profile(projection)
    rows = np.flatnonzero(profile[start:end] > threshold)
    if rows.size == 0:
        return None
    return Boundary(top_px=start + int(rows[0]), bottom_px=start + int(rows[-1]) + 1)
