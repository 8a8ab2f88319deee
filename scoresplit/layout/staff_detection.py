"""Staff (instrument row) detection within a page or a single system."""
from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .projection_analysis import (
    Boundary,
    absolute_threshold,
    as_profile,
    find_gaps,
    has_content,
)


def detect_staff_boundaries(
    projection: Sequence[float] | np.ndarray,
    min_gap_height: int = 20,
    low_threshold_fraction: float = 0.05,
) -> List[Boundary]:
    """Cut ``projection`` at the middle of every sufficiently tall gap.

    Slices between two cuts are kept only when they carry at least one row
    above the ink threshold, so blank slices produced by adjacent gaps are
    dropped.
    """

    profile = as_profile(projection)
    threshold = absolute_threshold(profile, low_threshold_fraction)
    if threshold is None:
        return []

    staffs: List[Boundary] = []
    current_top = 0
    for gap in find_gaps(profile, min_gap_height, threshold):
        cut = gap.center
        if cut > current_top and has_content(profile, current_top, cut, threshold):
            staffs.append(Boundary(top_px=current_top, bottom_px=cut))
        current_top = cut

    end = int(profile.size)
    if current_top < end and has_content(profile, current_top, end, threshold):
        staffs.append(Boundary(top_px=current_top, bottom_px=end))
    return staffs


def detect_staffs_in_system(
    projection: Sequence[float] | np.ndarray,
    system_top_px: int,
    system_bottom_px: int,
    min_part_gap_height: int = 15,
    low_threshold_fraction: float = 0.05,
) -> List[Boundary]:
    """Detect the staves of the system spanning ``[system_top_px, system_bottom_px)``.

    Results are expressed in page rows.  A system always yields at least one
    staff: when no internal gap is found the whole system span is returned.
    """

    profile = as_profile(projection)
    window = profile[system_top_px:system_bottom_px]
    parts = [
        part.offset(system_top_px)
        for part in detect_staff_boundaries(window, min_part_gap_height, low_threshold_fraction)
    ]
    if not parts:
        parts.append(Boundary(top_px=system_top_px, bottom_px=system_bottom_px))
    return parts
