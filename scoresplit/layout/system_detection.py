"""Detect musical systems on a page from its projection profile."""
from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .projection_analysis import (
    Boundary,
    absolute_threshold,
    as_profile,
    find_content_bounds,
    find_gaps,
)


def detect_system_boundaries(
    projection: Sequence[float] | np.ndarray,
    min_gap_height: int = 50,
    low_threshold_fraction: float = 0.05,
) -> List[Boundary]:
    """Split a page profile into systems separated by tall blank gaps.

    Internal boundaries hug the content.  The first system is stretched up to
    row ``0`` and the last one down to the end of the page so page margins are
    never left outside every system.
    """

    profile = as_profile(projection)
    threshold = absolute_threshold(profile, low_threshold_fraction)
    if threshold is None:
        return []

    systems: List[Boundary] = []
    search_start = 0
    for gap in find_gaps(profile, min_gap_height, threshold):
        region = find_content_bounds(profile, search_start, gap.start, threshold)
        if region is not None:
            systems.append(region)
        search_start = gap.end

    tail = find_content_bounds(profile, search_start, profile.size, threshold)
    if tail is not None:
        systems.append(tail)

    if not systems:
        return []

    systems[0] = Boundary(top_px=0, bottom_px=systems[0].bottom_px)
    systems[-1] = Boundary(top_px=systems[-1].top_px, bottom_px=int(profile.size))
    return systems
