"""Per-page detection steps run inside a worker (or inline as a fallback)."""
from __future__ import annotations

from typing import List, Sequence

from ..layout.projection_analysis import Boundary
from ..layout.staff_detection import detect_staffs_in_system
from ..layout.system_detection import detect_system_boundaries
from ..preprocess.projection import compute_profile, rgba_from_buffer


def run_system_detection(
    rgba_data: bytes,
    width: int,
    height: int,
    system_gap_height: int,
    *,
    low_threshold_fraction: float = 0.05,
    binary_threshold: int = 128,
) -> List[Boundary]:
    profile = compute_profile(rgba_from_buffer(rgba_data, width, height), binary_threshold)
    return detect_system_boundaries(profile, system_gap_height, low_threshold_fraction)


def run_staff_detection(
    rgba_data: bytes,
    width: int,
    height: int,
    system_boundaries: Sequence[Boundary],
    part_gap_height: int,
    *,
    low_threshold_fraction: float = 0.05,
    binary_threshold: int = 128,
) -> List[List[Boundary]]:
    """Detect the staves of every system, one list per entry of ``system_boundaries``."""

    profile = compute_profile(rgba_from_buffer(rgba_data, width, height), binary_threshold)
    return [
        detect_staffs_in_system(
            profile,
            system.top_px,
            system.bottom_px,
            part_gap_height,
            low_threshold_fraction,
        )
        for system in system_boundaries
    ]
