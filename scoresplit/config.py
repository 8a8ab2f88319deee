"""Default parameters shared by the detection pipeline and the editing model."""
from __future__ import annotations

from dataclasses import dataclass

# Resolution used when rasterizing pages for detection.
DETECTION_DPI = 150

# Maximum number of snapshots kept in the undo stack.
MAX_UNDO = 50


@dataclass
class DetectionConfig:
    """Configuration container for page layout detection."""

    dpi: int = DETECTION_DPI
    system_gap_height: int = 50
    part_gap_height: int = 15
    low_threshold_fraction: float = 0.05
    binary_threshold: int = 128
    pool_size: int | None = None
    use_workers: bool = True

    @property
    def scale(self) -> float:
        return self.dpi / 72
