"""Split multi-page scores into per-instrument parts."""

__version__ = "0.1.0"
