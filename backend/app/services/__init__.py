"""Servicios de negocio: detección de estructura y validación."""

from .layout import DetectionResult, LayoutProcessingError, run_detection, validate_staffs

__all__ = [
    "DetectionResult",
    "LayoutProcessingError",
    "run_detection",
    "validate_staffs",
]
