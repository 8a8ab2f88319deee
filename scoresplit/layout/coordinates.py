"""Conversions between page units (PDF-Y, bottom-up) and raster rows (canvas-Y, top-down)."""
from __future__ import annotations

POINTS_PER_INCH = 72


def get_scale(dpi: float) -> float:
    """Return the pixels-per-point factor for a raster rendered at ``dpi``."""

    return dpi / POINTS_PER_INCH


def canvas_y_to_pdf_y(canvas_y: float, page_height: float, scale: float) -> float:
    return page_height - canvas_y / scale


def pdf_y_to_canvas_y(pdf_y: float, page_height: float, scale: float) -> float:
    return (page_height - pdf_y) * scale
