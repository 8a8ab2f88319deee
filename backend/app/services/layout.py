"""Servicios para detectar la estructura de las páginas y validar su edición."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable

from app.core import settings
from scoresplit.io import UnsupportedFormatError, raster_pages_from_bytes
from scoresplit.layout import (
    Layout,
    Staff,
    ValidationMessage,
    get_label_step_validations,
    get_staff_step_validations,
)
from scoresplit.workers import DetectionError, detect_layout

logger = logging.getLogger(__name__)


class LayoutProcessingError(RuntimeError):
    """Excepción base para errores durante la detección de sistemas y pentagramas."""


@dataclass(slots=True)
class DetectionResult:
    """Representa el resultado de detectar la estructura de un documento."""

    page_count: int
    layout: Layout
    validations: list[ValidationMessage] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "page_count": self.page_count,
            "systems": [asdict(system) for system in self.layout.systems],
            "staffs": [asdict(staff) for staff in self.layout.staffs],
            "validations": [asdict(message) for message in self.validations],
        }


def run_detection(
    file_bytes: bytes,
    filename: str,
    *,
    system_gap_height: int | None = None,
    part_gap_height: int | None = None,
) -> DetectionResult:
    """Rasteriza las páginas recibidas y detecta sus sistemas y pentagramas."""

    config = settings.detection_config(
        system_gap_height=system_gap_height,
        part_gap_height=part_gap_height,
    )

    try:
        pages = raster_pages_from_bytes(file_bytes, filename, target_dpi=config.dpi)
    except UnsupportedFormatError as exc:
        raise LayoutProcessingError(str(exc)) from exc
    except (ValueError, OSError) as exc:
        raise LayoutProcessingError("No se pudo leer la imagen proporcionada.") from exc

    if not pages:
        raise LayoutProcessingError("La imagen proporcionada no contiene páginas.")

    logger.info("Detectando estructura de %d páginas de %s", len(pages), filename)
    try:
        layout = detect_layout(pages, config)
    except DetectionError as exc:
        raise LayoutProcessingError(f"La detección falló: {exc}") from exc

    return DetectionResult(
        page_count=len(pages),
        layout=layout,
        validations=get_staff_step_validations(layout.staffs),
    )


def validate_staffs(staffs: Iterable[Staff]) -> dict[str, list[dict[str, Any]]]:
    """Devuelve los avisos de las etapas de pentagramas y etiquetas."""

    staffs = list(staffs)
    return {
        "staff_step": [asdict(message) for message in get_staff_step_validations(staffs)],
        "label_step": [asdict(message) for message in get_label_step_validations(staffs)],
    }
