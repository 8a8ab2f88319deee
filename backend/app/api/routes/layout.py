"""Endpoints de detección y validación de la estructura de la partitura."""

from pathlib import Path

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, Field

from app.core import settings
from app.services import run_detection, validate_staffs
from scoresplit.io import SUPPORTED_EXTENSIONS
from scoresplit.layout import Staff

router = APIRouter(tags=["layout"])


class StaffPayload(BaseModel):
    """Pentagrama tal como lo envía el editor."""

    id: str
    page_index: int = Field(ge=0)
    top: float
    bottom: float
    label: str = ""
    system_id: str = ""

    def to_staff(self) -> Staff:
        return Staff(**self.model_dump())


class ValidationRequest(BaseModel):
    staffs: list[StaffPayload] = Field(default_factory=list)


@router.post("/detect", summary="Detecta sistemas y pentagramas en las páginas recibidas")
async def detect_layout_endpoint(
    file: UploadFile = File(...),
    system_gap_height: int | None = Form(default=None),
    part_gap_height: int | None = Form(default=None),
) -> dict[str, object]:
    """Recibe una imagen (o un TIFF multipágina) y devuelve su estructura."""

    if file.filename is None or not file.filename.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El archivo recibido no tiene un nombre válido.",
        )

    extension = Path(file.filename).suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        formats = ", ".join(sorted(ext.lstrip(".").upper() for ext in SUPPORTED_EXTENSIONS))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Formato de archivo no soportado. Usa uno de: {formats}.",
        )

    file_bytes = await file.read()
    if not file_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El archivo recibido está vacío.",
        )

    if len(file_bytes) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="El archivo supera el tamaño máximo permitido.",
        )

    for name, value in (("system_gap_height", system_gap_height), ("part_gap_height", part_gap_height)):
        if value is not None and value < 1:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"El parámetro {name} debe ser mayor o igual a 1.",
            )

    result = run_detection(
        file_bytes,
        file.filename,
        system_gap_height=system_gap_height,
        part_gap_height=part_gap_height,
    )

    payload = result.to_payload()
    payload["original_filename"] = file.filename
    return payload


@router.post("/validate", summary="Valida la coherencia de los pentagramas editados")
def validate_layout_endpoint(request: ValidationRequest) -> dict[str, object]:
    """Devuelve los avisos de recuento de pentagramas y de etiquetado."""

    return {"status": "ok", **validate_staffs(staff.to_staff() for staff in request.staffs)}
