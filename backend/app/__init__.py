"""Inicialización de la aplicación FastAPI para el backend de separación de partes."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import include_routers
from .core import settings
from .services import LayoutProcessingError


def _error_response(status_code: int, message: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message, **extra})


def create_app() -> FastAPI:
    """Crea la aplicación con CORS y respuestas de error homogéneas."""
    app = FastAPI(title="Score Split API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.allowed_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        # Las rutas siempre envían el detalle como texto.
        message = exc.detail if isinstance(exc.detail, str) else "Se produjo un error al procesar la petición."
        response = _error_response(exc.status_code, message)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Los datos enviados no son válidos. Revisa la petición y vuelve a intentarlo.",
            errors=exc.errors(),
        )

    @app.exception_handler(LayoutProcessingError)
    async def layout_processing_error_handler(request: Request, exc: LayoutProcessingError) -> JSONResponse:
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    include_routers(app)
    return app
