"""Registro de routers de la API."""

from fastapi import FastAPI

from .routes import health, layout


def include_routers(app: FastAPI) -> None:
    """Incluye los routers principales en la aplicación."""
    app.include_router(health.router, prefix="/api")
    app.include_router(layout.router, prefix="/api")
