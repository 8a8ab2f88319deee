"""Configuración de la aplicación y utilidades relacionadas."""

from functools import lru_cache
from typing import List, Optional

from pydantic import AnyHttpUrl, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scoresplit.config import DETECTION_DPI, DetectionConfig


class Settings(BaseSettings):
    """Define la configuración del backend cargada desde variables de entorno."""

    allowed_origins: List[AnyHttpUrl] = [
        "http://localhost:8000",
        "http://127.0.0.1:8000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    detection_dpi: int = DETECTION_DPI
    system_gap_height: int = 50
    part_gap_height: int = 15
    low_threshold_fraction: float = 0.05
    use_worker_pool: bool = True
    worker_pool_size: Optional[int] = None
    max_upload_bytes: int = 20 * 1024 * 1024

    model_config = SettingsConfigDict(
        env_prefix="scoresplit_",
        env_file=".env",
    )

    @field_validator("allowed_origins", mode="before")
    def parse_allowed_origins(cls, value):
        """Permite definir los orígenes como cadena separada por comas."""
        if isinstance(value, str) and not value.strip().startswith("["):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("worker_pool_size", mode="before")
    def parse_worker_pool_size(cls, value):
        """Trata un valor vacío o cero como «usar todos los núcleos»."""
        if value in (None, "", 0, "0"):
            return None
        return value

    @model_validator(mode="after")
    def ensure_positive_parameters(self):
        """Garantiza que los parámetros de detección sean coherentes."""

        if self.detection_dpi <= 0:
            raise ValueError("La resolución de detección debe ser un entero positivo.")
        if self.system_gap_height <= 0 or self.part_gap_height <= 0:
            raise ValueError("Las alturas mínimas de separación deben ser positivas.")
        if not 0 < self.low_threshold_fraction < 1:
            raise ValueError("La fracción de umbral debe estar entre 0 y 1.")
        return self

    def detection_config(
        self,
        *,
        system_gap_height: Optional[int] = None,
        part_gap_height: Optional[int] = None,
    ) -> DetectionConfig:
        """Construye la configuración de detección, aplicando valores de la petición."""

        return DetectionConfig(
            dpi=self.detection_dpi,
            system_gap_height=system_gap_height or self.system_gap_height,
            part_gap_height=part_gap_height or self.part_gap_height,
            low_threshold_fraction=self.low_threshold_fraction,
            pool_size=self.worker_pool_size,
            use_workers=self.use_worker_pool,
        )


@lru_cache()
def get_settings() -> Settings:
    """Devuelve una instancia cacheada de la configuración."""

    return Settings()


settings = get_settings()
