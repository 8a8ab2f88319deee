"""Page raster ingestion."""

from .ingest import (
    SUPPORTED_EXTENSIONS,
    RasterPage,
    UnsupportedFormatError,
    load_raster_pages,
    raster_pages_from_bytes,
    validate_source,
)

__all__ = [
    "RasterPage",
    "SUPPORTED_EXTENSIONS",
    "UnsupportedFormatError",
    "load_raster_pages",
    "raster_pages_from_bytes",
    "validate_source",
]
