from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from scoresplit.io import (
    UnsupportedFormatError,
    load_raster_pages,
    raster_pages_from_bytes,
    validate_source,
)


def _png_bytes(width: int, height: int, dpi: int | None = None) -> bytes:
    image = Image.new("RGB", (width, height), color=(255, 255, 255))
    buffer = io.BytesIO()
    if dpi is None:
        image.save(buffer, format="PNG")
    else:
        image.save(buffer, format="PNG", dpi=(dpi, dpi))
    return buffer.getvalue()


def test_page_at_detection_dpi_is_kept_as_is(tmp_path):
    path = tmp_path / "score.png"
    path.write_bytes(_png_bytes(300, 600, dpi=150))

    pages = load_raster_pages(path)

    assert len(pages) == 1
    page = pages[0]
    assert (page.width, page.height) == (300, 600)
    assert page.page_height == pytest.approx(288)
    assert page.scale == pytest.approx(150 / 72)
    assert page.rgba.shape == (600, 300, 4)


def test_page_without_dpi_is_upscaled_from_72_dpi():
    pages = raster_pages_from_bytes(_png_bytes(72, 144), "score.png")

    page = pages[0]
    assert page.page_height == pytest.approx(144)
    assert (page.width, page.height) == (150, 300)


def test_multipage_tiff_yields_indexed_pages(tmp_path):
    path = tmp_path / "score.tiff"
    frames = [Image.new("RGB", (20, 30), color=(255, 255, 255)) for _ in range(3)]
    frames[0].save(path, save_all=True, append_images=frames[1:], dpi=(150, 150))

    pages = load_raster_pages(path, first_index=4)

    assert [page.page_index for page in pages] == [4, 5, 6]
    assert all(page.dpi == 150 and page.height == 30 for page in pages)


def test_rgba_bytes_is_an_independent_packed_copy():
    page = raster_pages_from_bytes(_png_bytes(10, 10, dpi=150), "p.png")[0]

    data = page.rgba_bytes()

    assert len(data) == 10 * 10 * 4
    assert np.frombuffer(data, dtype=np.uint8).reshape(10, 10, 4).tolist() == page.rgba.tolist()


def test_unsupported_extension_is_rejected(tmp_path):
    path = tmp_path / "score.pdf"
    path.write_bytes(b"%PDF-1.4")

    with pytest.raises(UnsupportedFormatError):
        validate_source(path)
    with pytest.raises(UnsupportedFormatError):
        raster_pages_from_bytes(b"%PDF-1.4", "score.pdf")


def test_missing_file_is_reported(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_raster_pages(tmp_path / "missing.png")


def test_corrupt_image_raises_value_error():
    with pytest.raises(ValueError):
        raster_pages_from_bytes(b"not really a png", "broken.png")
