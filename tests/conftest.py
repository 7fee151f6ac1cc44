"""Shared fixtures for the document service tests."""

import io
from pathlib import Path

import pytest
from PIL import Image

from document_service.assets import FontResource, ImageResource

_FONT_CANDIDATES = (
    "assets/fonts/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
)


@pytest.fixture
def png_logo() -> ImageResource:
    buf = io.BytesIO()
    Image.new("RGB", (120, 60), (200, 30, 30)).save(buf, format="PNG")
    return ImageResource(data=buf.getvalue(), name="logo.png")


@pytest.fixture
def unicode_font() -> FontResource:
    for candidate in _FONT_CANDIDATES:
        path = Path(candidate)
        if path.is_file():
            return FontResource(path=path.resolve(), family="DejaVu")
    pytest.skip("DejaVuSans.ttf not available")
