"""Font and logo resources.

Resources are looked up by the service layer, loaded once and shared
read-only between renders. A missing asset is never an error: the
loaders return ``None`` and the renderer falls back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontResource:
    """A TrueType font file to embed for Unicode text."""

    path: Path
    family: str = "DejaVu"


@dataclass(frozen=True)
class ImageResource:
    """Raw bytes of a raster image (PNG/JPEG)."""

    data: bytes
    name: str = "logo"


def load_font(path: str | Path | None, family: str = "DejaVu") -> FontResource | None:
    if not path:
        return None
    font_path = Path(path)
    if not font_path.is_file():
        logger.info("Font not found at %s, built-in font will be used", font_path)
        return None
    return FontResource(path=font_path.resolve(), family=family)


def load_image(path: str | Path | None) -> ImageResource | None:
    if not path:
        return None
    image_path = Path(path)
    if not image_path.is_file():
        logger.info("Logo not found at %s, documents will have no logo", image_path)
        return None
    return ImageResource(data=image_path.read_bytes(), name=image_path.name)
