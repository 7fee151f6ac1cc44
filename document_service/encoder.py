"""PDF encoder — a Canvas backed by fpdf2.

The font is resolved exactly once, when the canvas is built:
- a supplied TrueType font is embedded and used for text by default
- otherwise the built-in Helvetica is used and characters it cannot
  encode are replaced with ``?``

Failures that would yield a broken document (unreadable font program,
errors while serializing) raise ``EncodingError``. A logo that cannot be
decoded is skipped, never fatal.
"""

from __future__ import annotations

import io
import logging

from fpdf import FPDF
from opentelemetry import trace

from document_service.assets import FontResource, ImageResource
from document_service.geometry import MARGIN, TEXT_COLOR, hex_to_rgb

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("document-service")

MEDIA_TYPE = "application/pdf"
FALLBACK_FAMILY = "Helvetica"
LINE_HEIGHT = 1.2

_ALIGN = {"left": "L", "center": "C", "right": "R"}


class EncodingError(RuntimeError):
    """The PDF could not be produced. No partial output exists."""


class PdfCanvas:
    def __init__(self, font: FontResource | None = None, title: str | None = None) -> None:
        self._pdf = FPDF(orientation="portrait", unit="pt", format="A4")
        self._pdf.set_auto_page_break(auto=False)
        self._pdf.set_margins(MARGIN, MARGIN, MARGIN)
        if title:
            self._pdf.set_title(title)
        self.family, self.unicode = self._resolve_font(font)
        self._pdf.add_page()

    def _resolve_font(self, font: FontResource | None) -> tuple[str, bool]:
        if font is None:
            logger.debug("No Unicode font supplied, using built-in %s", FALLBACK_FAMILY)
            return FALLBACK_FAMILY, False
        try:
            self._pdf.add_font(font.family, "", str(font.path))
        except Exception as exc:
            raise EncodingError(f"Cannot embed font {font.path.name}: {exc}") from exc
        return font.family, True

    @property
    def page_count(self) -> int:
        return self._pdf.page

    def _encodable(self, content: str, family: str) -> str:
        if self.unicode and family == self.family:
            return content
        return content.encode("latin-1", "replace").decode("latin-1")

    # ------------------------------------------------------------------
    # Canvas operations
    # ------------------------------------------------------------------

    def draw_text(self, content, x, y, *, width=None, align="left", size=10, color=TEXT_COLOR, underline=False, font=None):
        pdf = self._pdf
        family = font or self.family
        pdf.set_font(family, "U" if underline else "", size)
        pdf.set_text_color(*hex_to_rgb(color))
        if width is None:
            width = pdf.w - pdf.r_margin - x
        pdf.set_xy(x, y)
        pdf.cell(width, size * LINE_HEIGHT, self._encodable(content, family), align=_ALIGN[align])

    def draw_rect(self, x, y, w, h, *, fill_color=None, stroke_color=None):
        style = ""
        if stroke_color or not fill_color:
            self._pdf.set_draw_color(*hex_to_rgb(stroke_color or TEXT_COLOR))
            style += "D"
        if fill_color:
            self._pdf.set_fill_color(*hex_to_rgb(fill_color))
            style += "F"
        self._pdf.rect(x, y, w, h, style=style)

    def draw_line(self, x1, y1, x2, y2):
        self._pdf.set_draw_color(*hex_to_rgb(TEXT_COLOR))
        self._pdf.line(x1, y1, x2, y2)

    def draw_image(self, resource: ImageResource | None, x, y, *, width):
        if resource is None:
            return
        try:
            self._pdf.image(io.BytesIO(resource.data), x=x, y=y, w=width)
        except Exception as exc:
            logger.warning("Skipping unreadable image %s: %s", resource.name, exc)

    def new_page(self):
        self._pdf.add_page()

    def finish(self) -> bytes:
        with tracer.start_as_current_span("document.encode") as span:
            try:
                content = bytes(self._pdf.output())
            except Exception as exc:
                raise EncodingError(f"PDF encoding failed: {exc}") from exc
            span.set_attribute("document.size_bytes", len(content))
            return content
