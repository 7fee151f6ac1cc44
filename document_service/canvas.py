"""Drawing surface used by the renderer.

Coordinates are absolute page points, origin top-left. The renderer only
talks to the ``Canvas`` protocol, so it can target the PDF encoder or the
in-memory ``RecordingCanvas`` used for layout assertions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from document_service.assets import ImageResource


class Canvas(Protocol):
    unicode: bool

    @property
    def page_count(self) -> int: ...

    def draw_text(
        self,
        content: str,
        x: float,
        y: float,
        *,
        width: float | None = None,
        align: str = "left",
        size: float = 10,
        color: str = "#000000",
        underline: bool = False,
        font: str | None = None,
    ) -> None: ...

    def draw_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        fill_color: str | None = None,
        stroke_color: str | None = None,
    ) -> None: ...

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None: ...

    def draw_image(self, resource: ImageResource | None, x: float, y: float, *, width: float) -> None: ...

    def new_page(self) -> None: ...

    def finish(self) -> bytes: ...


@dataclass(frozen=True)
class DrawOp:
    kind: str
    page: int
    args: tuple = ()
    options: dict[str, Any] = field(default_factory=dict)


class RecordingCanvas:
    """Canvas that keeps the operation log instead of encoding it."""

    def __init__(self, unicode: bool = True) -> None:
        self.unicode = unicode
        self.ops: list[DrawOp] = []
        self._page = 1
        self.finished = False

    @property
    def page_count(self) -> int:
        return self._page

    def _record(self, kind: str, *args, **options) -> None:
        if self.finished:
            raise RuntimeError("Canvas already finished")
        self.ops.append(DrawOp(kind=kind, page=self._page, args=args, options=options))

    def draw_text(self, content, x, y, *, width=None, align="left", size=10, color="#000000", underline=False, font=None):
        self._record(
            "text", content, x, y, width=width, align=align, size=size, color=color, underline=underline, font=font
        )

    def draw_rect(self, x, y, w, h, *, fill_color=None, stroke_color=None):
        self._record("rect", x, y, w, h, fill_color=fill_color, stroke_color=stroke_color)

    def draw_line(self, x1, y1, x2, y2):
        self._record("line", x1, y1, x2, y2)

    def draw_image(self, resource, x, y, *, width):
        if resource is None:
            return
        self._record("image", resource.name, x, y, width=width)

    def new_page(self):
        self._record("page")
        self._page += 1

    def finish(self) -> bytes:
        self.finished = True
        return b""

    # ---- Query helpers for assertions ----

    def texts(self, page: int | None = None) -> list[str]:
        return [
            op.args[0]
            for op in self.ops
            if op.kind == "text" and (page is None or op.page == page)
        ]

    def of_kind(self, kind: str) -> list[DrawOp]:
        return [op for op in self.ops if op.kind == kind]
