"""Document renderer — lays out one invoice/quotation on a Canvas.

Phases run strictly in order, each taking the current ``RenderState`` and
returning the next one:

    HEADER -> META -> CUSTOMER -> TABLE_HEADER -> TABLE_ROWS -> TOTALS_FOOTER -> DONE

The state is a frozen value owned by a single render, so concurrent
renders share nothing but the read-only font and logo resources.

Layout policy:
- continuation pages do not repeat the table header row
- the footer is drawn once, on the last page
- a negative grand total (discount above subtotal) is shown as-is
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Callable, NamedTuple

from opentelemetry import trace

from document_service import geometry as g
from document_service.assets import FontResource, ImageResource
from document_service.canvas import Canvas
from document_service.encoder import MEDIA_TYPE, PdfCanvas
from document_service.models import ZERO, DocumentRequest, LineItem
from document_service.totals import Totals, compute_totals, format_money, format_percent

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("document-service")

UNICODE_CURRENCY = "₹"
FALLBACK_CURRENCY = "Rs."


class RenderPhase(str, Enum):
    HEADER = "header"
    META = "meta"
    CUSTOMER = "customer"
    TABLE_HEADER = "table_header"
    TABLE_ROWS = "table_rows"
    TOTALS_FOOTER = "totals_footer"
    DONE = "done"


_PHASE_ORDER = tuple(RenderPhase)


@dataclass(frozen=True)
class RenderState:
    phase: RenderPhase = RenderPhase.HEADER
    page: int = 1
    y: float = g.TABLE_TOP
    subtotal: Decimal = ZERO
    rows: int = 0
    totals: Totals | None = None

    def advance(self, **changes) -> RenderState:
        """Move to the next phase, applying *changes*."""
        if self.phase is RenderPhase.DONE:
            raise RuntimeError("Render already complete")
        following = _PHASE_ORDER[_PHASE_ORDER.index(self.phase) + 1]
        return replace(self, phase=following, **changes)


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes
    filename: str
    media_type: str
    page_count: int
    totals: Totals


class _Context(NamedTuple):
    canvas: Canvas
    request: DocumentRequest
    logo: ImageResource | None
    currency: str


# ============================================================
# Phases
# ============================================================


def _draw_header(ctx: _Context, state: RenderState) -> RenderState:
    canvas, request = ctx.canvas, ctx.request
    if ctx.logo is not None:
        canvas.draw_image(ctx.logo, g.LOGO_X, g.LOGO_Y, width=g.LOGO_WIDTH)

    canvas.draw_text(request.company_name, g.MARGIN, g.COMPANY_Y, width=g.CONTENT_WIDTH, align="center", size=18)
    canvas.draw_text(
        request.company_address,
        g.MARGIN,
        g.ADDRESS_Y,
        width=g.CONTENT_WIDTH,
        align="center",
        size=12,
        color=g.ADDRESS_COLOR,
    )
    canvas.draw_text(
        request.doc_type.upper(),
        g.MARGIN,
        g.TITLE_Y,
        width=g.CONTENT_WIDTH,
        align="center",
        size=14,
        underline=True,
    )
    return state.advance()


def _draw_meta(ctx: _Context, state: RenderState) -> RenderState:
    canvas, request = ctx.canvas, ctx.request
    canvas.draw_text(f"Invoice No: {request.invoice_number}", g.META_X, g.INVOICE_NO_Y, width=g.META_WIDTH, align="right")
    canvas.draw_text(f"Date: {request.invoice_date}", g.META_X, g.DATE_Y, width=g.META_WIDTH, align="right")
    return state.advance()


def _draw_customer(ctx: _Context, state: RenderState) -> RenderState:
    canvas, customer = ctx.canvas, ctx.request.customer
    canvas.draw_text("Billed To:", g.CUSTOMER_X, g.BILLED_TO_Y, size=11)

    # Absent fields are skipped; present ones keep their own line
    lines = (
        (customer.name, "{}", g.CUSTOMER_NAME_Y),
        (customer.address, "{}", g.CUSTOMER_ADDRESS_Y),
        (customer.phone, "Phone: {}", g.CUSTOMER_PHONE_Y),
    )
    for value, template, y in lines:
        if value:
            canvas.draw_text(template.format(value), g.CUSTOMER_X, y)
    return state.advance()


def column_captions(currency: str) -> tuple[str, ...]:
    return ("S. No", "Item Name", f"Price ({currency})", "Quantity", f"Total ({currency})")


def _draw_table_header(ctx: _Context, state: RenderState) -> RenderState:
    canvas = ctx.canvas
    canvas.draw_rect(g.TABLE_LEFT, g.TABLE_TOP - g.RULE_OFFSET, g.TABLE_WIDTH, g.ROW_HEIGHT, fill_color=g.HEADER_FILL)
    for index, caption in enumerate(column_captions(ctx.currency)):
        x, width = g.column_bounds(index)
        canvas.draw_text(caption, x + g.CELL_PADDING, g.TABLE_TOP, width=width - 2 * g.CELL_PADDING, align="center")
    return state.advance(y=g.TABLE_TOP + g.ROW_HEIGHT)


def _draw_row(canvas: Canvas, state: RenderState, number: int, item: LineItem) -> RenderState:
    y = state.y
    line_total = item.line_total
    canvas.draw_rect(g.TABLE_LEFT, y - g.RULE_OFFSET, g.TABLE_WIDTH, g.ROW_HEIGHT, stroke_color=g.TEXT_COLOR)

    x, width = g.column_bounds(0)
    canvas.draw_text(str(number), x, y, width=width, align="center")
    x, width = g.column_bounds(1)
    canvas.draw_text(item.name, x + g.CELL_PADDING, y, width=width - 2 * g.CELL_PADDING, align="left")
    for index, amount in ((2, item.price), (3, item.qty), (4, line_total)):
        x, width = g.column_bounds(index)
        canvas.draw_text(format_money(amount), x, y, width=width, align="right")

    y += g.ROW_HEIGHT
    page = state.page
    if g.needs_page_break(y):
        canvas.new_page()
        page += 1
        y = g.CONTINUATION_TOP
    return replace(state, y=y, page=page, subtotal=state.subtotal + line_total, rows=number)


def _draw_table_rows(ctx: _Context, state: RenderState) -> RenderState:
    canvas = ctx.canvas
    for number, item in enumerate(ctx.request.items, start=1):
        state = _draw_row(canvas, state, number, item)

    # Rules span from the header top to the last cursor position
    top = g.TABLE_TOP - g.RULE_OFFSET
    bottom = state.y - g.RULE_OFFSET
    for x in g.grid_line_xs():
        canvas.draw_line(x, top, x, bottom)
    return state.advance()


def _draw_totals_footer(ctx: _Context, state: RenderState) -> RenderState:
    canvas, request, sym = ctx.canvas, ctx.request, ctx.currency
    totals = compute_totals(state.subtotal, request.tax_percent, request.discount)

    y = state.y + g.TOTALS_GAP
    sub_dy, tax_dy, discount_dy, grand_dy = g.TOTALS_LINE_OFFSETS
    canvas.draw_text(f"Subtotal: {sym}{format_money(totals.subtotal)}", g.TOTALS_X, y + sub_dy)
    canvas.draw_text(
        f"Tax ({format_percent(totals.tax_percent)}%): {sym}{format_money(totals.tax_amount)}",
        g.TOTALS_X,
        y + tax_dy,
    )
    canvas.draw_text(f"Discount: -{sym}{format_money(totals.discount)}", g.TOTALS_X, y + discount_dy)
    canvas.draw_text(f"Grand Total: {sym}{format_money(totals.grand_total)}", g.TOTALS_X, y + grand_dy, size=11)

    canvas.draw_text(
        f"Thank you for your business! | {request.company_name}",
        g.TABLE_LEFT,
        g.FOOTER_Y,
        width=g.TABLE_WIDTH,
        align="center",
        size=9,
        color=g.FOOTER_COLOR,
    )
    return state.advance(y=y + grand_dy, totals=totals)


_PHASES: tuple[tuple[RenderPhase, Callable[[_Context, RenderState], RenderState]], ...] = (
    (RenderPhase.HEADER, _draw_header),
    (RenderPhase.META, _draw_meta),
    (RenderPhase.CUSTOMER, _draw_customer),
    (RenderPhase.TABLE_HEADER, _draw_table_header),
    (RenderPhase.TABLE_ROWS, _draw_table_rows),
    (RenderPhase.TOTALS_FOOTER, _draw_totals_footer),
)


# ============================================================
# Public API
# ============================================================


def render_document(
    request: DocumentRequest,
    canvas: Canvas,
    logo: ImageResource | None = None,
) -> RenderState:
    """Run every layout phase against *canvas* and return the final state.

    The canvas is not finished here; callers decide when to encode.
    """
    currency = UNICODE_CURRENCY if canvas.unicode else FALLBACK_CURRENCY
    ctx = _Context(canvas=canvas, request=request, logo=logo, currency=currency)

    state = RenderState()
    for phase, step in _PHASES:
        if state.phase is not phase:
            raise RuntimeError(f"Render out of order: expected {phase.value}, at {state.phase.value}")
        state = step(ctx, state)
    return state


def render_pdf(
    request: DocumentRequest,
    font: FontResource | None = None,
    logo: ImageResource | None = None,
) -> RenderedDocument:
    """Render *request* to PDF bytes.

    Raises ``EncodingError`` when the PDF cannot be produced.
    """
    with tracer.start_as_current_span("document.render") as span:
        span.set_attribute("document.item_count", len(request.items))
        canvas = PdfCanvas(font=font, title=f"{request.doc_type} {request.invoice_number}")
        state = render_document(request, canvas, logo=logo)
        content = canvas.finish()
        span.set_attribute("document.page_count", canvas.page_count)

        logger.debug(
            "Rendered %s with %d rows on %d page(s), unicode=%s",
            request.filename,
            state.rows,
            canvas.page_count,
            canvas.unicode,
        )
        return RenderedDocument(
            content=content,
            filename=request.filename,
            media_type=MEDIA_TYPE,
            page_count=canvas.page_count,
            totals=state.totals,
        )
