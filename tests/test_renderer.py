"""
Tests for document_service.renderer — layout phases against a RecordingCanvas.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from document_service import geometry as g
from document_service.canvas import RecordingCanvas
from document_service.models import DocumentRequest
from document_service.renderer import RenderPhase, RenderState, render_document
from document_service.totals import summarize

FIRST_PAGE_ROWS = 22
CONTINUATION_ROWS = 30


def _make_request(**overrides) -> DocumentRequest:
    defaults = dict(
        companyName="Experts Technology, Sangli",
        companyAddress="Address Line 1, Sangli",
        doc_type="Invoice",
        customer_name="Contoso Traders",
        customer_address="12 Station Road",
        customer_phone="9822000000",
        invoice_number="INV-7",
        invoice_date="01/02/2025",
        taxPercent=18,
        discount=5,
        items=[{"name": "Widget", "price": "10.00", "qty": "3"}],
    )
    defaults.update(overrides)
    return DocumentRequest.model_validate(defaults)


def _items(count: int) -> list[dict]:
    return [{"name": f"Item {n}", "price": "1.50", "qty": "2"} for n in range(1, count + 1)]


def _render(request: DocumentRequest, unicode: bool = True, logo=None):
    canvas = RecordingCanvas(unicode=unicode)
    state = render_document(request, canvas, logo=logo)
    return canvas, state


def _serial_cells(canvas: RecordingCanvas):
    x, width = g.column_bounds(0)
    return [op for op in canvas.of_kind("text") if op.args[1] == x and op.options["width"] == width]


def _expected_pages(rows: int) -> int:
    if rows < FIRST_PAGE_ROWS:
        return 1
    return 2 + (rows - FIRST_PAGE_ROWS) // CONTINUATION_ROWS


class TestPhases:
    def test_runs_to_done(self):
        _, state = _render(_make_request())
        assert state.phase is RenderPhase.DONE
        assert state.rows == 1

    def test_advance_after_done_raises(self):
        with pytest.raises(RuntimeError, match="complete"):
            RenderState(phase=RenderPhase.DONE).advance()

    def test_advance_is_sequential(self):
        state = RenderState()
        seen = [state.phase]
        while state.phase is not RenderPhase.DONE:
            state = state.advance()
            seen.append(state.phase)
        assert seen == list(RenderPhase)

    def test_canvas_not_finished_by_render(self):
        canvas, _ = _render(_make_request())
        assert not canvas.finished

    def test_text_uses_canvas_font(self):
        canvas, _ = _render(_make_request())
        assert {op.options["font"] for op in canvas.of_kind("text")} == {None}


class TestHeaderBlocks:
    def test_title_is_upper_cased_and_underlined(self):
        canvas, _ = _render(_make_request(doc_type="quotation"))
        title = next(op for op in canvas.of_kind("text") if op.args[0] == "QUOTATION")
        assert title.options["underline"] is True
        assert title.options["align"] == "center"

    def test_meta_is_right_aligned(self):
        canvas, _ = _render(_make_request())
        meta = [op for op in canvas.of_kind("text") if op.args[0].startswith(("Invoice No:", "Date:"))]
        assert [op.args[0] for op in meta] == ["Invoice No: INV-7", "Date: 01/02/2025"]
        assert all(op.options["align"] == "right" for op in meta)
        assert [op.args[2] for op in meta] == [g.INVOICE_NO_Y, g.DATE_Y]

    def test_logo_drawn_when_present(self, png_logo):
        canvas, _ = _render(_make_request(), logo=png_logo)
        (image,) = canvas.of_kind("image")
        assert image.page == 1
        assert image.args[1:3] == (g.LOGO_X, g.LOGO_Y)
        assert image.options["width"] == g.LOGO_WIDTH

    def test_no_logo_no_image(self):
        canvas, _ = _render(_make_request())
        assert canvas.of_kind("image") == []


class TestCustomerBlock:
    def _customer_ops(self, canvas):
        return {
            op.args[0]: op.args[2]
            for op in canvas.of_kind("text")
            if op.args[1] == g.CUSTOMER_X and op.args[2] < g.TABLE_TOP
        }

    def test_all_fields(self):
        canvas, _ = _render(_make_request())
        assert self._customer_ops(canvas) == {
            "Billed To:": g.BILLED_TO_Y,
            "Contoso Traders": g.CUSTOMER_NAME_Y,
            "12 Station Road": g.CUSTOMER_ADDRESS_Y,
            "Phone: 9822000000": g.CUSTOMER_PHONE_Y,
        }

    def test_missing_fields_skipped_without_shifting(self):
        canvas, _ = _render(_make_request(customer_address=None, customer_name=""))
        assert self._customer_ops(canvas) == {
            "Billed To:": g.BILLED_TO_Y,
            "Phone: 9822000000": g.CUSTOMER_PHONE_Y,
        }


class TestTable:
    def test_header_row(self):
        canvas, _ = _render(_make_request())
        header = canvas.of_kind("rect")[0]
        assert header.args == (g.TABLE_LEFT, g.TABLE_TOP - g.RULE_OFFSET, g.TABLE_WIDTH, g.ROW_HEIGHT)
        assert header.options["fill_color"] == g.HEADER_FILL
        assert {"S. No", "Item Name", "Price (₹)", "Quantity", "Total (₹)"} <= set(canvas.texts(page=1))

    def test_row_cells(self):
        canvas, _ = _render(_make_request())
        first_row_y = g.TABLE_TOP + g.ROW_HEIGHT
        row = [op.args[0] for op in canvas.of_kind("text") if op.args[2] == first_row_y]
        assert row == ["1", "Widget", "10.00", "3.00", "30.00"]

    def test_row_numbering_with_empty_names(self):
        items = [{"name": ""}, {"name": "b"}, {}, {"name": "", "price": "x"}]
        canvas, _ = _render(_make_request(items=items))
        assert [op.args[0] for op in _serial_cells(canvas)] == ["1", "2", "3", "4"]
        x, _ = g.column_bounds(1)
        names = [op.args[0] for op in canvas.of_kind("text") if op.args[1] == x + g.CELL_PADDING and op.args[2] > g.TABLE_TOP]
        assert names == ["", "b", "", ""]

    def test_non_object_entries_keep_numbering(self):
        items = [{"name": "A"}, "junk", 7, {"name": "D"}]
        canvas, state = _render(_make_request(items=items))
        assert state.rows == 4
        assert [op.args[0] for op in _serial_cells(canvas)] == ["1", "2", "3", "4"]
        x, _ = g.column_bounds(1)
        names = [op.args[0] for op in canvas.of_kind("text") if op.args[1] == x + g.CELL_PADDING and op.args[2] > g.TABLE_TOP]
        assert names == ["A", "", "", "D"]

    def test_vertical_rules_span_final_extent(self):
        canvas, state = _render(_make_request(items=_items(3)))
        lines = canvas.of_kind("line")
        assert [op.args[0] for op in lines] == list(g.grid_line_xs())
        bottom = g.TABLE_TOP + 4 * g.ROW_HEIGHT - g.RULE_OFFSET
        for op in lines:
            assert op.args[1] == g.TABLE_TOP - g.RULE_OFFSET
            assert op.args[3] == bottom
        assert state.y == g.TABLE_TOP + 4 * g.ROW_HEIGHT + g.TOTALS_GAP + g.TOTALS_LINE_OFFSETS[-1]

    def test_running_subtotal_matches_summary(self):
        request = _make_request(items=_items(7) + [{"name": "odd", "price": "0.333", "qty": "3"}])
        _, state = _render(request)
        assert state.subtotal == summarize(request).subtotal
        assert state.totals == summarize(request)


class TestPagination:
    @pytest.mark.parametrize("rows", [0, 1, 21, 22, 23, 51, 52, 53, 90])
    def test_page_count(self, rows):
        canvas, state = _render(_make_request(items=_items(rows)))
        assert canvas.page_count == _expected_pages(rows)
        assert state.page == canvas.page_count
        assert len(canvas.of_kind("page")) == canvas.page_count - 1

    def test_header_blocks_only_on_first_page(self):
        canvas, _ = _render(_make_request(items=_items(40)))
        page_two = canvas.texts(page=2)
        for text in ("Experts Technology, Sangli", "INVOICE", "Billed To:", "S. No", "Invoice No: INV-7"):
            assert text in canvas.texts(page=1)
            assert text not in page_two

    def test_rows_continue_at_top_of_next_page(self):
        canvas, _ = _render(_make_request(items=_items(25)))
        serials = _serial_cells(canvas)
        assert [op.page for op in serials].count(1) == FIRST_PAGE_ROWS
        continuation = serials[FIRST_PAGE_ROWS]
        assert continuation.page == 2
        assert continuation.args[0] == str(FIRST_PAGE_ROWS + 1)
        assert continuation.args[2] == g.CONTINUATION_TOP

    def test_footer_only_on_last_page(self):
        canvas, _ = _render(_make_request(items=_items(40)))
        footers = [op for op in canvas.of_kind("text") if op.args[0].startswith("Thank you for your business!")]
        assert len(footers) == 1
        assert footers[0].page == canvas.page_count
        assert footers[0].args[2] == g.FOOTER_Y


class TestTotalsBlock:
    def _totals_lines(self, canvas):
        return [op.args[0] for op in canvas.of_kind("text") if op.args[1] == g.TOTALS_X]

    def test_worked_example(self):
        canvas, _ = _render(_make_request())
        assert self._totals_lines(canvas) == [
            "Subtotal: ₹30.00",
            "Tax (18%): ₹5.40",
            "Discount: -₹5.00",
            "Grand Total: ₹30.40",
        ]

    def test_fallback_currency_without_unicode_font(self):
        canvas, _ = _render(_make_request(), unicode=False)
        assert self._totals_lines(canvas)[-1] == "Grand Total: Rs.30.40"
        assert "Price (Rs.)" in canvas.texts()

    def test_empty_items_negative_grand_total(self):
        canvas, _ = _render(_make_request(items=[], taxPercent=0))
        assert self._totals_lines(canvas) == [
            "Subtotal: ₹0.00",
            "Tax (0%): ₹0.00",
            "Discount: -₹5.00",
            "Grand Total: ₹-5.00",
        ]

    def test_grand_total_larger_font(self):
        canvas, _ = _render(_make_request())
        grand = next(op for op in canvas.of_kind("text") if op.args[0].startswith("Grand Total"))
        assert grand.options["size"] == 11


class TestIsolation:
    def test_concurrent_renders_do_not_share_state(self):
        requests = [_make_request(invoice_number=f"INV-{n}", items=_items(n)) for n in range(1, 30)]

        def run(request):
            canvas, state = _render(request)
            return request, canvas, state

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(run, requests))

        for request, canvas, state in results:
            assert state.rows == len(request.items)
            assert state.subtotal == summarize(request).subtotal
            assert f"Invoice No: {request.invoice_number}" in canvas.texts()
