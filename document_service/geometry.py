"""Fixed page and table geometry.

All values are PDF points on an A4 page with the origin at the top-left
corner. Column sizing is static for the lifetime of a document.
"""

from __future__ import annotations

# ============================================================
# Page
# ============================================================

PAGE_WIDTH = 595.28
PAGE_HEIGHT = 841.89
MARGIN = 40
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN

# ============================================================
# Header / meta / customer blocks
# ============================================================

LOGO_X = 40
LOGO_Y = 30
LOGO_WIDTH = 60

COMPANY_Y = 35
ADDRESS_Y = 57
TITLE_Y = 78

META_X = 400
META_WIDTH = PAGE_WIDTH - MARGIN - META_X
INVOICE_NO_Y = 60
DATE_Y = 75

CUSTOMER_X = 50
BILLED_TO_Y = 130
CUSTOMER_NAME_Y = 145
CUSTOMER_ADDRESS_Y = 160
CUSTOMER_PHONE_Y = 175

# ============================================================
# Table
# ============================================================

TABLE_LEFT = 50
TABLE_WIDTH = 500
TABLE_RIGHT = TABLE_LEFT + TABLE_WIDTH
TABLE_TOP = 210
ROW_HEIGHT = 22
RULE_OFFSET = 6  # rectangles and rules sit this far above the text box
CELL_PADDING = 2

COLUMN_X = (50, 90, 290, 370, 450)
COLUMN_WIDTHS = (40, 200, 80, 80, 100)

PAGE_BREAK_Y = 700
CONTINUATION_TOP = 50

# ============================================================
# Totals / footer
# ============================================================

TOTALS_GAP = 20
TOTALS_X = 350
TOTALS_LINE_OFFSETS = (0, 15, 30, 50)
FOOTER_Y = 780

# Colors
HEADER_FILL = "#c8dcff"
ADDRESS_COLOR = "#444444"
FOOTER_COLOR = "#666666"
TEXT_COLOR = "#000000"


def column_bounds(index: int) -> tuple[float, float]:
    """Return ``(x, width)`` of table column *index*."""
    return COLUMN_X[index], COLUMN_WIDTHS[index]


def grid_line_xs() -> tuple[float, ...]:
    """X positions of the vertical table rules: every column edge plus the right edge."""
    return COLUMN_X + (TABLE_RIGHT,)


def needs_page_break(y: float) -> bool:
    return y > PAGE_BREAK_Y


def page_capacity(first_row_y: float) -> int:
    """Number of rows emitted from *first_row_y* before a page break fires."""
    return int((PAGE_BREAK_Y - first_row_y) // ROW_HEIGHT) + 1


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """Convert ``#rrggbb`` (or ``#rgb``) to an RGB tuple."""
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Invalid color: {color!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
