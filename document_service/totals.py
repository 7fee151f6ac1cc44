"""Totals arithmetic and money formatting.

Totals are derived on every render and never stored:
- subtotal    = sum(price * qty)
- tax_amount  = subtotal * tax_percent / 100
- grand_total = subtotal + tax_amount - discount  (not clamped at zero)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable

from document_service.models import ZERO, DocumentRequest, LineItem

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax_percent: Decimal
    tax_amount: Decimal
    discount: Decimal
    grand_total: Decimal


def compute_totals(subtotal: Decimal, tax_percent: Decimal, discount: Decimal) -> Totals:
    tax_amount = subtotal * tax_percent / HUNDRED
    return Totals(
        subtotal=subtotal,
        tax_percent=tax_percent,
        tax_amount=tax_amount,
        discount=discount,
        grand_total=subtotal + tax_amount - discount,
    )


def subtotal_of(items: Iterable[LineItem]) -> Decimal:
    return sum((item.line_total for item in items), ZERO)


def summarize(request: DocumentRequest) -> Totals:
    """Totals for *request* without rendering it."""
    return compute_totals(subtotal_of(request.items), request.tax_percent, request.discount)


def format_money(amount: Decimal) -> str:
    """Two decimals, half-up; never prints ``-0.00``."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if not rounded:
        rounded = abs(rounded)
    return f"{rounded:f}"


def format_percent(percent: Decimal) -> str:
    """Shortest plain form: ``18``, ``12.5``, ``100``."""
    text = f"{percent.normalize():f}"
    return "0" if text in ("-0", "0") else text
