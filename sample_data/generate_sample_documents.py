#!/usr/bin/env python3
"""Generate deterministic sample documents.

Outputs:
  sample_data/sample_invoice.pdf      — single-page invoice with tax and discount
  sample_data/sample_quotation.pdf    — 40-line quotation spilling onto a second page

Run:
  python sample_data/generate_sample_documents.py
"""

from __future__ import annotations

import os
from pathlib import Path

from document_service.assets import load_font, load_image
from document_service.config import config
from document_service.models import DocumentRequest
from document_service.renderer import render_pdf

HERE = Path(__file__).resolve().parent


# ============================================================
# Data definitions — deterministic, hardcoded
# ============================================================

INVOICE = {
    "doc_type": "Invoice",
    "invoice_number": "INV-1041",
    "invoice_date": "14/11/2025",
    "customer_name": "Contoso Traders",
    "customer_address": "12 Station Road, Sangli",
    "customer_phone": "+91 98220 00000",
    "taxPercent": 18,
    "discount": "5",
    "items": [
        {"name": "Widget", "price": "10.00", "qty": "3"},
        {"name": "Installation", "price": "250", "qty": "1"},
        {"name": "Annual support", "price": "1200.50", "qty": "1"},
    ],
}

QUOTATION = {
    "doc_type": "Quotation",
    "invoice_number": "QT-0007",
    "invoice_date": "15/11/2025",
    "customer_name": "Fabrikam Works",
    "taxPercent": "12.5",
    "items": [
        {"name": f"Component #{n:02d}", "price": f"{n * 7.25:.2f}", "qty": str(n % 4 + 1)}
        for n in range(1, 41)
    ],
}


# ============================================================
# PDF generation
# ============================================================


def _write(data: dict, output_path: Path) -> None:
    request = DocumentRequest.model_validate(data)
    document = render_pdf(
        request,
        font=load_font(config.font_path, family=config.font_family),
        logo=load_image(config.logo_path),
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(document.content)
    print(
        f"  ✓ Generated: {output_path}  ({os.path.getsize(output_path)} bytes, "
        f"{document.page_count} page(s), grand total {document.totals.grand_total:.2f})"
    )


def main() -> None:
    print("Generating sample documents...\n")

    _write(INVOICE, HERE / "sample_invoice.pdf")
    _write(QUOTATION, HERE / "sample_quotation.pdf")

    print("\nDone.")


if __name__ == "__main__":
    main()
