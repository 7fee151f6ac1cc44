"""Pydantic models for the document service — request contract.

Input is lenient by contract: malformed numbers become 0 and missing
identifiers get generated values. Nothing in here rejects a request.
"""

from __future__ import annotations

import math
import re
import time
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from document_service.config import config

ZERO = Decimal("0")

# Longest numeric prefix, the way browsers parse a form field
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(value: Any) -> Decimal:
    """Parse *value* into a finite Decimal, returning 0 when it cannot."""
    if isinstance(value, bool) or value is None:
        return ZERO
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return ZERO
        number = Decimal(str(value))
    elif isinstance(value, str):
        match = _NUMBER_PREFIX.match(value)
        if not match:
            return ZERO
        try:
            number = Decimal(match.group(1))
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not number.is_finite() or not number:
        return ZERO
    # Outside double range a form field parses to Infinity or 0; both count as 0
    as_float = float(number)
    if math.isinf(as_float) or not as_float:
        return ZERO
    return number


def generate_invoice_number() -> str:
    return f"INV{int(time.time() * 1000)}"


def today() -> str:
    return datetime.now().strftime("%d/%m/%Y")


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return None
    return str(value)


class Customer(BaseModel):
    """Billed-to party. Every field is optional and skipped when empty."""

    name: str | None = None
    address: str | None = None
    phone: str | None = None

    @field_validator("name", "address", "phone", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        return _as_text(value) or None


class LineItem(BaseModel):
    name: str = ""
    price: Decimal = ZERO
    qty: Decimal = ZERO

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return _as_text(value) or ""

    @field_validator("price", "qty", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Decimal:
        return parse_number(value)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.qty


# Identifier fields where an empty string means "generate one"
_DEFAULTED_WHEN_BLANK = {
    "doc_type": ("doc_type", "docType"),
    "invoice_number": ("invoice_number", "invoiceNumber"),
    "invoice_date": ("invoice_date", "invoiceDate"),
}


class DocumentRequest(BaseModel):
    """One invoice or quotation to lay out.

    Accepts the nested ``customer`` object as well as the flat
    ``customer_name`` / ``customer_address`` / ``customer_phone`` keys
    posted by the form.
    """

    model_config = ConfigDict(populate_by_name=True)

    company_name: str = Field(
        default_factory=lambda: config.company_name,
        validation_alias=AliasChoices("company_name", "companyName"),
    )
    company_address: str = Field(
        default_factory=lambda: config.company_address,
        validation_alias=AliasChoices("company_address", "companyAddress"),
    )
    doc_type: str = Field(default="Invoice", validation_alias=AliasChoices("doc_type", "docType"))
    customer: Customer = Field(default_factory=Customer)
    invoice_number: str = Field(
        default_factory=generate_invoice_number,
        validation_alias=AliasChoices("invoice_number", "invoiceNumber"),
    )
    invoice_date: str = Field(
        default_factory=today,
        validation_alias=AliasChoices("invoice_date", "invoiceDate"),
    )
    tax_percent: Decimal = Field(default=ZERO, validation_alias=AliasChoices("tax_percent", "taxPercent"))
    discount: Decimal = ZERO
    items: list[LineItem] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)

        # Fold flat customer_* keys into the nested object
        customer = data.get("customer")
        if isinstance(customer, Customer):
            customer = customer.model_dump()
        elif not isinstance(customer, dict):
            customer = {}
        for key in ("name", "address", "phone"):
            flat = data.pop(f"customer_{key}", None)
            if customer.get(key) is None and flat is not None:
                customer[key] = flat
        data["customer"] = customer

        for names in _DEFAULTED_WHEN_BLANK.values():
            for name in names:
                if name in data and not _as_text(data[name]):
                    del data[name]
        for name in ("company_name", "companyName", "company_address", "companyAddress"):
            if name in data and _as_text(data[name]) is None:
                del data[name]

        items = data.get("items")
        if not isinstance(items, list):
            data["items"] = []
        else:
            # Non-object entries still occupy their row, as an empty item
            data["items"] = [item if isinstance(item, (dict, LineItem)) else {} for item in items]
        return data

    @field_validator("company_name", "company_address", "doc_type", "invoice_number", "invoice_date", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return _as_text(value)

    @field_validator("tax_percent", "discount", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Decimal:
        return parse_number(value)

    @property
    def filename(self) -> str:
        return f"{self.doc_type}-{self.invoice_number}.pdf"
