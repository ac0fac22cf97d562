"""Quote/invoice arithmetic and document numbering.

All money is ``Decimal``.  Inputs that arrive as floats are converted via
``str`` so that ``0.1`` stays ``0.1``; every result is rounded half-up to
cents.

    subtotal = sum(unit_price * quantity) + extra
    tax      = subtotal * TAX_RATE
    total    = subtotal + tax
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from otassess_core.constants import DOCUMENT_NUMBER_WIDTH, TAX_RATE

CENT = Decimal("0.01")

Number = Decimal | int | float | str


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineItem:
    unit_price: Decimal
    quantity: Decimal = Decimal(1)

    @classmethod
    def of(cls, unit_price: Number, quantity: Number = 1) -> LineItem:
        return cls(to_decimal(unit_price), to_decimal(quantity))

    @property
    def amount(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def calculate_totals(
    items: Iterable[LineItem],
    extra: Number = 0,
    *,
    tax_rate: Decimal = TAX_RATE,
) -> Totals:
    """Sum line items plus ``extra`` (e.g. billed hours) and apply tax.

    No items and no extra gives all zeros.
    """
    subtotal = quantize(sum((item.amount for item in items), Decimal(0)) + to_decimal(extra))
    tax = quantize(subtotal * tax_rate)
    return Totals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def format_document_number(prefix: str, value: int) -> str:
    """``format_document_number("INV", 1) == "INV000001"``."""
    if value < 1:
        raise ValueError(f"Document numbers start at 1, got {value}")
    return f"{prefix}{value:0{DOCUMENT_NUMBER_WIDTH}d}"
