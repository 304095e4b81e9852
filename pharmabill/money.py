"""Per-line and aggregate money math for the billing cart."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CURRENCY_SYMBOL = "₹"


@dataclass(frozen=True)
class LineBreakdown:
    base: float
    discount: float
    after_discount: float
    gst: float
    amount: float


def compute_line(
    unit_price: float, quantity: int, discount_percent: float, gst_percent: float
) -> LineBreakdown:
    """Discount applies to the line base, GST to the discounted amount."""
    base = unit_price * quantity
    discount = base * discount_percent / 100
    after_discount = base - discount
    gst = after_discount * gst_percent / 100
    return LineBreakdown(
        base=base,
        discount=discount,
        after_discount=after_discount,
        gst=gst,
        amount=after_discount + gst,
    )


def _group_indian(digits: str) -> str:
    # Last three digits, then groups of two: 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount) -> str:
    """Return amount as whole rupees with Indian digit grouping, e.g. ₹1,23,457."""
    value = Decimal(str(amount or 0)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(str(abs(int(value))))}"


def format_percent(value) -> str:
    """Render a percentage without a trailing .0 for whole numbers."""
    number = float(value or 0)
    if number.is_integer():
        return f"{int(number)}%"
    return f"{number:g}%"
