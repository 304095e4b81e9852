"""Cart lines and the in-memory cart for one billing session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from pharmabill.errors import ValidationError
from pharmabill.money import LineBreakdown, compute_line


@dataclass(frozen=True)
class CartLine:
    medicine_id: str
    medicine_name: str
    batch_id: str
    batch_no: str
    quantity: int
    unit_price: float
    gst_percent: float = 0.0
    discount_percent: float = 0.0

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError(f"Quantity for batch {self.batch_no} must be a whole number.")
        if self.quantity <= 0:
            raise ValidationError(f"Quantity for batch {self.batch_no} must be positive.")
        if self.unit_price < 0:
            raise ValidationError(f"MRP for batch {self.batch_no} cannot be negative.")
        for label, pct in (("GST", self.gst_percent), ("Discount", self.discount_percent)):
            if not 0 <= pct <= 100:
                raise ValidationError(f"{label} % must be between 0 and 100, got {pct}.")

    @property
    def breakdown(self) -> LineBreakdown:
        return compute_line(self.unit_price, self.quantity, self.discount_percent, self.gst_percent)

    @property
    def line_amount(self) -> float:
        return self.breakdown.amount

    def to_bill_item(self) -> dict:
        """Wire shape of one item in a create-bill request."""
        return {
            "medicineId": self.medicine_id,
            "batchId": self.batch_id,
            "productName": self.medicine_name,
            "batchNo": self.batch_no,
            "mrp": self.unit_price,
            "quantity": self.quantity,
            "discountPct": self.discount_percent,
            "gstPct": self.gst_percent,
        }


@dataclass(frozen=True)
class CartTotals:
    """Client-side estimate while the cart is being edited."""

    subtotal: float = 0.0
    total_discount: float = 0.0
    total_gst: float = 0.0

    @property
    def grand_total(self) -> float:
        return self.subtotal - self.total_discount + self.total_gst

    @classmethod
    def of(cls, lines: Iterable[CartLine]) -> "CartTotals":
        subtotal = total_discount = total_gst = 0.0
        for line in lines:
            parts = line.breakdown
            subtotal += parts.base
            total_discount += parts.discount
            total_gst += parts.gst
        return cls(subtotal=subtotal, total_discount=total_discount, total_gst=total_gst)


class Cart:
    """Ordered cart lines, at most one per (medicine, batch)."""

    def __init__(self) -> None:
        self._lines: List[CartLine] = []
        self._totals: Optional[CartTotals] = None

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    def snapshot(self) -> Tuple[CartLine, ...]:
        return self.lines

    def add_or_replace(self, medicine_id: str, lines: Iterable[CartLine]) -> None:
        """Replace every line of medicine_id with lines, appended at the end."""
        new_lines = list(lines)
        seen = set()
        for line in new_lines:
            if line.medicine_id != medicine_id:
                raise ValidationError(
                    f"Line for {line.medicine_name} does not belong to medicine {medicine_id}."
                )
            if line.batch_id in seen:
                raise ValidationError(f"Batch {line.batch_no} listed twice.")
            seen.add(line.batch_id)

        kept = [line for line in self._lines if line.medicine_id != medicine_id]
        self._lines = kept + new_lines
        self._totals = None

    def remove(self, index: int) -> CartLine:
        if not 0 <= index < len(self._lines):
            raise IndexError(f"No cart line at position {index}.")
        removed = self._lines.pop(index)
        self._totals = None
        return removed

    def clear(self) -> None:
        self._lines = []
        self._totals = None

    def totals(self) -> CartTotals:
        if self._totals is None:
            self._totals = CartTotals.of(self._lines)
        return self._totals

    def contains(self, medicine_id: str) -> bool:
        return any(line.medicine_id == medicine_id for line in self._lines)

    def existing_quantities(self, medicine_id: str) -> Dict[str, int]:
        """Batch quantities already in the cart, used to pre-fill an edit."""
        return {
            line.batch_id: line.quantity
            for line in self._lines
            if line.medicine_id == medicine_id
        }
