"""Persisted bills as computed by the server."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pharmabill.models.customer import Customer
from pharmabill.models.fields import record_id, to_datetime, to_float, to_int, to_str


@dataclass(frozen=True)
class BillItem:
    product_name: str
    mrp: float
    quantity: int
    discount_pct: float
    gst_pct: float
    line_amount: float
    batch_no: str = ""
    medicine_id: str = ""
    batch_id: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "BillItem":
        return cls(
            product_name=to_str(data.get("productName")),
            mrp=to_float(data.get("mrp")),
            quantity=to_int(data.get("quantity")),
            discount_pct=to_float(data.get("discountPct")),
            gst_pct=to_float(data.get("gstPct")),
            line_amount=to_float(data.get("lineAmount")),
            batch_no=to_str(data.get("batchNo")),
            medicine_id=to_str(data.get("medicineId")),
            batch_id=to_str(data.get("batchId")),
        )


@dataclass(frozen=True)
class BillTotals:
    """Authoritative totals from the server; never recomputed locally."""

    subtotal: float
    total_discount: float
    total_gst: float
    grand_total: float


@dataclass
class Bill:
    id: str
    bill_number: str
    items: List[BillItem]
    totals: BillTotals
    customer_id: str = ""
    customer: Optional[Customer] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "Bill":
        raw_customer = data.get("customerId")
        customer = None
        if isinstance(raw_customer, dict):
            # Populated reference
            customer = Customer.from_api(raw_customer)
            customer_id = customer.id
        else:
            customer_id = to_str(raw_customer)

        return cls(
            id=record_id(data),
            bill_number=to_str(data.get("billNumber")),
            items=[BillItem.from_api(item) for item in data.get("items") or []],
            totals=BillTotals(
                subtotal=to_float(data.get("subtotal")),
                total_discount=to_float(data.get("totalDiscount")),
                total_gst=to_float(data.get("totalGst")),
                grand_total=to_float(data.get("grandTotal")),
            ),
            customer_id=customer_id,
            customer=customer,
            created_at=to_datetime(data.get("billingDate") or data.get("createdAt")),
        )

    @property
    def display_number(self) -> str:
        return self.bill_number or self.id

    @property
    def customer_name(self) -> str:
        return self.customer.name if self.customer else ""


@dataclass
class BillPage:
    items: List[Bill] = field(default_factory=list)
    total: int = 0
