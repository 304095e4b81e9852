"""Dataclasses representing medicines and their stocked batches."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pharmabill.models.fields import record_id, to_datetime, to_float, to_int, to_str


@dataclass
class Medicine:
    id: str
    name: str
    gst_percent: float = 0.0
    discount_percent: float = 0.0

    @classmethod
    def from_api(cls, data: dict) -> "Medicine":
        return cls(
            id=record_id(data),
            name=to_str(data.get("name")),
            gst_percent=to_float(data.get("gstPercent")),
            discount_percent=to_float(data.get("discountPercent")),
        )


@dataclass
class Batch:
    id: str
    batch_no: str
    quantity: int
    mrp: float
    expiry_date: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> "Batch":
        return cls(
            id=record_id(data),
            batch_no=to_str(data.get("batchNo")),
            quantity=to_int(data.get("quantity")),
            mrp=to_float(data.get("mrp")),
            expiry_date=to_datetime(data.get("expiryDate")),
        )

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0


@dataclass
class MedicineStats:
    total_batches: int = 0
    expiring_soon: int = 0
    total_in_stock: int = 0

    @classmethod
    def from_api(cls, data: dict) -> "MedicineStats":
        return cls(
            total_batches=to_int(data.get("totalBatches")),
            expiring_soon=to_int(data.get("expiringSoonCount")),
            total_in_stock=to_int(data.get("totalInStock")),
        )
