"""Read-only access to medicines, batches and stock figures."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pharmabill import config
from pharmabill.data.api_client import ApiClient
from pharmabill.models.medicine import Batch, Medicine, MedicineStats
from pharmabill.models.fields import to_int


def unwrap_items(data: Any) -> Tuple[List[dict], int]:
    """Accept either a bare list or an {items, total} envelope."""
    if isinstance(data, list):
        return data, len(data)
    if isinstance(data, dict):
        items = data.get("items") or []
        return items, to_int(data.get("total"), default=len(items)) or len(items)
    return [], 0


class CatalogRepository:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def list_medicines(
        self, search: str = "", page: int = 0, limit: int = config.MEDICINE_PAGE_SIZE
    ) -> Tuple[List[Medicine], int]:
        """Return one page of medicines and the overall count; page is 0-based."""
        data = self.client.get(
            "/medicines", params={"search": search.strip(), "page": page + 1, "limit": limit}
        )
        items, total = unwrap_items(data)
        return [Medicine.from_api(row) for row in items], total

    def list_batches(self, medicine_id: str) -> List[Batch]:
        data = self.client.get("/inventory/batches", params={"medicineId": medicine_id})
        items, _ = unwrap_items(data)
        return [Batch.from_api(row) for row in items]

    def stock_summary(self) -> Dict[str, int]:
        """Total quantity on hand keyed by medicine id."""
        data = self.client.get("/inventory/stock-summary")
        items, _ = unwrap_items(data)
        return {
            str(row["_id"]): to_int(row.get("totalQty"))
            for row in items
            if row and row.get("_id")
        }

    def medicine_stats(self, exp_days: Optional[int] = None) -> Dict[str, MedicineStats]:
        days = exp_days if exp_days is not None else config.EXPIRY_WINDOW_DAYS
        data = self.client.get("/inventory/medicine-stats", params={"expDays": days})
        items, _ = unwrap_items(data)
        return {
            str(row["_id"]): MedicineStats.from_api(row)
            for row in items
            if row and row.get("_id")
        }
