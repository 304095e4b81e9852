"""Bill creation, lookup and history."""

from __future__ import annotations

import logging
from typing import List, Optional

from pharmabill import config
from pharmabill.data.api_client import ApiClient
from pharmabill.data.catalog_repo import unwrap_items
from pharmabill.errors import TransientApiError
from pharmabill.models.bill import Bill, BillPage

logger = logging.getLogger(__name__)

SEARCH_BY_BILL_NUMBER = "billNumber"
SEARCH_BY_CUSTOMER = "customerId"
BILL_RESPONSE_UNREADABLE = (
    "Server reply was unreadable; the bill may have been saved. Check receipts before retrying."
)


class BillRepository:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def create(self, customer_id: Optional[str], items: List[dict], notes: str = "") -> Bill:
        payload = {"items": items, "notes": notes}
        if customer_id:
            payload["customerId"] = customer_id
        data = self.client.post("/bills", json=payload)
        if not isinstance(data, dict) or not (data.get("_id") or data.get("id")):
            logger.error("POST /bills succeeded with an unreadable body: %r", data)
            raise TransientApiError(
                "POST /bills returned an unreadable body", server_message=BILL_RESPONSE_UNREADABLE
            )
        return Bill.from_api(data)

    def get(self, bill_id: str) -> Bill:
        return Bill.from_api(self.client.get(f"/bills/{bill_id}") or {})

    def delete(self, bill_id: str) -> None:
        self.client.delete(f"/bills/{bill_id}")

    def list(
        self,
        page: int = 0,
        limit: int = config.BILLS_PAGE_SIZE,
        search: str = "",
        search_type: str = SEARCH_BY_BILL_NUMBER,
    ) -> BillPage:
        params = {"page": page + 1, "limit": limit}
        if search:
            if search_type not in (SEARCH_BY_BILL_NUMBER, SEARCH_BY_CUSTOMER):
                raise ValueError(f"Unknown bill search type: {search_type}")
            params[search_type] = search
        items, total = unwrap_items(self.client.get("/bills", params=params))
        return BillPage(items=[Bill.from_api(row) for row in items], total=total)

    def send_email(self, bill_id: str) -> None:
        self.client.post(f"/bills/{bill_id}/email")
