"""Customer lookup and creation."""

from __future__ import annotations

from typing import List, Optional

from pharmabill.data.api_client import ApiClient
from pharmabill.data.catalog_repo import unwrap_items
from pharmabill.models.customer import Customer


class CustomerRepository:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def search(self, query: str) -> List[Customer]:
        """Case-insensitive substring match on name or phone, done server-side."""
        data = self.client.get("/customers", params={"q": query})
        items, _ = unwrap_items(data)
        return [Customer.from_api(row) for row in items]

    def find_by_name(self, name: str, search: Optional[str] = None) -> Optional[Customer]:
        """Exact-name match among the results of a server-side search."""
        data = self.client.get("/customers", params={"search": search or name})
        items, _ = unwrap_items(data)
        for row in items:
            if row.get("name") == name:
                return Customer.from_api(row)
        return None

    def create(self, name: str, phone: Optional[str] = None) -> Customer:
        payload = {"name": name}
        if phone:
            payload["phone"] = phone
        return Customer.from_api(self.client.post("/customers", json=payload) or {})

    def update_phone(self, customer_id: str, phone: str) -> Customer:
        data = self.client.put(f"/customers/{customer_id}", json={"phone": phone})
        return Customer.from_api(data or {})
