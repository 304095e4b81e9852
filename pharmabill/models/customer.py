"""Customer record as returned by the API."""

from dataclasses import dataclass

from pharmabill.models.fields import record_id, to_str


@dataclass
class Customer:
    id: str
    name: str
    customer_id: str = ""
    phone: str = ""
    email: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Customer":
        return cls(
            id=record_id(data),
            name=to_str(data.get("name")),
            customer_id=to_str(data.get("customerId")),
            phone=to_str(data.get("phone")),
            email=to_str(data.get("email")),
        )

    @property
    def display_name(self) -> str:
        if self.customer_id:
            return f"{self.name} ({self.customer_id})"
        return self.name
