"""Choosing, creating or defaulting the payee of a bill."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from pharmabill import config
from pharmabill.data.customer_repo import CustomerRepository
from pharmabill.errors import ApiError, PartialSideEffectFailure, ValidationError
from pharmabill.models.customer import Customer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    enabled: bool = False
    phone: str = ""
    name: str = ""


class CustomerResolver:
    """Tracks the selected customer and the optional SMS notification."""

    def __init__(
        self,
        repo: CustomerRepository,
        walk_in_name: str = config.WALK_IN_CUSTOMER_NAME,
        min_query_length: int = config.MIN_CUSTOMER_QUERY_LENGTH,
    ) -> None:
        self.repo = repo
        self.walk_in_name = walk_in_name
        self.min_query_length = min_query_length
        self.selected: Optional[Customer] = None
        self.notification = Notification()

    def search(self, query: str) -> List[Customer]:
        query = query.strip()
        if len(query) < self.min_query_length:
            return []
        return self.repo.search(query)

    def select(self, customer: Customer) -> None:
        if self.selected is None or self.selected.id != customer.id:
            self.notification = Notification()
        self.selected = customer

    def create_new(self, name: str, phone: Optional[str] = None) -> Customer:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please enter customer name.")
        customer = self.repo.create(name, (phone or "").strip() or None)
        logger.info("Created customer %s (%s)", customer.name, customer.customer_id)
        self.select(customer)
        return customer

    def clear(self) -> None:
        self.selected = None
        self.notification = Notification()

    def enable_notification(self, phone: Optional[str] = None) -> Notification:
        """Turn on SMS for the selected customer; reuses the phone on file."""
        if self.selected is None:
            raise ValidationError("Please select a customer first.")
        phone = (phone or "").strip() or self.selected.phone.strip()
        if not phone:
            raise ValidationError("Please enter customer phone number.")
        self.notification = Notification(enabled=True, phone=phone, name=self.selected.name)
        return self.notification

    def disable_notification(self) -> None:
        self.notification = Notification()

    def resolve(self) -> str:
        """Id of the payee: the selected customer, else the walk-in record."""
        if self.selected is not None:
            return self.selected.id
        return self.walk_in_id()

    def walk_in_id(self) -> str:
        walk_in = self.repo.find_by_name(self.walk_in_name, search="Walk-in")
        if walk_in is None:
            walk_in = self.repo.create(self.walk_in_name)
            logger.info("Created walk-in customer record %s", walk_in.id)
        return walk_in.id

    def push_phone(
        self, customer: Optional[Customer], note: Notification
    ) -> Tuple[Optional[Customer], Optional[PartialSideEffectFailure]]:
        """Save note.phone onto customer if it changed.

        Touches only the server, so it is safe on a worker thread. Returns the
        updated customer (None when nothing was saved) and any failure.
        """
        if not note.enabled or customer is None or note.phone == customer.phone:
            return None, None
        try:
            self.repo.update_phone(customer.id, note.phone)
        except ApiError as exc:
            logger.warning("Could not update phone for customer %s: %s", customer.id, exc)
            return None, PartialSideEffectFailure(f"Phone not saved for {customer.name}")
        return replace(customer, phone=note.phone), None

    def apply_notification(self) -> Optional[PartialSideEffectFailure]:
        """Store a new phone on the selected customer; failures are reported, not raised."""
        updated, failure = self.push_phone(self.selected, self.notification)
        if updated is not None:
            self.refresh(updated)
        return failure

    def refresh(self, customer: Customer) -> None:
        """Swap in a newer copy of the selected customer, keeping the notification."""
        if self.selected is not None and self.selected.id == customer.id:
            self.selected = customer
