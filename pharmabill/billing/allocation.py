"""Assigning per-batch quantities of a medicine into the cart."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from pharmabill.data.catalog_repo import CatalogRepository
from pharmabill.errors import EmptySelectionError, ValidationError
from pharmabill.models.cart import Cart, CartLine
from pharmabill.models.medicine import Batch, Medicine

logger = logging.getLogger(__name__)


@dataclass
class AllocationSession:
    """Batches on offer for one medicine plus the quantities typed so far."""

    medicine: Medicine
    batches: List[Batch]
    quantities: Dict[str, int] = field(default_factory=dict)

    @property
    def is_edit(self) -> bool:
        return any(qty > 0 for qty in self.quantities.values())

    def set_quantity(self, batch_id: str, qty: int) -> None:
        self.quantities[batch_id] = qty


def build_lines(
    medicine: Medicine, batches: List[Batch], requested: Mapping[str, int]
) -> List[CartLine]:
    """Validate requested quantities against stock and build cart lines."""
    by_id = {batch.id: batch for batch in batches}
    for batch_id, qty in requested.items():
        if isinstance(qty, bool) or not isinstance(qty, int):
            raise ValidationError(
                f"Quantity for batch {batch_id} must be a whole number, got {qty!r}."
            )
    selected = [(batch_id, qty) for batch_id, qty in requested.items() if qty > 0]
    if not selected:
        raise EmptySelectionError("Please select at least one batch with quantity.")

    lines: List[CartLine] = []
    for batch_id, qty in selected:
        batch = by_id.get(batch_id)
        if batch is None:
            raise ValidationError(f"Batch {batch_id} is not available for {medicine.name}.")
        if qty > batch.quantity:
            raise ValidationError(
                f"Quantity for batch {batch.batch_no} exceeds available stock ({batch.quantity})."
            )
        lines.append(
            CartLine(
                medicine_id=medicine.id,
                medicine_name=medicine.name,
                batch_id=batch.id,
                batch_no=batch.batch_no,
                quantity=qty,
                unit_price=batch.mrp,
                gst_percent=medicine.gst_percent,
                discount_percent=medicine.discount_percent,
            )
        )
    return lines


class BatchAllocator:
    """Loads batches for a medicine and writes the operator's choice into the cart."""

    def __init__(self, catalog: CatalogRepository, cart: Cart) -> None:
        self.catalog = catalog
        self.cart = cart

    def available_batches(self, medicine: Medicine) -> List[Batch]:
        return [batch for batch in self.catalog.list_batches(medicine.id) if batch.in_stock]

    def open_for(self, medicine: Medicine) -> AllocationSession:
        """Start an allocation, pre-filled from lines already in the cart."""
        batches = self.available_batches(medicine)
        offered = {batch.id for batch in batches}
        existing = self.cart.existing_quantities(medicine.id)
        # Batches sold out since they were carted can only be dropped
        return AllocationSession(
            medicine=medicine,
            batches=batches,
            quantities={bid: qty for bid, qty in existing.items() if bid in offered},
        )

    def allocate(
        self, medicine: Medicine, batches: List[Batch], requested: Mapping[str, int]
    ) -> List[CartLine]:
        """Replace the medicine's cart lines; on any error the cart is untouched."""
        lines = build_lines(medicine, batches, requested)
        self.cart.add_or_replace(medicine.id, lines)
        logger.info(
            "Allocated %s: %s",
            medicine.name,
            ", ".join(f"{line.batch_no}x{line.quantity}" for line in lines),
        )
        return lines

    def commit(self, session: AllocationSession) -> List[CartLine]:
        return self.allocate(session.medicine, session.batches, session.quantities)
