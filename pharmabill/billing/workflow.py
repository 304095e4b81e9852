"""Turning the cart into a persisted bill."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Tuple

from pharmabill.billing.customers import CustomerResolver, Notification
from pharmabill.data.bill_repo import BillRepository
from pharmabill.errors import ApiError, ValidationError
from pharmabill.models.bill import Bill
from pharmabill.models.cart import Cart, CartLine
from pharmabill.models.customer import Customer

logger = logging.getLogger(__name__)

CREATE_BILL_FAILED = "Failed to create bill"
CREATE_CUSTOMER_FAILED = "Failed to create customer"


class SubmissionPhase(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionState:
    phase: SubmissionPhase
    bill: Optional[Bill] = None
    message: str = ""
    warnings: Tuple[str, ...] = ()

    @classmethod
    def idle(cls) -> "SubmissionState":
        return cls(SubmissionPhase.IDLE)

    @classmethod
    def validating(cls) -> "SubmissionState":
        return cls(SubmissionPhase.VALIDATING)

    @classmethod
    def submitting(cls) -> "SubmissionState":
        return cls(SubmissionPhase.SUBMITTING)

    @classmethod
    def succeeded(cls, bill: Bill, warnings: Tuple[str, ...] = ()) -> "SubmissionState":
        return cls(SubmissionPhase.SUCCEEDED, bill=bill, warnings=warnings)

    @classmethod
    def failed(cls, message: str) -> "SubmissionState":
        return cls(SubmissionPhase.FAILED, message=message)


@dataclass(frozen=True)
class BillDraft:
    """Everything a bill is made from, frozen when Submit is pressed."""

    customer: Optional[Customer]
    items: Tuple[CartLine, ...]
    notify: Notification = field(default_factory=Notification)
    notes: str = ""
    print_receipt: bool = True

    def to_payload_items(self) -> list:
        return [line.to_bill_item() for line in self.items]


class BillingWorkflow:
    """Idle -> Validating -> Submitting -> Succeeded | Failed.

    A submission runs in three steps so the network part can sit on a worker
    thread: begin() and finish() run on the UI thread and are the only steps
    that read or write the cart and the customer selection; complete() works
    from the frozen draft and talks to the server.
    """

    def __init__(
        self,
        cart: Cart,
        customers: CustomerResolver,
        bills: BillRepository,
        printer: Optional[Callable[[Bill], object]] = None,
        email_receipts: bool = False,
    ) -> None:
        self.cart = cart
        self.customers = customers
        self.bills = bills
        self.printer = printer
        self.email_receipts = email_receipts
        self.state = SubmissionState.idle()
        self._draft: Optional[BillDraft] = None
        self._updated_customer: Optional[Customer] = None

    @property
    def saving(self) -> bool:
        """True from begin() until finish() or abort()."""
        return self._draft is not None

    @property
    def draft(self) -> Optional[BillDraft]:
        return self._draft

    def reset(self) -> None:
        """Explicit operator reset of the billing session."""
        if self.saving:
            return
        self.cart.clear()
        self.customers.clear()
        self.state = SubmissionState.idle()

    def submit(self, print_receipt: bool = True, notes: str = "") -> Optional[SubmissionState]:
        """Create a bill from the cart; returns None if a submission is running."""
        if not self.begin(print_receipt=print_receipt, notes=notes):
            return None
        return self.finish(self.complete())

    def begin(self, print_receipt: bool = True, notes: str = "") -> bool:
        """Validate and freeze the draft; False while another save is running."""
        if self.saving:
            logger.debug("Submit ignored; a bill is already being saved")
            return False

        self.state = SubmissionState.validating()
        if not self.cart:
            self.state = SubmissionState.idle()
            raise ValidationError("Cart is empty")

        self._draft = BillDraft(
            customer=self.customers.selected,
            items=self.cart.snapshot(),
            notify=self.customers.notification,
            notes=notes,
            print_receipt=print_receipt,
        )
        self._updated_customer = None
        self.state = SubmissionState.submitting()
        return True

    def complete(self) -> SubmissionState:
        """Network half of a submission started by begin()."""
        draft = self._draft
        if draft is None or self.state.phase is not SubmissionPhase.SUBMITTING:
            raise RuntimeError("complete() called without a successful begin()")
        warnings = []

        try:
            customer_id = draft.customer.id if draft.customer else self.customers.walk_in_id()
        except ApiError as exc:
            logger.warning("Customer resolution failed: %s", exc)
            self.state = SubmissionState.failed(exc.user_message(CREATE_CUSTOMER_FAILED))
            return self.state

        updated, failure = self.customers.push_phone(draft.customer, draft.notify)
        self._updated_customer = updated
        if failure is not None:
            warnings.append(str(failure))

        try:
            bill = self.bills.create(customer_id, draft.to_payload_items(), notes=draft.notes)
        except ApiError as exc:
            logger.warning("Bill creation failed: %s", exc)
            self.state = SubmissionState.failed(exc.user_message(CREATE_BILL_FAILED))
            return self.state

        logger.info(
            "Bill %s created for customer %s with %d item(s)",
            bill.display_number,
            customer_id,
            len(draft.items),
        )
        if self.email_receipts and bill.id:
            self._send_email(bill)
        self.state = SubmissionState.succeeded(bill, tuple(warnings))
        return self.state

    def finish(self, state: SubmissionState) -> SubmissionState:
        """Apply the outcome to the cart and selection, then print."""
        draft = self._draft
        if draft is None:
            return state
        self._draft = None

        if state.phase is not SubmissionPhase.SUCCEEDED:
            if self._updated_customer is not None:
                self.customers.refresh(self._updated_customer)
            return state

        self.cart.clear()
        self.customers.clear()
        if draft.print_receipt and self.printer is not None:
            self.printer(state.bill)
        return state

    def abort(self, message: str) -> None:
        """Leave Submitting after an error outside the API taxonomy."""
        if self.saving:
            self._draft = None
            self.state = SubmissionState.failed(message)

    def _send_email(self, bill: Bill) -> None:
        try:
            self.bills.send_email(bill.id)
        except ApiError as exc:
            logger.warning("Receipt e-mail for bill %s not sent: %s", bill.display_number, exc)
