"""
Tests for bill submission: cart to persisted bill
"""
from unittest import TestCase

from pharmabill.billing.customers import CustomerResolver
from pharmabill.data.bill_repo import BILL_RESPONSE_UNREADABLE
from pharmabill.billing.workflow import (
    CREATE_BILL_FAILED,
    CREATE_CUSTOMER_FAILED,
    BillingWorkflow,
    SubmissionPhase,
)
from pharmabill.errors import TransientApiError, ValidationError
from pharmabill.models.cart import Cart
from pharmabill.models.customer import Customer
from tests.fakes import FakeBills, FakeCustomers, bill_payload, make_line


class BillingWorkflowTests(TestCase):
    def setUp(self):
        self.cart = Cart()
        self.walk_in = Customer(id="c-walk", name="Walk-in Customer")
        self.asha = Customer(id="c-1", name="Asha", customer_id="C0001")
        self.customer_repo = FakeCustomers([self.walk_in, self.asha])
        self.customers = CustomerResolver(self.customer_repo)
        self.bills = FakeBills()
        self.printed = []
        self.workflow = BillingWorkflow(self.cart, self.customers, self.bills, printer=self.printed.append)

    def fill_cart(self):
        self.cart.add_or_replace("med-1", [make_line(batch_id="b-1", quantity=2)])

    def test_starts_idle(self):
        self.assertIs(self.workflow.state.phase, SubmissionPhase.IDLE)
        self.assertFalse(self.workflow.saving)

    def test_empty_cart_never_reaches_network(self):
        with self.assertRaises(ValidationError):
            self.workflow.submit()
        self.assertIs(self.workflow.state.phase, SubmissionPhase.IDLE)
        self.assertEqual(self.bills.create_calls, [])
        self.assertEqual(self.customer_repo.find_calls, [])

    def test_success_clears_cart_and_customer(self):
        self.fill_cart()
        self.customers.select(self.asha)
        state = self.workflow.submit()
        self.assertIs(state.phase, SubmissionPhase.SUCCEEDED)
        self.assertEqual(len(self.cart), 0)
        self.assertIsNone(self.customers.selected)
        self.assertEqual(state.bill.bill_number, "BILL-0001")

    def test_payload_shape(self):
        self.fill_cart()
        self.customers.select(self.asha)
        self.workflow.submit(notes="")
        self.assertEqual(
            self.bills.create_calls,
            [
                {
                    "customerId": "c-1",
                    "notes": "",
                    "items": [
                        {
                            "medicineId": "med-1",
                            "batchId": "b-1",
                            "productName": "Paracetamol 500",
                            "batchNo": "B-1",
                            "mrp": 100.0,
                            "quantity": 2,
                            "discountPct": 10.0,
                            "gstPct": 5.0,
                        }
                    ],
                }
            ],
        )

    def test_walk_in_used_without_selection(self):
        self.fill_cart()
        self.workflow.submit()
        self.assertEqual(self.bills.create_calls[0]["customerId"], "c-walk")

    def test_printer_receives_server_bill(self):
        """Printed document uses server amounts, not the cart estimate"""
        self.bills.response = bill_payload(
            items=[{"productName": "Paracetamol 500", "mrp": 100, "quantity": 2, "lineAmount": 188}]
        )
        self.fill_cart()
        self.workflow.submit(print_receipt=True)
        self.assertEqual(len(self.printed), 1)
        self.assertEqual(self.printed[0].items[0].line_amount, 188)

    def test_print_opt_out(self):
        self.fill_cart()
        self.workflow.submit(print_receipt=False)
        self.assertEqual(self.printed, [])

    def test_failure_keeps_cart_and_shows_server_message(self):
        self.bills.error = TransientApiError(
            "POST /bills failed with HTTP 400", status_code=400, server_message="Insufficient stock"
        )
        self.fill_cart()
        self.customers.select(self.asha)
        before = self.cart.snapshot()
        state = self.workflow.submit()
        self.assertIs(state.phase, SubmissionPhase.FAILED)
        self.assertEqual(state.message, "Insufficient stock")
        self.assertEqual(self.cart.snapshot(), before)
        self.assertEqual(len(self.cart), 1)
        self.assertIs(self.customers.selected, self.asha)
        self.assertEqual(self.printed, [])

    def test_failure_without_server_message_uses_fallback(self):
        self.bills.error = TransientApiError("Could not reach server")
        self.fill_cart()
        state = self.workflow.submit()
        self.assertEqual(state.message, CREATE_BILL_FAILED)

    def test_customer_resolution_failure(self):
        self.customer_repo.fail_lookup = True
        self.fill_cart()
        state = self.workflow.submit()
        self.assertIs(state.phase, SubmissionPhase.FAILED)
        self.assertEqual(state.message, CREATE_CUSTOMER_FAILED)
        self.assertEqual(self.bills.create_calls, [])
        self.assertEqual(len(self.cart), 1)

    def test_retry_after_failure(self):
        self.bills.error = TransientApiError("Could not reach server")
        self.fill_cart()
        self.workflow.submit()
        self.bills.error = None
        state = self.workflow.submit()
        self.assertIs(state.phase, SubmissionPhase.SUCCEEDED)
        self.assertEqual(len(self.bills.create_calls), 2)

    def test_submit_is_noop_while_saving(self):
        self.fill_cart()
        nested = []
        self.bills.on_create = lambda: nested.append(self.workflow.submit())
        self.workflow.submit()
        self.assertEqual(nested, [None])
        self.assertEqual(len(self.bills.create_calls), 1)

    def test_begin_then_complete(self):
        self.fill_cart()
        self.assertTrue(self.workflow.begin())
        self.assertTrue(self.workflow.saving)
        self.assertFalse(self.workflow.begin())
        state = self.workflow.complete()
        self.assertIs(state.phase, SubmissionPhase.SUCCEEDED)
        self.assertTrue(self.workflow.saving)
        self.assertEqual(len(self.cart), 1)
        self.workflow.finish(state)
        self.assertFalse(self.workflow.saving)
        self.assertEqual(len(self.cart), 0)

    def test_complete_requires_begin(self):
        with self.assertRaises(RuntimeError):
            self.workflow.complete()

    def test_phone_update_failure_does_not_block_bill(self):
        self.customer_repo.fail_phone_update = True
        self.fill_cart()
        self.customers.select(self.asha)
        self.customers.enable_notification("9111111111")
        state = self.workflow.submit()
        self.assertIs(state.phase, SubmissionPhase.SUCCEEDED)
        self.assertEqual(len(state.warnings), 1)
        self.assertEqual(len(self.bills.create_calls), 1)

    def test_email_receipt_is_optional(self):
        self.workflow.email_receipts = True
        self.fill_cart()
        self.workflow.submit()
        self.assertEqual(self.bills.emailed, ["bill-1"])

    def test_reset(self):
        self.fill_cart()
        self.customers.select(self.asha)
        self.workflow.reset()
        self.assertEqual(len(self.cart), 0)
        self.assertIsNone(self.customers.selected)

    def test_abort_leaves_submitting(self):
        self.fill_cart()
        self.workflow.begin()
        self.workflow.abort("boom")
        self.assertIs(self.workflow.state.phase, SubmissionPhase.FAILED)
        self.assertEqual(len(self.cart), 1)

    def test_bill_uses_selection_frozen_at_begin(self):
        """Changes made while the bill is being saved do not leak into it"""
        self.fill_cart()
        self.customers.select(self.asha)
        self.workflow.begin(print_receipt=False)
        self.customers.clear()
        self.cart.add_or_replace("med-2", [make_line(medicine_id="med-2", batch_id="b-9", quantity=1)])
        state = self.workflow.complete()
        self.assertIs(state.phase, SubmissionPhase.SUCCEEDED)
        sent = self.bills.create_calls[0]
        self.assertEqual(sent["customerId"], "c-1")
        self.assertEqual([item["batchId"] for item in sent["items"]], ["b-1"])
        self.assertEqual(self.customer_repo.find_calls, [])

    def test_draft_notification_frozen_at_begin(self):
        self.fill_cart()
        self.customers.select(self.asha)
        self.customers.enable_notification("9222222222")
        self.workflow.begin()
        self.customers.disable_notification()
        self.workflow.complete()
        self.assertEqual(self.customer_repo.phone_updates, [("c-1", "9222222222")])

    def test_complete_leaves_cart_and_selection_alone(self):
        self.fill_cart()
        self.customers.select(self.asha)
        self.workflow.begin()
        self.workflow.complete()
        self.assertEqual(len(self.cart), 1)
        self.assertIs(self.customers.selected, self.asha)
        self.assertEqual(self.printed, [])

    def test_finish_prints_per_draft_choice(self):
        self.fill_cart()
        self.workflow.begin(print_receipt=False)
        self.workflow.finish(self.workflow.complete())
        self.assertEqual(self.printed, [])

    def test_saved_phone_kept_when_bill_fails(self):
        self.bills.error = TransientApiError("Could not reach server")
        self.fill_cart()
        self.customers.select(self.asha)
        self.customers.enable_notification("9333333333")
        state = self.workflow.submit()
        self.assertIs(state.phase, SubmissionPhase.FAILED)
        self.assertEqual(self.customers.selected.phone, "9333333333")
        self.assertTrue(self.customers.notification.enabled)

    def test_unreadable_create_reply_warns_before_retry(self):
        self.bills.error = TransientApiError(
            "POST /bills returned an unreadable body", server_message=BILL_RESPONSE_UNREADABLE
        )
        self.fill_cart()
        state = self.workflow.submit()
        self.assertIs(state.phase, SubmissionPhase.FAILED)
        self.assertEqual(state.message, BILL_RESPONSE_UNREADABLE)
        self.assertEqual(len(self.cart), 1)
