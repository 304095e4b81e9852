"""
Tests for line math, cart totals and currency formatting
"""
import math
from unittest import TestCase

from pharmabill.errors import ValidationError
from pharmabill.models.cart import CartTotals
from pharmabill.money import compute_line, format_currency, format_percent
from tests.fakes import make_line


class LineMathTests(TestCase):
    def test_example_line(self):
        """MRP 100 x 2 with 10% discount and 5% GST"""
        parts = compute_line(100, 2, 10, 5)
        self.assertEqual(parts.base, 200)
        self.assertEqual(parts.discount, 20)
        self.assertEqual(parts.after_discount, 180)
        self.assertEqual(parts.gst, 9)
        self.assertEqual(parts.amount, 189)

    def test_example_cart_grand_total(self):
        totals = CartTotals.of([make_line(quantity=2, unit_price=100, discount=10, gst=5)])
        self.assertEqual(totals.subtotal, 200)
        self.assertEqual(totals.total_discount, 20)
        self.assertEqual(totals.total_gst, 9)
        self.assertEqual(totals.grand_total, 189)

    def test_line_amount_matches_closed_form(self):
        cases = [(12.5, 3, 0, 12), (99.99, 7, 15, 18), (1.0, 1, 100, 5), (250, 4, 2.5, 0)]
        for price, qty, disc, gst in cases:
            line = make_line(quantity=qty, unit_price=price, discount=disc, gst=gst)
            expected = price * qty * (1 - disc / 100) * (1 + gst / 100)
            self.assertTrue(math.isclose(line.line_amount, expected, rel_tol=1e-9, abs_tol=1e-9))

    def test_grand_total_identity_over_many_lines(self):
        lines = [
            make_line(batch_id=f"b-{i}", quantity=i + 1, unit_price=10.1 * (i + 1), discount=i, gst=12)
            for i in range(8)
        ]
        totals = CartTotals.of(lines)
        self.assertTrue(
            math.isclose(
                totals.grand_total,
                totals.subtotal - totals.total_discount + totals.total_gst,
                rel_tol=1e-12,
            )
        )
        self.assertTrue(math.isclose(totals.grand_total, sum(l.line_amount for l in lines), rel_tol=1e-9))

    def test_empty_totals_are_zero(self):
        self.assertEqual(CartTotals.of([]).grand_total, 0)


class CartLineValidationTests(TestCase):
    def test_zero_quantity_rejected(self):
        with self.assertRaises(ValidationError):
            make_line(quantity=0)

    def test_negative_quantity_rejected(self):
        with self.assertRaises(ValidationError):
            make_line(quantity=-1)

    def test_fractional_quantity_rejected(self):
        with self.assertRaises(ValidationError):
            make_line(quantity=1.5)

    def test_negative_price_rejected(self):
        with self.assertRaises(ValidationError):
            make_line(unit_price=-0.01)

    def test_percent_out_of_range_is_not_clamped(self):
        with self.assertRaises(ValidationError):
            make_line(discount=101)
        with self.assertRaises(ValidationError):
            make_line(gst=-5)

    def test_wire_item_shape(self):
        item = make_line(medicine_id="m-9", batch_id="b-3", quantity=4, unit_price=25).to_bill_item()
        self.assertEqual(
            item,
            {
                "medicineId": "m-9",
                "batchId": "b-3",
                "productName": "Paracetamol 500",
                "batchNo": "B-3",
                "mrp": 25,
                "quantity": 4,
                "discountPct": 10.0,
                "gstPct": 5.0,
            },
        )


class FormatCurrencyTests(TestCase):
    def test_whole_rupees(self):
        self.assertEqual(format_currency(189), "₹189")

    def test_indian_grouping(self):
        self.assertEqual(format_currency(1234567), "₹12,34,567")
        self.assertEqual(format_currency(123456.4), "₹1,23,456")

    def test_rounds_half_away_from_zero(self):
        self.assertEqual(format_currency(2.5), "₹3")
        self.assertEqual(format_currency(-2.5), "-₹3")

    def test_none_is_zero(self):
        self.assertEqual(format_currency(None), "₹0")

    def test_percent(self):
        self.assertEqual(format_percent(5), "5%")
        self.assertEqual(format_percent(2.5), "2.5%")
