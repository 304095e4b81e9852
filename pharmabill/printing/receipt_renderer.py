"""HTML receipt for a persisted bill."""

from __future__ import annotations

from datetime import datetime
from html import escape
from typing import List, Optional

from pharmabill import config
from pharmabill.models.bill import Bill
from pharmabill.models.store import StoreProfile
from pharmabill.money import format_currency, format_percent

RECEIPT_STYLE = """
    body { font-family: Arial, sans-serif; font-size: 11pt; color: #000; }
    .store-name { font-size: 18pt; font-weight: bold; }
    .store-line { font-size: 9pt; }
    .bill-info { text-align: right; }
    .customer-label { font-weight: bold; }
    .customer-details { font-size: 9pt; }
    table { width: 100%; border-collapse: collapse; }
    th { text-align: left; border-bottom: 1px solid #000; padding: 4px; }
    td { padding: 4px; }
    .num { text-align: right; }
    .center { text-align: center; }
    .total-row td { font-weight: bold; border-top: 1px solid #000; }
    .footer { text-align: center; font-size: 9pt; margin-top: 12px; }
"""


def receipt_title(bill: Bill) -> str:
    return f"{bill.bill_number or 'Invoice'} - {bill.customer_name or 'Customer'}"


def _store_block(store: StoreProfile) -> str:
    lines = [f"<div class='store-name'>{escape(store.name)}</div>"]
    if store.subtitle:
        lines.append(f"<div class='store-line'>{escape(store.subtitle)}</div>")
    if store.address:
        lines.append(f"<div class='store-line'>{escape(store.address)}</div>")
    if store.phone:
        lines.append(f"<div class='store-line'>Phone: {escape(store.phone)}</div>")
    if store.gstin:
        lines.append(f"<div class='store-line'>GSTIN: {escape(store.gstin)}</div>")
    return "".join(lines)


def _customer_block(bill: Bill) -> str:
    customer = bill.customer
    parts = ["<div class='customer-label'>Customer</div>"]
    parts.append(f"<div>{escape(customer.name) if customer and customer.name else '-'}</div>")
    if customer is not None:
        if customer.customer_id:
            parts.append(f"<div class='customer-details'>ID: {escape(customer.customer_id)}</div>")
        if customer.phone:
            parts.append(f"<div class='customer-details'>{escape(customer.phone)}</div>")
        if customer.email:
            parts.append(f"<div class='customer-details'>{escape(customer.email)}</div>")
    return "".join(parts)


def _item_rows(bill: Bill) -> str:
    rows: List[str] = []
    for idx, item in enumerate(bill.items, start=1):
        rows.append(
            f"<tr><td>{idx}</td>"
            f"<td>{escape(item.product_name)}</td>"
            f"<td class='num'>{format_currency(item.mrp)}</td>"
            f"<td class='center'>{item.quantity}</td>"
            f"<td class='num'>{format_percent(item.discount_pct)}</td>"
            f"<td class='num'>{format_percent(item.gst_pct)}</td>"
            f"<td class='num'>{format_currency(item.line_amount)}</td></tr>"
        )
    return "".join(rows)


def render_receipt_html(
    bill: Bill, store: Optional[StoreProfile] = None, printed_at: Optional[datetime] = None
) -> str:
    """Render a bill exactly as the server computed it."""
    store = store or StoreProfile()
    created = bill.created_at or printed_at or datetime.now()
    totals = bill.totals

    return f"""
    <html>
    <head>
        <title>{escape(receipt_title(bill))}</title>
        <style>{RECEIPT_STYLE}</style>
    </head>
    <body>
        <table>
            <tr>
                <td>{_store_block(store)}</td>
                <td class='bill-info'>
                    <div><b>Bill No:</b> {escape(bill.display_number)}</div>
                    <div><b>Date:</b> {created.strftime('%d/%m/%Y %I:%M %p')}</div>
                </td>
            </tr>
        </table>
        <hr />
        {_customer_block(bill)}
        <table>
            <tr><th>#</th><th>Product</th><th class='num'>MRP</th><th class='center'>Qty</th>
            <th class='num'>Disc%</th><th class='num'>GST%</th><th class='num'>Amount</th></tr>
            {_item_rows(bill)}
        </table>
        <table class='totals' align='right'>
            <tr><td>Subtotal</td><td class='num'>{format_currency(totals.subtotal)}</td></tr>
            <tr><td>Discount</td><td class='num'>{format_currency(totals.total_discount)}</td></tr>
            <tr><td>GST</td><td class='num'>{format_currency(totals.total_gst)}</td></tr>
            <tr class='total-row'><td>Grand Total</td><td class='num'>{format_currency(totals.grand_total)}</td></tr>
        </table>
        <p class='footer'>{escape(config.RECEIPT_FOOTER)}</p>
    </body>
    </html>
    """
