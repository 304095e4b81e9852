"""Excel export of bill history."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from pharmabill.models.bill import Bill

BILL_COLUMNS = [
    "Bill_Number",
    "Date",
    "Customer",
    "Items",
    "Subtotal",
    "Discount",
    "GST",
    "Grand_Total",
]
SHEET_NAME = "Bills"


def _bill_row(bill: Bill) -> List:
    created = bill.created_at.strftime("%Y-%m-%d %H:%M") if bill.created_at else ""
    return [
        bill.display_number,
        created,
        bill.customer_name or bill.customer_id,
        len(bill.items),
        round(bill.totals.subtotal, 2),
        round(bill.totals.total_discount, 2),
        round(bill.totals.total_gst, 2),
        round(bill.totals.grand_total, 2),
    ]


def export_bills_xlsx(bills: Iterable[Bill], path: Path | str) -> Path:
    """Write bills to a workbook with one header row; returns the saved path."""
    target = Path(path)
    if target.suffix.lower() != ".xlsx":
        target = target.with_suffix(".xlsx")

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_NAME
    sheet.append(BILL_COLUMNS)
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    for bill in bills:
        sheet.append(_bill_row(bill))

    for idx, header in enumerate(BILL_COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(idx)].width = max(len(header) + 2, 12)

    target.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(target)
    return target
