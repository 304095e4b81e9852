"""Browsing, re-opening and deleting past bills."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from pharmabill import config
from pharmabill.data.bill_repo import SEARCH_BY_BILL_NUMBER, BillRepository
from pharmabill.data.excel_export import export_bills_xlsx
from pharmabill.errors import ApiError, NotFoundError
from pharmabill.models.bill import Bill, BillPage

logger = logging.getLogger(__name__)

BILL_NOT_FOUND = "Bill not found"
LOAD_BILLS_FAILED = "Failed to load bills"
LOAD_BILL_FAILED = "Failed to load bill details"
DELETE_BILL_FAILED = "Failed to delete receipt"


def failure_message(exc: Exception, fallback: str) -> str:
    """Operator-facing text for a failed history action."""
    if isinstance(exc, NotFoundError):
        return exc.server_message or BILL_NOT_FOUND
    if isinstance(exc, ApiError):
        return exc.user_message(fallback)
    return fallback


class BillHistory:
    def __init__(self, bills: BillRepository, page_size: int = config.BILLS_PAGE_SIZE) -> None:
        self.bills = bills
        self.page_size = page_size

    def page(self, page: int = 0, search: str = "", search_type: str = SEARCH_BY_BILL_NUMBER) -> BillPage:
        return self.bills.list(
            page=page, limit=self.page_size, search=search.strip(), search_type=search_type
        )

    def page_count(self, result: BillPage) -> int:
        return max(-(-result.total // self.page_size), 1)

    def view(self, bill_id: str) -> Bill:
        return self.bills.get(bill_id)

    def delete(self, bill_id: str) -> None:
        self.bills.delete(bill_id)
        logger.info("Deleted bill %s", bill_id)

    def export(self, bills: Iterable[Bill], path: Path | str) -> Path:
        saved = export_bills_xlsx(bills, path)
        logger.info("Exported bills to %s", saved)
        return saved
