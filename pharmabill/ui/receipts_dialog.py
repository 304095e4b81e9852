"""Bill history: search, re-print, delete and export."""

from __future__ import annotations

from typing import List, Optional

from PyQt5.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QDialog,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
)

from pharmabill import config
from pharmabill.billing.debounce import Debouncer
from pharmabill.billing.history import (
    DELETE_BILL_FAILED,
    LOAD_BILL_FAILED,
    LOAD_BILLS_FAILED,
    BillHistory,
    failure_message,
)
from pharmabill.data.bill_repo import SEARCH_BY_BILL_NUMBER, SEARCH_BY_CUSTOMER
from pharmabill.models.bill import Bill, BillPage
from pharmabill.money import format_currency
from pharmabill.printing.receipt_printer import ReceiptPrinter
from pharmabill.ui.tasks import run_async


class ReceiptsDialog(QDialog):
    def __init__(self, history: BillHistory, printer: ReceiptPrinter, parent=None) -> None:
        super().__init__(parent)
        self.history = history
        self.printer = printer
        self.page = 0
        self.bills: List[Bill] = []
        self._last_page: Optional[BillPage] = None
        self._request = 0
        self._search = Debouncer(config.BILL_SEARCH_QUIET_MS, self._on_search_quiet, self)
        self.setWindowTitle("All Receipts")
        self.resize(900, 520)
        self._build_ui()
        self._load()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()

        search_row = QHBoxLayout()
        self.search_type = QComboBox()
        self.search_type.addItem("Bill No", SEARCH_BY_BILL_NUMBER)
        self.search_type.addItem("Customer ID", SEARCH_BY_CUSTOMER)
        self.search_type.currentIndexChanged.connect(lambda _: self._restart())
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search receipts...")
        self.search_input.textChanged.connect(lambda _: self._search.schedule())
        search_row.addWidget(self.search_type)
        search_row.addWidget(self.search_input, 1)
        layout.addLayout(search_row)

        self.table = QTableWidget(0, 5)
        self.table.setHorizontalHeaderLabels(["Bill No", "Date", "Customer", "Items", "Grand Total"])
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.horizontalHeader().setStretchLastSection(True)
        layout.addWidget(self.table, 1)

        self.status_label = QLabel("")
        layout.addWidget(self.status_label)

        buttons = QHBoxLayout()
        self.prev_button = QPushButton("Previous")
        self.prev_button.clicked.connect(lambda: self._goto(self.page - 1))
        self.next_button = QPushButton("Next")
        self.next_button.clicked.connect(lambda: self._goto(self.page + 1))
        self.page_label = QLabel("")
        view_button = QPushButton("View / Print")
        view_button.clicked.connect(self._on_view)
        delete_button = QPushButton("Delete")
        delete_button.clicked.connect(self._on_delete)
        export_button = QPushButton("Export to Excel")
        export_button.clicked.connect(self._on_export)
        for widget in (self.prev_button, self.page_label, self.next_button):
            buttons.addWidget(widget)
        buttons.addStretch()
        for widget in (view_button, delete_button, export_button):
            buttons.addWidget(widget)
        layout.addLayout(buttons)
        self.setLayout(layout)

    def _on_search_quiet(self, generation: int) -> None:
        self._restart()

    def _restart(self) -> None:
        self.page = 0
        self._load()

    def _goto(self, page: int) -> None:
        if page < 0 or (self._last_page and page >= self.history.page_count(self._last_page)):
            return
        self.page = page
        self._load()

    def _load(self) -> None:
        self.status_label.setText("Loading...")
        search = self.search_input.text()
        search_type = self.search_type.currentData()
        page = self.page
        self._request += 1
        request = self._request
        run_async(
            lambda: self.history.page(page, search, search_type),
            lambda result: self._show_page(request, result),
            lambda exc: self.status_label.setText(failure_message(exc, LOAD_BILLS_FAILED)),
        )

    def _show_page(self, request: int, result: BillPage) -> None:
        if request != self._request:
            return
        self._last_page = result
        self.bills = list(result.items)
        self.table.setRowCount(len(self.bills))
        for row, bill in enumerate(self.bills):
            created = bill.created_at.strftime("%d/%m/%Y %H:%M") if bill.created_at else "-"
            values = [
                bill.display_number,
                created,
                bill.customer.display_name if bill.customer else bill.customer_id,
                str(len(bill.items)),
                format_currency(bill.totals.grand_total),
            ]
            for col, value in enumerate(values):
                self.table.setItem(row, col, QTableWidgetItem(value))
        self.table.resizeColumnsToContents()
        pages = self.history.page_count(result)
        self.page_label.setText(f"Page {self.page + 1} of {pages}")
        self.prev_button.setEnabled(self.page > 0)
        self.next_button.setEnabled(self.page + 1 < pages)
        self.status_label.setText("" if self.bills else "No receipts found.")

    def _selected_bill(self) -> Optional[Bill]:
        row = self.table.currentRow()
        if row < 0 or row >= len(self.bills):
            QMessageBox.information(self, "Select receipt", "Please select a receipt first.")
            return None
        return self.bills[row]

    def _on_view(self) -> None:
        bill = self._selected_bill()
        if bill is None:
            return
        run_async(
            lambda: self.history.view(bill.id),
            self.printer.print_when_ready,
            lambda exc: QMessageBox.warning(self, "Receipt", failure_message(exc, LOAD_BILL_FAILED)),
        )

    def _on_delete(self) -> None:
        bill = self._selected_bill()
        if bill is None:
            return
        answer = QMessageBox.question(self, "Delete receipt", f"Delete receipt {bill.display_number}?")
        if answer != QMessageBox.Yes:
            return
        run_async(
            lambda: self.history.delete(bill.id),
            lambda _: self._on_deleted(bill),
            lambda exc: QMessageBox.warning(self, "Delete failed", failure_message(exc, DELETE_BILL_FAILED)),
        )

    def _on_deleted(self, bill: Bill) -> None:
        self.status_label.setText(f"Receipt {bill.display_number} deleted.")
        self._load()

    def _on_export(self) -> None:
        if not self.bills:
            QMessageBox.information(self, "Nothing to export", "No receipts on this page.")
            return
        path, _ = QFileDialog.getSaveFileName(self, "Export receipts", "receipts.xlsx", "Excel (*.xlsx)")
        if not path:
            return
        try:
            saved = self.history.export(self.bills, path)
        except OSError as exc:
            QMessageBox.critical(self, "Export failed", f"Could not write file:\n{exc}")
            return
        self.status_label.setText(f"Exported to {saved}")
