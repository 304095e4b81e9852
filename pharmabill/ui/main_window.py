"""Main PyQt window for the Pharmacy Billing Desk."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from PyQt5.QtCore import QStringListModel, Qt, pyqtSignal
from PyQt5.QtGui import QFont
from PyQt5.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QCompleter,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from pharmabill import config
from pharmabill.billing.allocation import AllocationSession, BatchAllocator
from pharmabill.billing.customers import CustomerResolver
from pharmabill.billing.debounce import Debouncer
from pharmabill.billing.history import BillHistory
from pharmabill.billing.workflow import BillingWorkflow, SubmissionPhase, SubmissionState
from pharmabill.data.catalog_repo import CatalogRepository
from pharmabill.errors import BillingError, ValidationError
from pharmabill.models.bill import Bill
from pharmabill.models.cart import Cart
from pharmabill.models.customer import Customer
from pharmabill.models.medicine import Medicine, MedicineStats
from pharmabill.money import format_currency, format_percent
from pharmabill.printing.receipt_printer import ReceiptPrinter
from pharmabill.ui.batch_dialog import BatchDialog
from pharmabill.ui.receipts_dialog import ReceiptsDialog
from pharmabill.ui.tasks import run_async

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Billing counter: catalog on the left, cart on the right, checkout below."""

    # Emitted from the submission worker; delivered on the UI thread.
    print_requested = pyqtSignal(object)

    def __init__(
        self,
        catalog: CatalogRepository,
        customers: CustomerResolver,
        history: BillHistory,
        printer: ReceiptPrinter,
        cart: Optional[Cart] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Pharmacy Billing Desk")
        self.resize(1200, 700)

        self.catalog = catalog
        self.cart = cart or Cart()
        self.customers = customers
        self.history = history
        self.printer = printer
        self.allocator = BatchAllocator(catalog, self.cart)
        self.workflow = BillingWorkflow(
            self.cart,
            customers,
            history.bills,
            printer=self.print_requested.emit,
        )
        self.print_requested.connect(self.printer.print_when_ready)

        self.medicines: List[Medicine] = []
        self.stock_map: Dict[str, int] = {}
        self.stats_map: Dict[str, MedicineStats] = {}
        self.page = 0
        self.total_medicines = 0
        self._medicine_request = 0
        self._pending_medicine_id: Optional[str] = None
        self._customer_results: Dict[str, Customer] = {}
        self._customer_model = QStringListModel()

        self._medicine_search = Debouncer(
            config.MEDICINE_SEARCH_QUIET_MS, self._on_medicine_search_quiet, self
        )
        self._customer_search = Debouncer(
            config.CUSTOMER_SEARCH_QUIET_MS, self._on_customer_search_quiet, self
        )

        self._build_ui()
        self._load_medicines()
        self._load_stock()

    def _build_ui(self) -> None:
        root = QWidget()
        main_layout = QVBoxLayout()

        header = QHBoxLayout()
        title = QLabel("Billing")
        title_font = QFont()
        title_font.setPointSize(16)
        title_font.setBold(True)
        title.setFont(title_font)
        receipts_button = QPushButton("View All Receipts")
        receipts_button.clicked.connect(self._open_receipts)
        header.addWidget(title)
        header.addStretch()
        header.addWidget(receipts_button)
        main_layout.addLayout(header)

        content_layout = QHBoxLayout()
        content_layout.addLayout(self._build_left_panel(), 7)
        content_layout.addLayout(self._build_right_panel(), 5)
        main_layout.addLayout(content_layout, 1)
        main_layout.addLayout(self._build_bottom_panel())

        root.setLayout(main_layout)
        self.setCentralWidget(root)
        self.statusBar().showMessage("Ready")

    def _build_left_panel(self) -> QVBoxLayout:
        layout = QVBoxLayout()

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search medicines...")
        self.search_input.textChanged.connect(lambda text: self._medicine_search.schedule(text))
        layout.addWidget(self.search_input)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #c0392b;")
        layout.addWidget(self.error_label)

        self.medicine_table = QTableWidget(0, 6)
        self.medicine_table.setHorizontalHeaderLabels(
            ["Medicine Name", "Stock", "GST %", "Discount %", "Batches", "Expiring"]
        )
        self.medicine_table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.medicine_table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.medicine_table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.medicine_table.horizontalHeader().setStretchLastSection(True)
        self.medicine_table.cellDoubleClicked.connect(lambda row, _: self._open_batches(row))
        layout.addWidget(self.medicine_table, 1)

        pager = QHBoxLayout()
        self.prev_button = QPushButton("Previous")
        self.prev_button.clicked.connect(lambda: self._goto_page(self.page - 1))
        self.next_button = QPushButton("Next")
        self.next_button.clicked.connect(lambda: self._goto_page(self.page + 1))
        self.page_label = QLabel("")
        self.add_button = QPushButton("Add / Edit in Cart")
        self.add_button.clicked.connect(lambda: self._open_batches(self.medicine_table.currentRow()))
        pager.addWidget(self.prev_button)
        pager.addWidget(self.page_label)
        pager.addWidget(self.next_button)
        pager.addStretch()
        pager.addWidget(self.add_button)
        layout.addLayout(pager)
        return layout

    def _build_right_panel(self) -> QVBoxLayout:
        layout = QVBoxLayout()
        layout.addWidget(QLabel("Cart"))
        self.cart_table = QTableWidget(0, 7)
        self.cart_table.setHorizontalHeaderLabels(
            ["Medicine", "Batch", "Qty", "MRP", "Disc %", "GST %", "Amount"]
        )
        self.cart_table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.cart_table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.cart_table.horizontalHeader().setStretchLastSection(True)
        layout.addWidget(self.cart_table, 1)

        self.remove_button = QPushButton("Remove Selected")
        self.remove_button.clicked.connect(self._remove_selected)
        layout.addWidget(self.remove_button, alignment=Qt.AlignRight)

        totals = QFormLayout()
        self.subtotal_label = QLabel(format_currency(0))
        self.discount_label = QLabel(format_currency(0))
        self.gst_label = QLabel(format_currency(0))
        self.total_label = QLabel(format_currency(0))
        total_font = QFont()
        total_font.setPointSize(16)
        total_font.setBold(True)
        self.total_label.setFont(total_font)
        totals.addRow("Subtotal", self.subtotal_label)
        totals.addRow("Discount", self.discount_label)
        totals.addRow("GST", self.gst_label)
        totals.addRow("Grand Total", self.total_label)
        layout.addLayout(totals)
        return layout

    def _build_bottom_panel(self) -> QHBoxLayout:
        bottom = QHBoxLayout()

        customer_group = QGroupBox("Customer (optional)")
        customer_layout = QVBoxLayout()
        search_row = QHBoxLayout()
        self.customer_input = QLineEdit()
        self.customer_input.setPlaceholderText("Search by name or phone...")
        self.customer_input.textEdited.connect(self._on_customer_text)
        completer = QCompleter(self._customer_model, self)
        completer.setCaseSensitivity(Qt.CaseInsensitive)
        completer.setFilterMode(Qt.MatchContains)
        completer.setCompletionMode(QCompleter.PopupCompletion)
        completer.activated[str].connect(self._on_customer_chosen)
        self.customer_input.setCompleter(completer)
        self._completer = completer
        self.new_customer_button = QPushButton("New Customer")
        self.new_customer_button.clicked.connect(self._on_new_customer)
        self.clear_customer_button = QPushButton("Clear")
        self.clear_customer_button.clicked.connect(self._on_clear_customer)
        search_row.addWidget(self.customer_input, 1)
        search_row.addWidget(self.new_customer_button)
        search_row.addWidget(self.clear_customer_button)
        customer_layout.addLayout(search_row)
        self.customer_label = QLabel(f"Billing to: {config.WALK_IN_CUSTOMER_NAME}")
        customer_layout.addWidget(self.customer_label)
        customer_group.setLayout(customer_layout)

        options_layout = QVBoxLayout()
        self.print_checkbox = QCheckBox("Print receipt")
        self.print_checkbox.setChecked(True)
        self.sms_checkbox = QCheckBox("Send SMS to customer")
        self.sms_checkbox.clicked.connect(self._on_sms_toggled)
        options_layout.addWidget(self.print_checkbox)
        options_layout.addWidget(self.sms_checkbox)
        options_layout.addStretch()

        buttons_layout = QVBoxLayout()
        self.submit_button = QPushButton("Generate Receipt")
        self.submit_button.setStyleSheet("font-size: 16px; padding: 10px;")
        self.submit_button.clicked.connect(self._on_submit)
        self.clear_button = QPushButton("Clear Cart")
        self.clear_button.clicked.connect(self._on_reset)
        buttons_layout.addWidget(self.submit_button)
        buttons_layout.addWidget(self.clear_button)
        buttons_layout.addStretch()

        bottom.addWidget(customer_group, 1)
        bottom.addLayout(options_layout)
        bottom.addLayout(buttons_layout)
        return bottom

    # Catalog

    def _on_medicine_search_quiet(self, generation: int, text: str) -> None:
        self.page = 0
        self._load_medicines()

    def _goto_page(self, page: int) -> None:
        pages = max(-(-self.total_medicines // config.MEDICINE_PAGE_SIZE), 1)
        if 0 <= page < pages:
            self.page = page
            self._load_medicines()

    def _load_medicines(self) -> None:
        self._medicine_request += 1
        request = self._medicine_request
        search, page = self.search_input.text(), self.page
        self.error_label.setText("")
        run_async(
            lambda: self.catalog.list_medicines(search=search, page=page),
            lambda result: self._show_medicines(request, result),
            lambda exc: self.error_label.setText(
                getattr(exc, "server_message", None) or "Failed to load medicines"
            ),
        )

    def _load_stock(self) -> None:
        run_async(self.catalog.stock_summary, self._on_stock)
        run_async(self.catalog.medicine_stats, self._on_stats)

    def _on_stock(self, stock: Dict[str, int]) -> None:
        self.stock_map = stock
        self._refresh_medicine_table()

    def _on_stats(self, stats: Dict[str, MedicineStats]) -> None:
        self.stats_map = stats
        self._refresh_medicine_table()

    def _show_medicines(self, request: int, result) -> None:
        if request != self._medicine_request:
            return
        self.medicines, self.total_medicines = result
        self._refresh_medicine_table()

    def _refresh_medicine_table(self) -> None:
        self.medicine_table.setRowCount(len(self.medicines))
        for row, medicine in enumerate(self.medicines):
            stats = self.stats_map.get(medicine.id, MedicineStats())
            name = medicine.name + ("  [in cart]" if self.cart.contains(medicine.id) else "")
            values = [
                name,
                str(self.stock_map.get(medicine.id, 0)),
                format_percent(medicine.gst_percent),
                format_percent(medicine.discount_percent),
                str(stats.total_batches),
                str(stats.expiring_soon),
            ]
            for col, value in enumerate(values):
                self.medicine_table.setItem(row, col, QTableWidgetItem(value))
        self.medicine_table.resizeColumnsToContents()
        pages = max(-(-self.total_medicines // config.MEDICINE_PAGE_SIZE), 1)
        self.page_label.setText(f"Page {self.page + 1} of {pages}")
        self.prev_button.setEnabled(self.page > 0)
        self.next_button.setEnabled(self.page + 1 < pages)
        if not self.medicines:
            self.error_label.setText(self.error_label.text() or "No medicines found.")

    # Batch allocation

    def _open_batches(self, row: int) -> None:
        if self.workflow.saving:
            return
        if row < 0 or row >= len(self.medicines):
            QMessageBox.warning(self, "Select medicine", "Please choose a medicine first.")
            return
        medicine = self.medicines[row]
        self._pending_medicine_id = medicine.id
        run_async(
            lambda: self.allocator.open_for(medicine),
            self._show_batch_dialog,
            lambda exc: self.statusBar().showMessage("Failed to load batches", 5000),
        )

    def _show_batch_dialog(self, session: AllocationSession) -> None:
        # A newer medicine was picked while this one was loading
        if session.medicine.id != self._pending_medicine_id:
            return
        self._pending_medicine_id = None
        if self.workflow.saving:
            self.statusBar().showMessage("Cart is locked while the bill is saved; try again", 5000)
            return
        was_in_cart = self.cart.contains(session.medicine.id)
        dialog = BatchDialog(self.allocator, session, self)
        if dialog.exec_() == BatchDialog.Accepted:
            self._refresh_cart()
            self.statusBar().showMessage("Cart updated" if was_in_cart else "Added to cart", 3000)

    # Cart

    def _refresh_cart(self) -> None:
        lines = self.cart.lines
        self.cart_table.setRowCount(len(lines))
        for row, line in enumerate(lines):
            values = [
                line.medicine_name,
                line.batch_no,
                str(line.quantity),
                format_currency(line.unit_price),
                format_percent(line.discount_percent),
                format_percent(line.gst_percent),
                format_currency(line.line_amount),
            ]
            for col, value in enumerate(values):
                self.cart_table.setItem(row, col, QTableWidgetItem(value))
        self.cart_table.resizeColumnsToContents()
        self._update_totals()
        self._refresh_medicine_table()

    def _update_totals(self) -> None:
        totals = self.cart.totals()
        self.subtotal_label.setText(format_currency(totals.subtotal))
        self.discount_label.setText(format_currency(totals.total_discount))
        self.gst_label.setText(format_currency(totals.total_gst))
        self.total_label.setText(format_currency(totals.grand_total))

    def _remove_selected(self) -> None:
        if self.workflow.saving:
            return
        row = self.cart_table.currentRow()
        if row < 0 or row >= len(self.cart):
            return
        self.cart.remove(row)
        self._refresh_cart()

    def _on_reset(self) -> None:
        if self.workflow.saving:
            return
        self.workflow.reset()
        self._reset_customer_widgets()
        self._refresh_cart()

    # Customer

    def _on_customer_text(self, text: str) -> None:
        if self.customers.selected is not None:
            self.customers.clear()
            self._sync_customer_label()
        self._customer_search.schedule(text)

    def _on_customer_search_quiet(self, generation: int, text: str) -> None:
        run_async(
            lambda: self.customers.search(text),
            lambda results: self._show_customer_results(generation, results),
            lambda exc: self._show_customer_results(generation, []),
        )

    def _show_customer_results(self, generation: int, results: List[Customer]) -> None:
        if not self._customer_search.is_current(generation):
            return
        self._customer_results = {customer.display_name: customer for customer in results}
        self._customer_model.setStringList(list(self._customer_results))
        if results:
            self._completer.setCompletionPrefix(self.customer_input.text())
            self._completer.complete()

    def _on_customer_chosen(self, display: str) -> None:
        customer = self._customer_results.get(display)
        if customer is None:
            return
        self._customer_search.cancel()
        self.customers.select(customer)
        self.customer_input.setText(customer.display_name)
        self._sync_customer_label()

    def _on_new_customer(self) -> None:
        name = self.customer_input.text().strip()
        try:
            customer = self.customers.create_new(name)
        except ValidationError as exc:
            QMessageBox.warning(self, "Customer", str(exc))
            return
        except BillingError as exc:
            QMessageBox.critical(self, "Customer", getattr(exc, "server_message", None) or "Failed to create customer")
            return
        self._customer_search.cancel()
        self.customer_input.setText(customer.display_name)
        self._sync_customer_label()
        self.statusBar().showMessage(f"New customer created: {customer.customer_id}", 5000)

    def _on_clear_customer(self) -> None:
        self._customer_search.cancel()
        self.customers.clear()
        self._reset_customer_widgets()

    def _on_sms_toggled(self, checked: bool) -> None:
        if not checked:
            self.customers.disable_notification()
            self._sync_customer_label()
            return
        if self.customers.selected is None:
            QMessageBox.warning(self, "SMS", "Please select a customer first.")
            self.sms_checkbox.setChecked(False)
            return
        phone, ok = QInputDialog.getText(
            self, "Customer phone", "Phone number for SMS:", text=self.customers.selected.phone
        )
        if not ok:
            self.sms_checkbox.setChecked(False)
            return
        try:
            self.customers.enable_notification(phone)
        except ValidationError as exc:
            QMessageBox.warning(self, "SMS", str(exc))
            self.sms_checkbox.setChecked(False)
            return
        self._sync_customer_label()
        self.statusBar().showMessage("SMS will be sent to customer", 3000)

    def _sync_customer_label(self) -> None:
        selected = self.customers.selected
        if selected is None:
            self.customer_label.setText(f"Billing to: {config.WALK_IN_CUSTOMER_NAME}")
        else:
            note = self.customers.notification
            suffix = f"  |  SMS to {note.phone}" if note.enabled else ""
            self.customer_label.setText(f"Billing to: {selected.display_name}{suffix}")
        self.sms_checkbox.setChecked(self.customers.notification.enabled)

    def _reset_customer_widgets(self) -> None:
        self.customer_input.clear()
        self._customer_model.setStringList([])
        self._customer_results = {}
        self._sync_customer_label()

    # Submission

    def _set_busy(self, busy: bool) -> None:
        widgets = (
            self.submit_button,
            self.clear_button,
            self.remove_button,
            self.add_button,
            self.customer_input,
            self.new_customer_button,
            self.clear_customer_button,
            self.sms_checkbox,
        )
        for widget in widgets:
            widget.setEnabled(not busy)
        self.submit_button.setText("Saving..." if busy else "Generate Receipt")

    def _on_submit(self) -> None:
        try:
            started = self.workflow.begin(print_receipt=self.print_checkbox.isChecked())
        except ValidationError as exc:
            QMessageBox.information(self, "Cannot bill", str(exc))
            return
        if not started:
            return
        self._set_busy(True)
        self._customer_search.cancel()
        run_async(
            self.workflow.complete,
            self._on_submitted,
            self._on_submit_error,
        )

    def _on_submitted(self, state: SubmissionState) -> None:
        state = self.workflow.finish(state)
        self._set_busy(False)
        if state.phase is SubmissionPhase.FAILED:
            self._sync_customer_label()
            QMessageBox.critical(self, "Billing failed", state.message)
            return
        bill: Bill = state.bill
        self._reset_customer_widgets()
        self._refresh_cart()
        message = f"Bill created: {bill.display_number}"
        if state.warnings:
            message += " (" + "; ".join(state.warnings) + ")"
        self.statusBar().showMessage(message, 8000)
        self._load_medicines()
        self._load_stock()

    def _on_submit_error(self, exc: Exception) -> None:
        # Only reached for errors outside the API taxonomy handled by the workflow
        self.workflow.abort(str(exc))
        self._set_busy(False)
        logger.error("Unexpected billing error: %s", exc)
        QMessageBox.critical(self, "Billing failed", str(exc))

    def _open_receipts(self) -> None:
        dialog = ReceiptsDialog(self.history, self.printer, self)
        dialog.exec_()
