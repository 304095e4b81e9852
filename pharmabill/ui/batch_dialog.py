"""Dialog for picking per-batch quantities of one medicine."""

from __future__ import annotations

from typing import Dict

from PyQt5.QtWidgets import (
    QAbstractItemView,
    QDialog,
    QDialogButtonBox,
    QLabel,
    QMessageBox,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
)

from pharmabill.billing.allocation import AllocationSession, BatchAllocator
from pharmabill.errors import ValidationError
from pharmabill.money import format_currency


class BatchDialog(QDialog):
    """Shows in-stock batches with a quantity box each."""

    def __init__(self, allocator: BatchAllocator, session: AllocationSession, parent=None) -> None:
        super().__init__(parent)
        self.allocator = allocator
        self.session = session
        self._spins: Dict[str, QSpinBox] = {}
        self.setWindowTitle(f"Select batches - {session.medicine.name}")
        self.setMinimumWidth(560)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        medicine = self.session.medicine
        layout.addWidget(
            QLabel(
                f"<b>{medicine.name}</b> &nbsp; GST {medicine.gst_percent:g}% &nbsp; "
                f"Discount {medicine.discount_percent:g}%"
            )
        )

        self.table = QTableWidget(len(self.session.batches), 5)
        self.table.setHorizontalHeaderLabels(["Batch", "Expiry", "MRP", "Available", "Qty"])
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.horizontalHeader().setStretchLastSection(True)
        for row, batch in enumerate(self.session.batches):
            expiry = batch.expiry_date.strftime("%d/%m/%Y") if batch.expiry_date else "-"
            values = [batch.batch_no, expiry, format_currency(batch.mrp), str(batch.quantity)]
            for col, value in enumerate(values):
                self.table.setItem(row, col, QTableWidgetItem(value))
            spin = QSpinBox()
            # One above stock so an over-allocation reaches validation and is reported
            spin.setRange(0, batch.quantity + 1)
            spin.setValue(self.session.quantities.get(batch.id, 0))
            self.table.setCellWidget(row, 4, spin)
            self._spins[batch.id] = spin
        self.table.resizeColumnsToContents()
        layout.addWidget(self.table, 1)

        if not self.session.batches:
            layout.addWidget(QLabel("No batches in stock for this medicine."))

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.button(QDialogButtonBox.Ok).setText(
            "Update Cart" if self.session.is_edit else "Add to Cart"
        )
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)
        self.setLayout(layout)

    def _on_accept(self) -> None:
        for batch_id, spin in self._spins.items():
            self.session.set_quantity(batch_id, int(spin.value()))
        try:
            self.allocator.commit(self.session)
        except ValidationError as exc:
            QMessageBox.warning(self, "Check quantities", str(exc))
            return
        self.accept()
