"""Receipt printing via QTextDocument and the platform print dialog."""

from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import QTimer
from PyQt5.QtGui import QTextDocument
from PyQt5.QtPrintSupport import QPrintDialog, QPrinter
from PyQt5.QtWidgets import QDialog, QWidget

from pharmabill import config
from pharmabill.models.bill import Bill
from pharmabill.models.store import StoreProfile
from pharmabill.printing.receipt_renderer import receipt_title, render_receipt_html

logger = logging.getLogger(__name__)


class ReceiptPrinter:
    """Lay out a bill's receipt and hand it to the print dialog."""

    def __init__(
        self,
        store: Optional[StoreProfile] = None,
        printer_name: Optional[str] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        self.store = store or StoreProfile()
        self.printer_name = printer_name if printer_name is not None else config.PRINTER_NAME
        self.parent = parent

    def build_document(self, bill: Bill) -> QTextDocument:
        doc = QTextDocument()
        doc.setMetaInformation(QTextDocument.DocumentTitle, receipt_title(bill))
        doc.setHtml(render_receipt_html(bill, self.store))
        return doc

    def _make_printer(self) -> QPrinter:
        printer = QPrinter(QPrinter.HighResolution)
        if self.printer_name:
            printer.setPrinterName(self.printer_name)
        return printer

    def print_bill(self, bill: Bill) -> bool:
        """Show the print dialog; closing it without printing is not an error."""
        doc = self.build_document(bill)
        printer = self._make_printer()
        printer.setDocName(receipt_title(bill))

        dialog = QPrintDialog(printer, self.parent)
        dialog.setWindowTitle(f"Print {receipt_title(bill)}")
        if dialog.exec_() != QDialog.Accepted:
            logger.info("Print of bill %s dismissed by operator", bill.display_number)
            return False

        doc.print_(printer)
        logger.info("Bill %s sent to printer %s", bill.display_number, printer.printerName())
        return True

    def print_when_ready(self, bill: Bill) -> None:
        """Open the dialog once the event loop has painted the current screen."""
        QTimer.singleShot(config.PRINT_DELAY_MS, lambda: self.print_bill(bill))
