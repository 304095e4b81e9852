"""Entry point for the Pharmacy Billing Desk desktop app."""

import logging
import os
import sys

from PyQt5.QtWidgets import QApplication

from pharmabill import config
from pharmabill.billing.customers import CustomerResolver
from pharmabill.billing.history import BillHistory
from pharmabill.data.api_client import ApiClient
from pharmabill.data.bill_repo import BillRepository
from pharmabill.data.catalog_repo import CatalogRepository
from pharmabill.data.customer_repo import CustomerRepository
from pharmabill.data.session import SessionStore
from pharmabill.data.settings_repo import SettingsRepository
from pharmabill.printing.receipt_printer import ReceiptPrinter
from pharmabill.ui.main_window import MainWindow


def configure_logging() -> None:
    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    root.addHandler(console)

    file_handler = logging.FileHandler(config.LOG_FILE, encoding="utf-8")
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )
    root.addHandler(file_handler)


def main() -> None:
    configure_logging()
    app = QApplication(sys.argv)

    session = SessionStore()
    session.init_from_persisted()
    env_token = os.getenv("PHARMABILL_TOKEN")
    if env_token:
        session.set(env_token)
    if not session.is_authenticated:
        logging.getLogger(__name__).warning("No session token; API calls may be rejected")

    client = ApiClient(session)
    store = SettingsRepository(client).store_profile()
    printer = ReceiptPrinter(store=store)

    window = MainWindow(
        catalog=CatalogRepository(client),
        customers=CustomerResolver(CustomerRepository(client)),
        history=BillHistory(BillRepository(client)),
        printer=printer,
    )
    printer.parent = window
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
