"""Configuration constants for the Pharmacy Billing Desk."""

import os

from dotenv import load_dotenv

load_dotenv()

# Base URL of the pharmacy REST API.
API_BASE_URL: str = os.getenv("PHARMABILL_API_BASE_URL", "http://127.0.0.1:4000/api")

# Request timeout in seconds.
API_TIMEOUT: float = float(os.getenv("PHARMABILL_API_TIMEOUT", "15"))

# Receipt header defaults; GET /settings overrides them when reachable.
STORE_NAME: str = os.getenv("PHARMABILL_STORE_NAME", "Thangam Medicals")
STORE_SUBTITLE: str = os.getenv("PHARMABILL_STORE_SUBTITLE", "Pharmacy & General Stores")
STORE_PHONE: str = os.getenv("PHARMABILL_STORE_PHONE", "00000 00000")
STORE_ADDRESS: str = os.getenv("PHARMABILL_STORE_ADDRESS", "")
STORE_GSTIN: str = os.getenv("PHARMABILL_STORE_GSTIN", "")
RECEIPT_FOOTER: str = "Thank you for your purchase!"

# Name of the printer to target for receipts; empty means system default.
PRINTER_NAME: str = os.getenv("PHARMABILL_PRINTER_NAME", "")

# Delay before the print dialog opens so the document has been laid out.
PRINT_DELAY_MS: int = 150

# Quiet periods for search-as-you-type.
CUSTOMER_SEARCH_QUIET_MS: int = 300
MEDICINE_SEARCH_QUIET_MS: int = 500
BILL_SEARCH_QUIET_MS: int = 500
MIN_CUSTOMER_QUERY_LENGTH: int = 2

MEDICINE_PAGE_SIZE: int = 10
BILLS_PAGE_SIZE: int = 15
EXPIRY_WINDOW_DAYS: int = 30

# Canonical payee when no customer is selected.
WALK_IN_CUSTOMER_NAME: str = "Walk-in Customer"

# QSettings identity used for the persisted session token.
SETTINGS_ORGANIZATION: str = "Thangam Medicals"
SETTINGS_APPLICATION: str = "PharmacyBillingDesk"
TOKEN_SETTINGS_KEY: str = "auth_token"

LOG_FILE: str = os.getenv("PHARMABILL_LOG_FILE", "pharmabill.log")
LOG_LEVEL: str = os.getenv("PHARMABILL_LOG_LEVEL", "INFO")
