# config.py
# API endpoint, settings defaults & status/month constants

import os

from dotenv import load_dotenv

load_dotenv(override=False)

API_URL = os.getenv("SOCIETY_API_URL", "").strip()

# Unset = no explicit timeout, the transport decides
_timeout = os.getenv("SOCIETY_REQUEST_TIMEOUT", "").strip()
REQUEST_TIMEOUT = float(_timeout) if _timeout else None

PAGE_SIZE = int(os.getenv("SOCIETY_PAGE_SIZE") or "10")

# Settings defaults (used when the sheet leaves a key blank)
DEFAULT_SOCIETY_NAME = "Green Valley Heights"
DEFAULT_SOCIETY_ADDRESS = "Sector 42, Maintenance Drive"
DEFAULT_MONTHLY_FEE = 150.0
DEFAULT_START_MONTH = "Sep-2025"

# Status strings as written to the sheet
STATUS_PAID = "Paid"
STATUS_PENDING_VALIDATION = "Pending Validation"
STATUS_PENDING = "Pending"
STATUS_REJECTED = "Rejected"

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
MONTHS_MAP = {m.lower(): i for i, m in enumerate(MONTHS)}

MAX_MONTHS_WALK = 120
RECENT_TRANSACTIONS_LIMIT = 50
