# data.py
# Remote sheet API access: fetch + join into residents, and payment mutations

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from config import API_URL, REQUEST_TIMEOUT, STATUS_PAID, STATUS_PENDING_VALIDATION, STATUS_REJECTED
from helpers import local_timestamp, new_payment_id, safe_string
from models import Admin, Expense, Flat, Occupant, Payment, Resident, Settings

logger = logging.getLogger(__name__)

# Writes send the JSON body as plain text
_WRITE_HEADERS = {"Content-Type": "text/plain;charset=utf-8"}


class SocietyRepository:
    """
    Holds the last successfully fetched snapshot. A failed fetch leaves the
    previous snapshot in place.
    """

    def __init__(self, api_url: Optional[str] = None, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = REQUEST_TIMEOUT):
        self.api_url = (api_url if api_url is not None else API_URL).strip()
        self.session = session or requests.Session()
        self.timeout = timeout
        self.residents: List[Resident] = []
        self.admins: List[Admin] = []
        self.expenses: List[Expense] = []
        self.settings = Settings()
        self.is_loading = False
        self.last_payload: Optional[Dict[str, Any]] = None
        self._last_payment_id: Optional[str] = None

    # ---------- Read ----------
    def fetch_data(self, today: Optional[date] = None) -> bool:
        self.is_loading = True
        try:
            if not self.api_url:
                logger.error("Fetch API Error: API URL missing")
                return False
            resp = self.session.get(self.api_url, params={"action": "getData"}, timeout=self.timeout)
            resp.raise_for_status()
            result = resp.json()
            if not isinstance(result, dict):
                raise ValueError(f"Unexpected payload type: {type(result).__name__}")
            self._load_snapshot(result, today)
            logger.info(f"Fetched {len(self.residents)} residents")
            return True
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Fetch API Error: {e}")
            return False
        finally:
            self.is_loading = False

    def _load_snapshot(self, result: Dict[str, Any], today: Optional[date]) -> None:
        settings = Settings.from_api(result.get("settings"))
        admins = _build_rows(Admin, _collection(result, "admins"))
        expenses = _build_rows(Expense, _collection(result, "expenditure"))
        payments = _build_rows(Payment, _collection(result, "payments"))
        occupants = _build_rows(Occupant, _collection(result, "residents"))

        residents: List[Resident] = []
        for index, row in enumerate(_collection(result, "flats")):
            try:
                flat = Flat.model_validate(row)
                residents.append(Resident.build(flat, occupants, payments, settings, index, today))
            except (ValidationError, ValueError, TypeError, KeyError) as e:
                logger.warning(f"Dropping flat row {index}: {e}")

        # Swap in only once the whole snapshot is built
        self.settings = settings
        self.admins = admins
        self.expenses = expenses
        self.residents = residents

    def find_resident(self, flat_no: str) -> Optional[Resident]:
        for r in self.residents:
            if r.flat == flat_no:
                return r
        return None

    # ---------- Write ----------
    def build_payment_payload(self, form: Dict[str, Any], admin_user: Optional[str] = None,
                              now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Row written by addPayment. Submissions wait for validation unless an
        admin enters the payment directly.
        """
        now = now or datetime.now()
        timestamp = local_timestamp(now)
        payment_id = new_payment_id(self._last_payment_id, now)
        self._last_payment_id = payment_id

        category = safe_string(form.get("category")) or "Monthly"
        month = safe_string(form.get("month"))
        title = f"Maint: {month}" if category == "Monthly" else safe_string(form.get("title"))

        payload = {
            "PaymentID": payment_id,
            "FlatNo": safe_string(form.get("flat_no")),
            "Category": category,
            "Title": title,
            "Month": month,
            "Amount": form.get("amount"),
            "PaymentDate": safe_string(form.get("payment_date")).replace("T", " "),
            "PaymentMethod": safe_string(form.get("method")) or "UPI",
            "Status": STATUS_PENDING_VALIDATION,
            "Remarks": f"{safe_string(form.get('remarks'))} [Logged: {timestamp}]",
        }
        if admin_user:
            payload.update({
                "Status": STATUS_PAID,
                "ValidatedBy": admin_user,
                "ValidationTime": timestamp,
                "ValidationComments": "Direct entry by admin",
            })
        return payload

    def add_payment(self, form: Dict[str, Any], admin_user: Optional[str] = None) -> bool:
        payload = self.build_payment_payload(form, admin_user)
        self.last_payload = payload
        return self._post("addPayment", payload)

    def update_payment_status(self, payment_id: str, status: str, admin_name: str,
                              comments: str = "") -> bool:
        payload = {
            "action": "UPDATE",
            "PaymentID": payment_id,
            "Status": status,
            "ValidatedBy": admin_name,
            "ValidationTime": local_timestamp(),
            "ValidationComments": comments or "",
        }
        self.last_payload = payload
        return self._post("updatePayment", payload)

    def approve_payment(self, payment_id: str, admin_name: str, comments: str = "Approved via App") -> bool:
        return self.update_payment_status(payment_id, STATUS_PAID, admin_name, comments)

    def reject_payment(self, payment_id: str, admin_name: str, comments: str = "Rejected via App") -> bool:
        return self.update_payment_status(payment_id, STATUS_REJECTED, admin_name, comments)

    def _post(self, action: str, payload: Dict[str, Any]) -> bool:
        if not self.api_url:
            logger.error(f"{action} failed: API URL missing")
            return False
        try:
            resp = self.session.post(
                self.api_url, params={"action": action}, headers=_WRITE_HEADERS,
                data=json.dumps(payload), timeout=self.timeout,
            )
            resp.raise_for_status()
            result = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"{action} failed: {e}")
            return False
        ok = isinstance(result, dict) and result.get("success") is True
        if not ok:
            message = result.get("message") if isinstance(result, dict) else result
            logger.error(f"{action} rejected by API: {message}")
        return ok


def _collection(result: Dict[str, Any], key: str) -> list:
    """A top-level sheet collection; missing is empty, any other non-list is a bad payload."""
    rows = result.get(key)
    if not rows:
        return []
    if not isinstance(rows, list):
        raise ValueError(f"Expected a list for '{key}', got {type(rows).__name__}")
    return rows


def _build_rows(model, rows: list) -> list:
    """Validate each raw row; rows that cannot be read are skipped."""
    out = []
    for i, row in enumerate(rows):
        try:
            out.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Skipping {model.__name__} row {i}: {e}")
    return out
