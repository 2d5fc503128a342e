# dashboard.py
# Pure view-model: dashboard aggregates, admin queues, filtering & pagination

from datetime import date, datetime
from math import ceil
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd
from pydantic import BaseModel, Field

from config import PAGE_SIZE, RECENT_TRANSACTIONS_LIMIT
from helpers import add_months, month_key, month_label, parse_datetime, week_start
from models import Expense, Payment, Resident, payment_sort_key

BUCKETS = ("today", "this_week", "this_month", "last_month", "prev_prev_month")


class TransactionView(BaseModel):
    payment: Payment
    display_flat: str
    display_resident_name: str = "Unknown"
    payer_type: str = "Owner"
    resident_phone: str = ""
    display_payment_for: str = ""
    full_date_time: str = ""
    display_validation_time: str = "N/A"
    method_kind: str = "card"

    @property
    def id(self) -> str:
        return self.payment.id

    @property
    def amount(self) -> float:
        return self.payment.amount


class AdhocSummary(BaseModel):
    title: str
    collected: float = 0.0
    spent: float = 0.0
    last_activity: Optional[datetime] = None

    def touch(self, when: Optional[datetime]) -> None:
        if when is not None and (self.last_activity is None or when > self.last_activity):
            self.last_activity = when


class DashboardStats(BaseModel):
    flats_count: int = 0
    owners_count: int = 0
    tenants_count: int = 0

    # by target month (payment.month_key)
    total_collection: float = 0.0
    monthly_total: float = 0.0
    monthly_current: float = 0.0
    monthly_last: float = 0.0
    monthly_prev_prev: float = 0.0
    adhoc_total: float = 0.0
    adhoc_current: float = 0.0
    adhoc_last: float = 0.0
    adhoc_prev_prev: float = 0.0

    # by payment / expense date
    received: Dict[str, float] = Field(default_factory=lambda: dict.fromkeys(BUCKETS, 0.0))
    spent: Dict[str, float] = Field(default_factory=lambda: dict.fromkeys(BUCKETS, 0.0))
    cash_in_hand_by_bucket: Dict[str, float] = Field(default_factory=lambda: dict.fromkeys(BUCKETS, 0.0))

    pending_validation_total: float = 0.0
    total_spent: float = 0.0
    cash_in_hand: float = 0.0

    current_month_label: str = ""
    last_month_label: str = ""
    prev_prev_month_label: str = ""

    adhoc_breakdown: Dict[str, AdhocSummary] = Field(default_factory=dict)
    recent_transactions: List[TransactionView] = Field(default_factory=list)


class PendingStats(BaseModel):
    count: int = 0
    total_amount: float = 0.0


class Page(BaseModel):
    items: list
    page: int
    total_pages: int
    total: int


# ---------- Payments ----------
def all_payments(residents: Iterable[Resident]) -> List[Payment]:
    """Every payment across residents, each id once."""
    seen = set()
    out = []
    for r in residents:
        for p in r.history:
            if p.id in seen:
                continue
            seen.add(p.id)
            out.append(p)
    return out


def newest_first(payments: Iterable[Payment]) -> List[Payment]:
    return sorted(payments, key=payment_sort_key, reverse=True)


def index_by_flat(residents: Iterable[Resident]) -> Dict[str, Resident]:
    return {r.flat: r for r in residents}


def _method_kind(method: str) -> str:
    m = method.lower()
    if any(k in m for k in ("upi", "gpay", "paytm")):
        return "upi"
    if "cash" in m:
        return "cash"
    if any(k in m for k in ("bank", "neft", "cheque")):
        return "bank"
    return "card"


def _format_dt(value: Optional[datetime]) -> str:
    return value.strftime("%d %b %Y, %I:%M %p").upper() if value else ""


def map_transaction_for_display(txn: Payment, residents: Mapping[str, Resident]) -> TransactionView:
    """
    Attach who paid and human-readable dates to a payment. Monthly dues are
    attributed to a tenant when the flat has one, otherwise to the owner.
    """
    resident = residents.get(txn.flat_no)
    name, payer_type, phone = "Unknown", "Owner", ""
    if resident and resident.occupants:
        tenant = next((o for o in resident.occupants if o.is_tenant), None)
        owner = next((o for o in resident.occupants if o.is_owner), None)
        if txn.is_monthly and tenant:
            name, payer_type, phone = tenant.name, "Tenant", tenant.phone
        elif owner:
            name, phone = owner.name, owner.phone
        else:
            first = resident.occupants[0]
            name, phone = first.name, first.phone

    payment_for = txn.category
    if txn.is_monthly and txn.month_key:
        y, m = txn.month_key.split("-")
        payment_for = date(int(y), int(m), 1).strftime("%B %Y")

    validation_time = "N/A"
    if txn.validation_time:
        validation_time = _format_dt(parse_datetime(txn.validation_time, dayfirst=True)) or txn.validation_time

    return TransactionView(
        payment=txn,
        display_flat=resident.flat if resident else txn.flat_no,
        display_resident_name=name,
        payer_type=payer_type,
        resident_phone=phone,
        display_payment_for=payment_for,
        full_date_time=_format_dt(txn.paid_at) or txn.raw_date,
        display_validation_time=validation_time,
        method_kind=_method_kind(txn.method),
    )


# ---------- Dashboard ----------
def _date_buckets(d: date, today: date, monday: date, months: Mapping[str, tuple]) -> List[str]:
    hits = []
    if d == today:
        hits.append("today")
    if d >= monday:
        hits.append("this_week")
    for name, (y, m) in months.items():
        if d.year == y and d.month - 1 == m:
            hits.append(name)
    return hits


def dashboard_stats(residents: Sequence[Resident], expenses: Iterable[Expense] = (),
                    now: Optional[datetime] = None) -> DashboardStats:
    """
    Aggregate collections & spending for the dashboard. Only Paid and
    Pending Validation payments count as collected.
    """
    now = now or datetime.now()
    today = now.date()
    monday = week_start(today)
    cur = (now.year, now.month - 1)
    last = add_months(*cur, -1)
    prev_prev = add_months(*cur, -2)
    months = {"this_month": cur, "last_month": last, "prev_prev_month": prev_prev}
    cur_key, last_key, prev_prev_key = month_key(*cur), month_key(*last), month_key(*prev_prev)

    stats = DashboardStats(
        flats_count=len(residents),
        current_month_label=month_label(cur[0], cur[1], sep="-"),
        last_month_label=month_label(last[0], last[1], sep="-"),
        prev_prev_month_label=month_label(prev_prev[0], prev_prev[1], sep="-"),
    )

    for r in residents:
        for o in r.occupants:
            if o.is_owner:
                stats.owners_count += 1
            elif o.is_tenant:
                stats.tenants_count += 1

    payments = all_payments(residents)
    for p in payments:
        if p.is_pending_validation:
            stats.pending_validation_total += p.amount
        if not p.is_paid_or_pending_validation:
            continue

        stats.total_collection += p.amount
        key = p.month_key
        if p.is_monthly:
            stats.monthly_total += p.amount
            stats.monthly_current += p.amount if key == cur_key else 0.0
            stats.monthly_last += p.amount if key == last_key else 0.0
            stats.monthly_prev_prev += p.amount if key == prev_prev_key else 0.0
        else:
            stats.adhoc_total += p.amount
            stats.adhoc_current += p.amount if key == cur_key else 0.0
            stats.adhoc_last += p.amount if key == last_key else 0.0
            stats.adhoc_prev_prev += p.amount if key == prev_prev_key else 0.0
            title = p.title or p.category
            summary = stats.adhoc_breakdown.setdefault(title, AdhocSummary(title=title))
            summary.collected += p.amount
            summary.touch(p.paid_at)

        paid_at = p.paid_at
        if paid_at is not None:
            for bucket in _date_buckets(paid_at.date(), today, monday, months):
                stats.received[bucket] += p.amount

    for e in expenses:
        stats.total_spent += e.amount
        spent_at = e.spent_at
        if spent_at is not None:
            for bucket in _date_buckets(spent_at.date(), today, monday, months):
                stats.spent[bucket] += e.amount
        if not e.is_monthly and e.title:
            summary = stats.adhoc_breakdown.setdefault(e.title, AdhocSummary(title=e.title))
            summary.spent += e.amount
            summary.touch(spent_at)

    stats.cash_in_hand = stats.total_collection - stats.total_spent
    for bucket in BUCKETS:
        stats.cash_in_hand_by_bucket[bucket] = stats.received[bucket] - stats.spent[bucket]

    lookup = index_by_flat(residents)
    stats.recent_transactions = [
        map_transaction_for_display(p, lookup)
        for p in newest_first(payments)[:RECENT_TRANSACTIONS_LIMIT]
    ]
    return stats


# ---------- Admin queues ----------
def pending_validation_list(residents: Sequence[Resident]) -> List[TransactionView]:
    lookup = index_by_flat(residents)
    pending = (p for p in all_payments(residents) if p.is_pending_validation)
    return [map_transaction_for_display(p, lookup) for p in newest_first(pending)]


def pending_stats(views: Sequence[TransactionView]) -> PendingStats:
    return PendingStats(count=len(views), total_amount=sum(v.amount for v in views))


def admin_history_list(residents: Sequence[Resident],
                       limit: int = RECENT_TRANSACTIONS_LIMIT) -> List[TransactionView]:
    lookup = index_by_flat(residents)
    paid = (p for p in all_payments(residents) if p.is_paid_strict)
    return [map_transaction_for_display(p, lookup) for p in newest_first(paid)[:limit]]


def admin_history_totals(residents: Sequence[Resident]) -> PendingStats:
    paid = [p for p in all_payments(residents) if p.is_paid_strict]
    return PendingStats(count=len(paid), total_amount=sum(p.amount for p in paid))


# ---------- Filtering / paging ----------
def filter_residents(residents: Sequence[Resident], status: str = "all", query: str = "") -> List[Resident]:
    """
    status: 'paid' (no dues, nothing awaiting validation), 'unpaid' (has
    dues), 'pending' (has a payment awaiting validation) or 'all'.
    """
    data = list(residents)
    if status == "paid":
        data = [r for r in data if r.is_paid and not r.has_pending_validation]
    elif status == "unpaid":
        data = [r for r in data if not r.is_paid]
    elif status == "pending":
        data = [r for r in data if r.has_pending_validation]
    q = (query or "").strip().lower()
    if q:
        data = [r for r in data if q in r.search_str]
    return data


def filter_transactions(views: Sequence[TransactionView], query: str = "") -> List[TransactionView]:
    q = (query or "").strip().lower()
    if not q:
        return list(views)
    out = []
    for v in views:
        haystack = (v.display_resident_name, v.display_flat, v.payment.remarks, v.payment.validated_by)
        if any(q in field.lower() for field in haystack):
            out.append(v)
    return out


def paginate(items: Sequence, page: int = 1, page_size: int = PAGE_SIZE) -> Page:
    """1-based pages; out-of-range pages are clamped."""
    page_size = max(1, page_size)
    total_pages = max(1, ceil(len(items) / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return Page(items=list(items[start:start + page_size]), page=page,
                total_pages=total_pages, total=len(items))


# ---------- Frames ----------
def monthly_collection_frame(residents: Sequence[Resident]) -> Optional[pd.DataFrame]:
    """
    Collections per target month, Monthly vs Ad-hoc.
    Returns a DataFrame with YYYY-MM as index, or None when there is nothing collected.
    """
    rows = [
        {"YYYY-MM": p.month_key, "Kind": "Monthly" if p.is_monthly else "Ad-hoc", "Amount": p.amount}
        for p in all_payments(residents)
        if p.is_paid_or_pending_validation and p.month_key
    ]
    if not rows:
        return None
    df = pd.DataFrame(rows)
    return (
        df.groupby(["YYYY-MM", "Kind"])["Amount"]
        .sum()
        .unstack(fill_value=0.0)
        .sort_index()
    )


def transactions_frame(views: Sequence[TransactionView]) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "Date": v.full_date_time,
            "Flat": v.display_flat,
            "Resident": v.display_resident_name,
            "For": v.display_payment_for,
            "Amount (₹)": round(v.amount, 2),
            "Method": v.payment.method,
            "Status": v.payment.status,
            "Validated By": v.payment.validated_by,
        }
        for v in views
    ], columns=["Date", "Flat", "Resident", "For", "Amount (₹)", "Method", "Status", "Validated By"])
