# helpers.py
# Value normalization, month math, date parsing, id generation

from typing import Any, Iterator, Optional, Tuple
from datetime import date, datetime, time, timedelta
import logging
import math
import re

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from config import MONTHS, MONTHS_MAP, MAX_MONTHS_WALK

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")
# Missing date parts fall back to the first of the month, not "today"
_PARSE_DEFAULT = datetime(2000, 1, 1)


def safe_string(value: Any) -> str:
    """Trimmed string form of `value`; None becomes ''."""
    if value is None:
        return ""
    return str(value).strip()


def normalize_flat(value: Any) -> str:
    """
    Canonical flat key. Numeric-looking values collapse to their number
    ("007" and 7 both become "7"); anything else is returned trimmed.
    """
    s = safe_string(value)
    # float() accepts "1_000"; a sheet id with underscores is not a number
    if not s or "_" in s:
        return s
    try:
        n = float(s)
    except ValueError:
        return s
    if not math.isfinite(n):
        return s
    if n.is_integer():
        return str(int(n))
    return repr(n)


def to_float(value: Any, default: float = 0.0) -> float:
    s = safe_string(value)
    if not s:
        return default
    try:
        n = float(s.replace(",", ""))
    except ValueError:
        logger.warning(f"Not a number: {s!r}, using {default}")
        return default
    return n if math.isfinite(n) else default


# ---------- Date helpers ----------
def parse_datetime(value: Any, dayfirst: bool = False) -> Optional[datetime]:
    """
    Parse a sheet date/time cell into a naive local datetime.
    Timezone-aware values are converted to local time first.
    Returns None for blanks and anything unparseable.

    Pass dayfirst=True for stamps written by `local_timestamp` (dd/mm/yyyy).
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, time())
    else:
        s = safe_string(value)
        if not s:
            return None
        try:
            parsed = date_parser.parse(s, default=_PARSE_DEFAULT, dayfirst=dayfirst)
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def month_key(year: int, month0: int) -> str:
    """'YYYY-MM' for a zero-based month."""
    return f"{year:04d}-{month0 + 1:02d}"


def month_label(year: int, month0: int, sep: str = " ") -> str:
    return f"{MONTHS[month0]}{sep}{year}"


def to_month_key(value: Any) -> str:
    """
    Canonical 'YYYY-MM' for a payment's target month.

    Sheets hand back date cells as UTC timestamps of local midnight. Those are
    moved forward 12 hours before the local year/month is read so the day
    cannot fall back into the previous month in negative-offset timezones.
    """
    if isinstance(value, (datetime, date)):
        parsed = value
    else:
        s = safe_string(value)
        if not s:
            return ""
        if MONTH_KEY_RE.match(s):
            return s if 1 <= int(s[5:7]) <= 12 else ""
        try:
            parsed = date_parser.parse(s, default=_PARSE_DEFAULT)
        except (ValueError, OverflowError):
            logger.warning(f"Unparseable month value: {s!r}")
            return ""
    if isinstance(parsed, datetime) and parsed.tzinfo is not None:
        parsed = (parsed + timedelta(hours=12)).astimezone()
    return month_key(parsed.year, parsed.month - 1)


def format_start_month(value: Any) -> str:
    """Reduce a timestamp-looking start month ('...T...Z') to 'Mon-YYYY'."""
    s = safe_string(value)
    if "T" in s or "Z" in s:
        parsed = parse_datetime(s)
        if parsed is None:
            return s
        return month_label(parsed.year, parsed.month - 1, sep="-")
    return s


def parse_month_label(label: Any) -> Optional[Tuple[int, int]]:
    """
    Parse 'Sep-2025', 'September 2025' or '2025-09' into (month0, year).
    Returns None when the label cannot be understood.
    """
    s = safe_string(label)
    m = MONTH_KEY_RE.match(s)
    if m:
        month0 = int(m.group(2)) - 1
        return (month0, int(m.group(1))) if 0 <= month0 < 12 else None

    parts = re.split(r"[-\s]+", s)
    if len(parts) != 2:
        return None
    month0 = MONTHS_MAP.get(parts[0].strip().lower()[:3])
    year_digits = re.match(r"^\d+", parts[1].strip())
    if month0 is None or not year_digits:
        return None
    return month0, int(year_digits.group(0))


def add_months(year: int, month0: int, k: int) -> Tuple[int, int]:
    """Shift (year, month0) by k months. Returns (year, month0)."""
    anchor = date(year, month0 + 1, 1) + relativedelta(months=k)
    return anchor.year, anchor.month - 1


def iter_months(start: Tuple[int, int], end: Tuple[int, int],
                limit: int = MAX_MONTHS_WALK) -> Iterator[Tuple[int, int]]:
    """
    Yield (year, month0) from start to end inclusive, oldest first.
    Both bounds are (year, month0). Stops after `limit` months.
    """
    y, m = start
    end_y, end_m = end
    count = 0
    while (y < end_y or (y == end_y and m <= end_m)) and count < limit:
        yield y, m
        m += 1
        if m > 11:
            m = 0
            y += 1
        count += 1


def week_start(d: date) -> date:
    """Monday of the week containing `d` (Sunday closes the previous week)."""
    return d - timedelta(days=d.weekday())


def local_timestamp(now: Optional[datetime] = None) -> str:
    """Human-readable local timestamp written into remarks & validation fields."""
    now = now or datetime.now()
    return now.strftime("%d/%m/%Y, %H:%M:%S")


def new_payment_id(last_id: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """
    Millisecond timestamp id. Bumped past `last_id` so two submissions in the
    same millisecond still get distinct ids.
    """
    now = now or datetime.now()
    candidate = int(now.timestamp() * 1000)
    if last_id and last_id.isdigit() and candidate <= int(last_id):
        candidate = int(last_id) + 1
    return str(candidate)
