import time
import pytest
from datetime import date, datetime
from helpers import (
    add_months, format_start_month, iter_months, local_timestamp, new_payment_id, normalize_flat,
    parse_datetime, parse_month_label, safe_string, to_float, to_month_key, week_start,
)

def test_safe_string():
    assert safe_string(None) == ""
    assert safe_string("  A-12 ") == "A-12"
    assert safe_string(0) == "0"

def test_normalize_flat():
    assert normalize_flat("007") == normalize_flat(7) == "7"
    assert normalize_flat(" 12 ") == "12"
    assert normalize_flat(12.0) == "12"
    # Non-numeric flat ids pass through trimmed
    assert normalize_flat(" B-204 ") == "B-204"
    assert normalize_flat(None) == ""
    assert normalize_flat("nan") == "nan"
    # float() would read this as 1000
    assert normalize_flat("1_000") == "1_000"

def test_to_float():
    assert to_float("1,500") == 1500.0
    assert to_float("") == 0.0
    assert to_float(None, 150.0) == 150.0
    assert to_float("abc", 7.0) == 7.0

def test_parse_month_label():
    assert parse_month_label("Sep-2025") == (8, 2025)
    assert parse_month_label("january 2024") == (0, 2024)
    assert parse_month_label("2025-02") == (1, 2025)
    assert parse_month_label("Foo-2025") is None
    assert parse_month_label("2025") is None
    assert parse_month_label("") is None

def test_to_month_key():
    assert to_month_key("2025-02") == "2025-02"
    assert to_month_key("2025-02-01") == "2025-02"
    assert to_month_key("Feb 2025") == "2025-02"
    assert to_month_key(date(2024, 12, 31)) == "2024-12"
    assert to_month_key("") == ""
    assert to_month_key("soon") == ""
    assert to_month_key("2025-13") == ""

def set_timezone(monkeypatch, tz):
    monkeypatch.setenv("TZ", tz)
    time.tzset()

def test_to_month_key_timezone_aware_values(monkeypatch):
    try:
        # UTC-8: sheet midnights arrive as the previous evening in UTC
        set_timezone(monkeypatch, "PST8PDT")
        assert to_month_key("2025-02-01T08:00:00.000Z") == "2025-02"
        assert to_month_key("2025-02-01T05:00:00.000Z") == "2025-02"
        assert to_month_key("2025-02-01T00:00:00.000Z") == "2025-02"
        # Naive values are already local and are not shifted
        assert to_month_key("2025-01-31 20:00") == "2025-01"

        # UTC+5:30: local midnight of Feb 1 is Jan 31 in UTC
        set_timezone(monkeypatch, "IST-5:30")
        assert to_month_key("2025-01-31T18:30:00.000Z") == "2025-02"
        assert to_month_key("2025-03-01T00:00:00+05:30") == "2025-03"
    finally:
        monkeypatch.undo()
        time.tzset()

def test_format_start_month():
    assert format_start_month("Jan-2024") == "Jan-2024"
    # Mid-month timestamp keeps its month in any timezone
    assert format_start_month("2024-03-15T12:00:00.000Z") == "Mar-2024"
    assert format_start_month("garbageT") == "garbageT"

def test_parse_datetime():
    assert parse_datetime("2025-04-15 10:30") == datetime(2025, 4, 15, 10, 30)
    assert parse_datetime(date(2025, 1, 2)) == datetime(2025, 1, 2)
    assert parse_datetime("") is None
    assert parse_datetime("???") is None

def test_local_timestamp_reads_back_day_first():
    stamp = local_timestamp(datetime(2025, 4, 5, 10, 0))
    assert stamp == "05/04/2025, 10:00:00"
    assert parse_datetime(stamp, dayfirst=True) == datetime(2025, 4, 5, 10, 0)
    # ISO dates are unaffected by dayfirst
    assert parse_datetime("2025-04-05 10:00", dayfirst=True) == datetime(2025, 4, 5, 10, 0)

def test_add_months():
    assert add_months(2025, 0, -1) == (2024, 11)
    assert add_months(2025, 11, 1) == (2026, 0)
    assert add_months(2025, 3, -2) == (2025, 1)

def test_iter_months():
    months = list(iter_months((2024, 10), (2025, 1)))
    assert months == [(2024, 10), (2024, 11), (2025, 0), (2025, 1)]
    # Start after end yields nothing
    assert list(iter_months((2026, 0), (2025, 5))) == []
    # Safety cap
    assert len(list(iter_months((1900, 0), (2025, 0)))) == 120

def test_week_start():
    # 2025-04-16 is a Wednesday
    assert week_start(date(2025, 4, 16)) == date(2025, 4, 14)
    # Sunday belongs to the week that started the previous Monday
    assert week_start(date(2025, 4, 20)) == date(2025, 4, 14)
    assert week_start(date(2025, 4, 14)) == date(2025, 4, 14)

def test_new_payment_id_is_unique_within_same_millisecond():
    now = datetime(2025, 4, 15, 10, 0, 0)
    first = new_payment_id(None, now)
    second = new_payment_id(first, now)
    assert first.isdigit()
    assert int(second) == int(first) + 1
