import pytest
from datetime import date
from models import Flat, Occupant, Payment, PaymentStatus, Resident, Settings, pending_months_list

def monthly(month, status="Paid", flat="5", amount=100, pid=None):
    return Payment.model_validate({
        "PaymentID": pid or f"{flat}-{month}-{status}",
        "FlatNo": flat, "Category": "Monthly", "Status": status,
        "Month": month, "Amount": amount, "PaymentDate": f"{month}-10 09:00",
    })

def test_settings_defaults():
    s = Settings.from_api({})
    assert s.society_name == "Green Valley Heights"
    assert s.society_address == "Sector 42, Maintenance Drive"
    assert s.monthly_fee == 150.0
    assert s.start_month == "Sep-2025"

def test_settings_from_mapping_and_rows():
    s = Settings.from_api({"SocietyName": "Lake View", "MonthlyMaintainenceAmount": "2500",
                           "MonthlyMaintainenceStartFrom": "Jan-2024"})
    assert s.society_name == "Lake View"
    assert s.monthly_fee == 2500.0
    assert s.start_month == "Jan-2024"

    # Array-of-rows variant, keys matched case-insensitively
    rows = [
        {"Key": "societyname", "Value": "Palm Court"},
        {"key": "MONTHLYMAINTAINENCEAMOUNT", "value": 900},
        {"Name": "MonthlyMaintainenceStartFrom", "Value": "2024-06-15T12:00:00.000Z"},
    ]
    s = Settings.from_api(rows)
    assert s.society_name == "Palm Court"
    assert s.monthly_fee == 900.0
    assert s.start_month == "Jun-2024"

def test_settings_bad_fee_falls_back():
    assert Settings.from_api({"MonthlyMaintainenceAmount": "n/a"}).monthly_fee == 150.0

def test_payment_aliases_and_defaults():
    p = Payment.model_validate({"flat": "007", "amount": "250", "status": "paid"})
    assert p.flat_no == "7"
    assert p.amount == 250.0
    assert p.category == "Maintenance"
    assert p.method == "UPI"
    assert p.id  # generated
    assert p.is_paid_strict

def test_payment_status_parse_is_case_insensitive():
    assert PaymentStatus.parse("PENDING validation") is PaymentStatus.PENDING_VALIDATION
    assert PaymentStatus.parse(" Rejected ") is PaymentStatus.REJECTED
    assert PaymentStatus.parse("On hold") is PaymentStatus.OTHER

def test_payment_flags():
    pv = monthly("2025-02", status="pending validation")
    assert pv.is_pending_validation and pv.is_in_review and pv.is_paid_or_pending_validation
    rejected = monthly("2025-02", status="Rejected")
    assert not rejected.is_in_review and not rejected.is_paid_or_pending_validation
    pending = monthly("2025-02", status="Pending")
    assert pending.is_in_review and not pending.is_paid_or_pending_validation
    assert pv.is_monthly and pv.type == "Monthly"
    adhoc = Payment.model_validate({"Category": "Donation"})
    assert not adhoc.is_monthly and adhoc.type == "Donation"

def test_payment_month_key():
    assert monthly("2025-02").month_key == "2025-02"
    assert Payment.model_validate({"Month": "2025-02-01"}).month_key == "2025-02"
    assert Payment.model_validate({}).month_key == ""

def test_pending_months_no_history():
    months = pending_months_list("Jan-2024", 150.0, [], today=date(2024, 3, 10))
    assert [m.value for m in months] == ["2024-03", "2024-02", "2024-01"]
    assert [m.label for m in months] == ["Mar 2024", "Feb 2024", "Jan 2024"]
    assert all(m.amount == 150.0 for m in months)

def test_pending_months_paid_vs_rejected():
    today = date(2024, 3, 10)
    paid = pending_months_list("Jan-2024", 150.0, [monthly("2024-02")], today=today)
    assert [m.value for m in paid] == ["2024-03", "2024-01"]
    rejected = pending_months_list("Jan-2024", 150.0, [monthly("2024-02", status="Rejected")], today=today)
    assert [m.value for m in rejected] == ["2024-03", "2024-02", "2024-01"]
    # Merely "Pending" does not cover a month either
    pending = pending_months_list("Jan-2024", 150.0, [monthly("2024-02", status="Pending")], today=today)
    assert len(pending) == 3

def test_pending_months_ignores_adhoc_payments():
    donation = Payment.model_validate({"Category": "Donation", "Status": "Paid", "Month": "2024-02"})
    months = pending_months_list("Jan-2024", 150.0, [donation], today=date(2024, 3, 1))
    assert len(months) == 3

def test_pending_months_is_idempotent():
    history = [monthly("2024-02"), monthly("2024-01", status="Rejected")]
    snapshot = [p.model_dump() for p in history]
    first = pending_months_list("Jan-2024", 150.0, history, today=date(2024, 3, 10))
    second = pending_months_list("Jan-2024", 150.0, history, today=date(2024, 3, 10))
    assert first == second
    assert [p.model_dump() for p in history] == snapshot

def test_pending_months_edge_cases():
    assert pending_months_list("whenever", 150.0, [], today=date(2024, 3, 1)) == []
    # Start month in the future
    assert pending_months_list("Jan-2030", 150.0, [], today=date(2024, 3, 1)) == []
    assert len(pending_months_list("Jan-1990", 150.0, [], today=date(2024, 3, 1))) == 120

def _resident(payments, today=date(2025, 4, 15)):
    settings = Settings(monthly_fee=100, start_month="Jan-2025")
    flat = Flat.model_validate({"FlatNo": "5"})
    occupants = [Occupant.model_validate({"FlatNo": "005", "Name": "Asha", "ResidentType": "Owner"})]
    return Resident.build(flat, occupants, payments, settings, index=0, today=today)

def test_resident_all_months_due():
    r = _resident([])
    assert [m.label for m in r.pending_months] == ["Apr 2025", "Mar 2025", "Feb 2025", "Jan 2025"]
    assert r.total_pending_due == 400
    assert r.is_paid is False
    assert r.search_str == "5 asha"

def test_resident_with_paid_february():
    r = _resident([monthly("2025-02")])
    assert [m.value for m in r.pending_months] == ["2025-04", "2025-03", "2025-01"]
    assert r.total_pending_due == 300
    assert not r.is_paid

def test_resident_is_paid_iff_no_due():
    months = ["2025-01", "2025-02", "2025-03"]
    r = _resident([monthly(m) for m in months] + [monthly("2025-04", status="Pending Validation")])
    assert r.total_pending_due == 0
    assert r.is_paid
    assert r.has_pending_validation

def test_resident_is_paid_matches_due():
    for paid_months in ([], ["2025-01"], ["2025-01", "2025-03"], ["2025-04"], ["2025-01", "2025-02", "2025-03", "2025-04"]):
        r = _resident([monthly(m) for m in paid_months])
        assert r.is_paid == (r.total_pending_due <= 0)
        assert r.total_pending_due == 100 * (4 - len(paid_months))

def test_resident_history_newest_first_and_stats():
    older = monthly("2025-01", pid="a")
    newer = monthly("2025-03", status="Pending Validation", pid="b")
    other_flat = monthly("2025-03", flat="6", pid="c")
    r = _resident([older, other_flat, newer])
    assert [p.id for p in r.history] == ["b", "a"]
    assert r.last_payment.id == "b"
    stats = r.stats()
    assert stats.total_paid == 100
    assert stats.pending_validation == 100
    assert stats.current_due == 200
