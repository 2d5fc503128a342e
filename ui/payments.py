import streamlit as st
from datetime import datetime
from typing import List, Optional
from models import Resident

CATEGORIES = ["Monthly", "Adhoc", "Donation", "Penalty"]
METHODS = ["UPI", "Cash", "Bank Transfer", "Cheque"]

def add_payment_section(residents: List[Resident], is_admin: bool = False) -> Optional[dict]:
    """Payment submission form. Returns the submitted form values, or None."""
    prefill = st.session_state.get("txn_prefill") or {}
    flats = [r.flat for r in residents]
    if not flats:
        st.info("No flats loaded yet.")
        return None

    default_flat = flats.index(prefill["flat_no"]) if prefill.get("flat_no") in flats else 0
    default_cat = CATEGORIES.index(prefill.get("category", "Monthly"))
    now = datetime.now()

    with st.form("payment_form", clear_on_submit=True):
        c1, c2 = st.columns(2)
        flat_no = c1.selectbox("Flat", options=flats, index=default_flat)
        category = c2.selectbox("Category", options=CATEGORIES, index=default_cat)
        title = c1.text_input("Title (ad-hoc payments)")
        month = c2.text_input("For month (YYYY-MM)", value=prefill.get("month", now.strftime("%Y-%m")))
        amount = c1.number_input("Amount (₹)", min_value=0.0, value=float(prefill.get("amount", 0.0)),
                                 step=1.0, format="%.2f")
        method = c2.selectbox("Payment method", options=METHODS)
        paid_on = c1.date_input("Payment date", value=now.date())
        paid_at = c2.time_input("Payment time", value=now.time().replace(second=0, microsecond=0))
        remarks = st.text_input("Remarks")
        if is_admin:
            st.caption("Entered by an admin: recorded as **Paid** directly.")
        ok = st.form_submit_button("Submit payment")

    if not ok:
        return None
    if amount <= 0:
        st.error("Amount must be greater than zero.")
        return None
    st.session_state.txn_prefill = None
    return {
        "flat_no": flat_no,
        "category": category,
        "title": title.strip(),
        "month": month.strip(),
        "amount": round(float(amount), 2),
        "payment_date": datetime.combine(paid_on, paid_at).strftime("%Y-%m-%dT%H:%M"),
        "method": method,
        "remarks": remarks.strip(),
    }
