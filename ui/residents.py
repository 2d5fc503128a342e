import streamlit as st
import pandas as pd
from typing import List, Optional
from config import PAGE_SIZE
from dashboard import filter_residents, index_by_flat, map_transaction_for_display, paginate, transactions_frame
from models import Resident, Settings

FILTERS = {"All": "all", "Paid": "paid", "Unpaid": "unpaid", "Pending validation": "pending"}

def residents_section(residents: List[Resident]) -> Optional[Resident]:
    """Filterable resident list. Returns the resident picked for the history view."""
    c1, c2 = st.columns([2, 3])
    label = c1.radio("Show", list(FILTERS), horizontal=True, key="res_filter")
    query = c2.text_input("Search flat or name", key="res_search")
    data = filter_residents(residents, FILTERS[label], query)
    if not data:
        st.info("No flats match.")
        return None

    total_pages = paginate(data, 1, PAGE_SIZE).total_pages
    page_no = st.number_input("Page", min_value=1, max_value=total_pages, value=1, step=1, key="res_page")
    page = paginate(data, int(page_no), PAGE_SIZE)
    st.caption(f"Page {page.page} of {page.total_pages} · {page.total} flats")

    rows = []
    for r in page.items:
        rows.append({
            "Flat": r.flat,
            "Occupants": ", ".join(f"{o.name} ({o.type})" for o in r.occupants) or "—",
            "Due (₹)": round(r.total_pending_due, 2),
            "Pending Months": len(r.pending_months),
            "Status": "Paid" if r.is_paid else "Due",
            "Awaiting Validation": "Yes" if r.has_pending_validation else "",
        })
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    flat = st.selectbox("Open history for flat", options=[""] + [r.flat for r in page.items], key="res_open")
    if not flat:
        return None
    return next((r for r in page.items if r.flat == flat), None)

def history_section(resident: Resident, residents: List[Resident], settings: Settings) -> None:
    stats = resident.stats()
    st.markdown(f"### Flat {resident.flat}")
    c1, c2, c3 = st.columns(3)
    c1.metric("Total Paid", f"₹{stats.total_paid:,.0f}")
    c2.metric("In Review", f"₹{stats.pending_validation:,.0f}")
    c3.metric("Current Due", f"₹{stats.current_due:,.0f}")

    for o in resident.occupants:
        st.write(f"**{o.name}** · {o.type} · {o.phone or '—'} · {o.email or '—'}")

    pending = resident.get_pending_months(settings)
    if pending:
        st.markdown("#### Pending months")
        for m in pending:
            c1, c2, c3 = st.columns([2, 1, 1])
            c1.write(m.label)
            c2.write(f"₹{m.amount:,.0f}")
            if c3.button("Pay", key=f"pay_{resident.flat}_{m.value}"):
                st.session_state.txn_prefill = {
                    "flat_no": resident.flat, "category": "Monthly", "month": m.value, "amount": m.amount,
                }
                st.info("Open **Add Payment** to submit this month.")
    else:
        st.success("No pending months.")

    st.markdown("#### Payment history")
    lookup = index_by_flat(residents)
    views = [map_transaction_for_display(p, lookup) for p in resident.history]
    if views:
        st.dataframe(transactions_frame(views), use_container_width=True, hide_index=True)
    else:
        st.info("No payments recorded.")
