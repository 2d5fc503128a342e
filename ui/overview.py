import streamlit as st
import pandas as pd
from typing import List
from dashboard import dashboard_stats, transactions_frame
from models import Expense, Resident, Settings

def overview_section(residents: List[Resident], expenses: List[Expense], settings: Settings) -> None:
    stats = dashboard_stats(residents, expenses)
    st.caption(f"{settings.society_address} · Monthly fee ₹{settings.monthly_fee:,.2f} from {settings.start_month}")

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Flats", stats.flats_count)
    c2.metric("Owners / Tenants", f"{stats.owners_count} / {stats.tenants_count}")
    c3.metric("Total Collection", f"₹{stats.total_collection:,.0f}")
    c4.metric("Cash in Hand", f"₹{stats.cash_in_hand:,.0f}", delta=f"-₹{stats.total_spent:,.0f} spent")

    st.markdown("#### Collections by target month")
    st.dataframe(pd.DataFrame([
        {"Kind": "Monthly", stats.current_month_label: stats.monthly_current,
         stats.last_month_label: stats.monthly_last, stats.prev_prev_month_label: stats.monthly_prev_prev,
         "Total": stats.monthly_total},
        {"Kind": "Ad-hoc", stats.current_month_label: stats.adhoc_current,
         stats.last_month_label: stats.adhoc_last, stats.prev_prev_month_label: stats.adhoc_prev_prev,
         "Total": stats.adhoc_total},
    ]), use_container_width=True, hide_index=True)

    st.markdown("#### Cash flow by payment date")
    labels = {
        "today": "Today", "this_week": "This Week", "this_month": stats.current_month_label,
        "last_month": stats.last_month_label, "prev_prev_month": stats.prev_prev_month_label,
    }
    st.dataframe(pd.DataFrame([
        {"Period": label, "Received (₹)": stats.received[k], "Spent (₹)": stats.spent[k],
         "Net (₹)": stats.cash_in_hand_by_bucket[k]}
        for k, label in labels.items()
    ]), use_container_width=True, hide_index=True)
    st.caption(f"Awaiting validation: **₹{stats.pending_validation_total:,.2f}**")

    if stats.adhoc_breakdown:
        st.markdown("#### Ad-hoc funds")
        st.dataframe(pd.DataFrame([
            {"Title": s.title, "Collected (₹)": s.collected, "Spent (₹)": s.spent,
             "Balance (₹)": s.collected - s.spent, "Last Activity": s.last_activity}
            for s in stats.adhoc_breakdown.values()
        ]), use_container_width=True, hide_index=True)

    st.markdown("#### Recent transactions")
    if stats.recent_transactions:
        st.dataframe(transactions_frame(stats.recent_transactions), use_container_width=True, hide_index=True)
    else:
        st.info("No transactions yet.")
