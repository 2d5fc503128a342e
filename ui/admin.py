import streamlit as st
from typing import List, Optional, Tuple
from auth import AdminSession
from dashboard import (
    admin_history_list, admin_history_totals, filter_transactions, pending_stats,
    pending_validation_list, transactions_frame,
)
from models import Admin, Resident

def login_section(session: AdminSession, admins: List[Admin]) -> None:
    st.markdown("### 🔐 Admin Login")
    with st.form("admin_login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        ok = st.form_submit_button("Login", type="primary")
    if ok:
        if session.sign_in(admins, username.strip(), password):
            st.rerun()
        else:
            st.error("Invalid Credentials")

def admin_section(session: AdminSession, residents: List[Resident]) -> Optional[Tuple[str, str]]:
    """
    Pending-validation queue and validated history.
    Returns (payment_id, 'approve'|'reject') when an action was clicked.
    """
    c1, c2 = st.columns([4, 1])
    c1.markdown(f"Signed in as **{session.display_name}**")
    if c2.button("Logout"):
        session.sign_out()
        st.rerun()

    tab_pending, tab_history = st.tabs(["Pending Validation", "Validated History"])
    action = None

    with tab_pending:
        queue = pending_validation_list(residents)
        summary = pending_stats(queue)
        st.caption(f"{summary.count} payment(s) awaiting validation · ₹{summary.total_amount:,.2f}")
        q = st.text_input("Search name, flat or remarks", key="search_pending")
        for v in filter_transactions(queue, q):
            with st.container(border=True):
                a, b, c, d = st.columns([3, 1, 1, 1])
                a.write(f"**Flat {v.display_flat}** · {v.display_resident_name} ({v.payer_type}) · "
                        f"{v.display_payment_for} · {v.full_date_time}")
                if v.payment.remarks:
                    a.caption(v.payment.remarks)
                b.write(f"₹{v.amount:,.2f} · {v.payment.method}")
                if c.button("Approve", key=f"approve_{v.id}", type="primary"):
                    action = (v.id, "approve")
                if d.button("Reject", key=f"reject_{v.id}"):
                    action = (v.id, "reject")

    with tab_history:
        totals = admin_history_totals(residents)
        st.caption(f"{totals.count} paid payment(s) · ₹{totals.total_amount:,.2f}")
        q = st.text_input("Search name, flat or validator", key="search_history")
        views = filter_transactions(admin_history_list(residents), q)
        if views:
            st.dataframe(transactions_frame(views), use_container_width=True, hide_index=True)
        else:
            st.info("Nothing validated yet.")

    return action
