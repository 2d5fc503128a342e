# app.py
# Society Maintenance Tracker: sheet-backed flats, residents & payments
# Run: streamlit run app.py

import streamlit as st

from auth import AdminSession
from config import API_URL
from data import SocietyRepository
from ui import (
    overview_section,
    residents_section,
    history_section,
    add_payment_section,
    login_section,
    admin_section,
    trends_section,
)

st.set_page_config(page_title="Society Maintenance", layout="wide")

# Sidebar: API endpoint & refresh
st.sidebar.header("⚙️ Data Source")
api_url = st.sidebar.text_input("Sheet API URL", value=API_URL)

if "repo" not in st.session_state or st.session_state.repo.api_url != api_url.strip():
    st.session_state.repo = SocietyRepository(api_url)
    st.session_state.loaded = st.session_state.repo.fetch_data()
if "admin" not in st.session_state:
    st.session_state.admin = AdminSession()

repo: SocietyRepository = st.session_state.repo
admin: AdminSession = st.session_state.admin

def refresh() -> None:
    st.session_state.loaded = repo.fetch_data()

if st.sidebar.button("🔄 Refresh"):
    refresh()
if not st.session_state.loaded:
    st.sidebar.error("Could not load data. Showing the last snapshot, if any.")

settings = repo.settings
st.title(f"🏢 {settings.society_name}")

tab_home, tab_flats, tab_add, tab_admin = st.tabs(["Dashboard", "Flats", "Add Payment", "Admin"])

with tab_home:
    overview_section(repo.residents, repo.expenses, settings)
    st.markdown("---")
    trends_section(repo.residents)

with tab_flats:
    picked = residents_section(repo.residents)
    if picked is not None:
        st.markdown("---")
        history_section(picked, repo.residents, settings)

with tab_add:
    form = add_payment_section(repo.residents, is_admin=admin.is_logged_in)
    if form is not None:
        admin_user = admin.display_name if admin.is_logged_in else None
        if repo.add_payment(form, admin_user=admin_user):
            refresh()
            st.success("Payment recorded." if admin_user else "Payment submitted for validation.")
        else:
            st.error("Failed to submit payment.")

with tab_admin:
    if not admin.is_logged_in:
        login_section(admin, repo.admins)
    else:
        action = admin_section(admin, repo.residents)
        if action is not None:
            payment_id, verb = action
            if verb == "approve":
                ok = repo.approve_payment(payment_id, admin.display_name)
            else:
                ok = repo.reject_payment(payment_id, admin.display_name)
            if ok:
                refresh()
                st.toast(f"Payment {verb}d.")
                st.rerun()
            else:
                st.error("Failed to update status.")

st.markdown("---")
st.caption("Data lives in the society's Google Sheet; this app keeps nothing locally.")
