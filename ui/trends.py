import streamlit as st
import pandas as pd
from typing import List
from dashboard import monthly_collection_frame
from models import Resident

WINDOWS = {"6 months": 6, "12 months": 12, "Since start": None}

def trends_section(residents: List[Resident]) -> None:
    collections = monthly_collection_frame(residents)
    if collections is None or collections.empty:
        st.info("No collections to show trends yet.")
        return

    c1, c2 = st.columns([2, 3])
    span = WINDOWS[c1.selectbox("Period", list(WINDOWS), index=1)]
    kinds = c2.multiselect("Collections", list(collections.columns), default=list(collections.columns))
    if not kinds:
        st.info("Pick monthly dues, ad-hoc collections, or both.")
        return
    if span is not None:
        collections = collections.tail(span)

    st.subheader("📊 Collections by Month")
    st.bar_chart(collections[kinds])

    table = collections[kinds].copy()
    table["Total"] = table.sum(axis=1)
    # Empty months make the ratio infinite
    table["Change %"] = table["Total"].pct_change().replace([float("inf"), float("-inf")], pd.NA) * 100.0

    fmt = {c: "₹{:,.0f}" for c in table.columns}
    fmt["Change %"] = "{:+.1f}%"
    st.dataframe(table.style.format(fmt, na_rep="-"), use_container_width=True)
