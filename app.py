from __future__ import annotations

import streamlit as st

st.set_page_config(page_title="Restock", page_icon="📦", layout="wide")

pages = [
    st.Page("home.py", title="Home", icon="🏠"),
    st.Page("pages/1_📋_Items.py", title="Items", icon="📋"),
    st.Page("pages/2_🧮_Replenishment_Planner.py", title="Replenishment Planner", icon="🧮"),
    st.Page("pages/3_🧾_Purchase_Orders.py", title="Purchase Orders", icon="🧾"),
    st.Page("pages/4_📥_Receiving.py", title="Receiving", icon="📥"),
    st.Page("pages/5_🧪_Data_Management.py", title="Data Management", icon="🧪"),
    st.Page("pages/6_📊_Activity.py", title="Activity", icon="📊"),
]

st.navigation(pages).run()
