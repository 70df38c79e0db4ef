from __future__ import annotations

import logging

import streamlit as st

from tailor.config import get_settings
from tailor.db import ensure_schema, get_conn
from tailor.logging_utils import configure_logging
from tailor.ui import require_passcode

st.set_page_config(page_title="Tailor Back Office", page_icon="🧵", layout="wide")

settings = get_settings()
configure_logging(settings.data_dir)
logger = logging.getLogger("tailor.app")

require_passcode(settings)
ensure_schema(get_conn(settings.db_path))

pages = [
    st.Page("home.py", title="Dashboard", icon="🏠", default=True),
    st.Page("pages/1_🧵_Jobs.py", title="Sewing Jobs", icon="🧵"),
    st.Page("pages/2_👤_Customers.py", title="Customers", icon="👤"),
    st.Page("pages/3_📦_Inventory.py", title="Inventory", icon="📦"),
    st.Page("pages/4_🧾_Sales.py", title="Sales", icon="🧾"),
    st.Page("pages/5_💸_Expenses.py", title="Expenses", icon="💸"),
    st.Page("pages/6_📬_Receivables.py", title="Receivables", icon="📬"),
    st.Page("pages/7_💰_Collections.py", title="Collections", icon="💰"),
    st.Page("pages/8_📊_Reports.py", title="Reports", icon="📊"),
    st.Page("pages/9_⚙️_Settings.py", title="Settings", icon="⚙️"),
    st.Page("pages/10_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

try:
    st.navigation(pages).run()
except Exception:
    # Catch-all for errors a page did not handle.
    logger.exception("Unhandled error while rendering page")
    st.error("Something went wrong on this page.")
    c1, c2 = st.columns(2)
    if c1.button("Try again"):
        st.rerun()
    if c2.button("Go to dashboard"):
        st.switch_page("home.py")
