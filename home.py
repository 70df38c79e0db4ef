from __future__ import annotations

import pandas as pd
import streamlit as st

from tailor.config import get_settings
from tailor.db import ensure_schema, get_conn
from tailor.services.inventory import low_stock_items
from tailor.services.jobs import is_overdue
from tailor.services.reports import dashboard_metrics, recent_jobs
from tailor.ui import business_settings, fmt_money

settings = get_settings()
conn = get_conn(settings.db_path)
ensure_schema(conn)
brand = business_settings(conn)

st.title(f"🧵 {brand.business_name}")
st.caption(brand.business_motto)

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")

m = dashboard_metrics(conn)
sym = settings.currency_symbol

c1, c2, c3, c4 = st.columns(4)
c1.metric("Total Sales", fmt_money(m.total_sales, sym), help="All time sales")
c2.metric("Amount Collected", fmt_money(m.amount_collected, sym), help="Payments received")
c3.metric("Outstanding Balance", fmt_money(m.outstanding_balance, sym), help="Pending payments")
c4.metric("Profit", fmt_money(m.profit, sym), help="Collected minus expenses and material cost")

c5, c6, c7 = st.columns(3)
c5.metric("Expenses", fmt_money(m.total_expenses, sym))
c6.metric("Material Cost", fmt_money(m.material_cost, sym), help="Fabric & materials")
c7.metric("Inventory Value", fmt_money(m.inventory_value, sym))

st.divider()
left, right = st.columns(2, gap="large")

with left:
    st.subheader("Recent jobs")
    jobs = recent_jobs(conn)
    if jobs:
        df = pd.DataFrame([dict(r) for r in jobs])[
            ["date", "customer_name", "item_sewn", "total_charged", "balance", "status", "delivery_date_expected"]
        ]
        df["overdue"] = [is_overdue(r) for r in jobs]
        st.dataframe(df, use_container_width=True, hide_index=True)
    else:
        st.info("No jobs yet. Add one on the Sewing Jobs page, or load demo data in 🧪 Data Management.")

with right:
    st.subheader("Low stock")
    low = low_stock_items(conn)
    if low:
        st.dataframe(
            pd.DataFrame([dict(r) for r in low])[["item_name", "category", "quantity_left", "reorder_level"]],
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.caption("Stock levels look fine.")
