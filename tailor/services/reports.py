from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

import pandas as pd

from tailor.constants import RECENT_JOBS_LIMIT, SALE_SEWING
from tailor.db import q, q1
from tailor.services.inventory import inventory_value

REPORT_COLUMNS = [
    "month",
    "total_sales",
    "amount_collected",
    "outstanding",
    "material_cost",
    "expenses",
    "stock_purchased",
    "sewing_profit",
    "inventory_profit",
    "total_profit",
]


@dataclass
class DashboardMetrics:
    total_sales: float
    amount_collected: float
    outstanding_balance: float
    total_expenses: float
    material_cost: float
    profit: float
    inventory_value: float


def _frame(rows, columns: list[str]) -> pd.DataFrame:
    df = pd.DataFrame([dict(r) for r in rows], columns=columns)
    for col in columns:
        if col not in ("date", "sale_type"):
            df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0)
    df["month"] = df["date"].astype(str).str[:7]
    return df


def _monthly_sum(df: pd.DataFrame, col: str, months: list[str]) -> pd.Series:
    if df.empty:
        return pd.Series(0.0, index=months)
    return df.groupby("month")[col].sum().reindex(months, fill_value=0.0).astype(float)


def report_months(year: int, today: Optional[date] = None) -> list[str]:
    """Months of `year` to show; the current year stops at the current month."""
    today = today or date.today()
    last = today.month if int(year) == today.year else 12
    return [f"{int(year):04d}-{m:02d}" for m in range(1, last + 1)]


def available_years(today: Optional[date] = None) -> list[int]:
    y = (today or date.today()).year
    return list(range(y - 2, y + 2))


def monthly_report(conn, year: int, *, today: Optional[date] = None) -> pd.DataFrame:
    """
    One row per month of `year`, newest first.

    sewing_profit    = collected on Sewing sales - job material cost - expenses
    inventory_profit = collected on Fabric/Other sales
    total_profit     = sewing_profit + inventory_profit
                     = collected - material cost - expenses

    Stock bought is shown in stock_purchased and left out of profit; fabric
    used on a job is already in its material cost.
    """
    months = report_months(year, today)
    start, end = f"{int(year):04d}-01-01", f"{int(year):04d}-12-31"

    sales = _frame(
        q(
            conn,
            "SELECT date, sale_type, total_amount, amount_paid, balance FROM sales_summary WHERE date BETWEEN ? AND ?",
            (start, end),
        ),
        ["date", "sale_type", "total_amount", "amount_paid", "balance"],
    )
    expenses = _frame(
        q(conn, "SELECT date, amount FROM expenses WHERE date BETWEEN ? AND ?", (start, end)),
        ["date", "amount"],
    )
    jobs = _frame(
        q(conn, "SELECT date, material_cost FROM sewing_jobs WHERE date BETWEEN ? AND ?", (start, end)),
        ["date", "material_cost"],
    )
    stock = _frame(
        q(conn, "SELECT date, total_cost FROM inventory_items WHERE date BETWEEN ? AND ?", (start, end)),
        ["date", "total_cost"],
    )

    sewing_sales = sales[sales["sale_type"] == SALE_SEWING]
    other_sales = sales[sales["sale_type"] != SALE_SEWING]

    out = pd.DataFrame(index=months)
    out["total_sales"] = _monthly_sum(sales, "total_amount", months)
    out["amount_collected"] = _monthly_sum(sales, "amount_paid", months)
    out["outstanding"] = _monthly_sum(sales, "balance", months)
    out["material_cost"] = _monthly_sum(jobs, "material_cost", months)
    out["expenses"] = _monthly_sum(expenses, "amount", months)
    out["stock_purchased"] = _monthly_sum(stock, "total_cost", months)
    out["sewing_profit"] = (
        _monthly_sum(sewing_sales, "amount_paid", months) - out["material_cost"] - out["expenses"]
    )
    out["inventory_profit"] = _monthly_sum(other_sales, "amount_paid", months)
    out["total_profit"] = out["sewing_profit"] + out["inventory_profit"]

    out = out.round(2)
    out.index.name = "month"
    out = out.reset_index().sort_values("month", ascending=False).reset_index(drop=True)
    return out[REPORT_COLUMNS]


def year_totals(report: pd.DataFrame) -> dict:
    return {c: round(float(report[c].sum()), 2) for c in REPORT_COLUMNS if c != "month"}


def dashboard_metrics(conn) -> DashboardMetrics:
    s = q1(
        conn,
        """
        SELECT COALESCE(SUM(total_amount),0) AS total_sales,
               COALESCE(SUM(amount_paid),0) AS collected,
               COALESCE(SUM(balance),0) AS outstanding
        FROM sales_summary
        """,
    )
    e = q1(conn, "SELECT COALESCE(SUM(amount),0) AS v FROM expenses")
    j = q1(conn, "SELECT COALESCE(SUM(material_cost),0) AS v FROM sewing_jobs")

    collected = float(s["collected"])
    expenses = float(e["v"])
    material = float(j["v"])
    return DashboardMetrics(
        total_sales=round(float(s["total_sales"]), 2),
        amount_collected=round(collected, 2),
        outstanding_balance=round(float(s["outstanding"]), 2),
        total_expenses=round(expenses, 2),
        material_cost=round(material, 2),
        profit=round(collected - expenses - material, 2),
        inventory_value=inventory_value(conn),
    )


def recent_jobs(conn, limit: int = RECENT_JOBS_LIMIT):
    return q(conn, "SELECT * FROM sewing_jobs ORDER BY id DESC LIMIT ?", (int(limit),))
