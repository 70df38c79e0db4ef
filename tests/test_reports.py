from __future__ import annotations

from datetime import date

import pytest

from tailor.services.expenses import ExpenseInput, create_expense
from tailor.services.inventory import InventoryItemInput, create_item
from tailor.services.jobs import save_job
from tailor.services.reports import (
    REPORT_COLUMNS,
    available_years,
    dashboard_metrics,
    monthly_report,
    recent_jobs,
    report_months,
    year_totals,
)
from tailor.services.sales import SaleInput, create_sale


@pytest.fixture
def march_activity(conn, make_job, today):
    # Sewing: job paid in full -> Sewing sale 5000/5000, material 2000
    save_job(conn, make_job(date="2024-03-05", amount_paid=5000.0), today=today)
    create_expense(
        conn, ExpenseInput(date="2024-03-09", expense_type="Transport", description="Market trip", amount=500.0)
    )
    create_sale(
        conn,
        SaleInput(date="2024-03-12", sale_type="Fabric", customer_name="Walk-in", total_amount=3000.0, amount_paid=1000.0),
    )
    create_item(
        conn,
        InventoryItemInput(date="2024-03-02", item_name="Lace", quantity_bought=10, unit_cost=100.0),
    )
    # Outside the year
    create_sale(
        conn,
        SaleInput(date="2023-12-30", sale_type="Other", customer_name="Walk-in", total_amount=999.0, amount_paid=999.0),
    )


def test_current_year_is_truncated_newest_first(conn):
    report = monthly_report(conn, 2024, today=date(2024, 6, 15))

    assert list(report.columns) == REPORT_COLUMNS
    assert list(report["month"]) == ["2024-06", "2024-05", "2024-04", "2024-03", "2024-02", "2024-01"]


def test_past_year_shows_all_months(conn):
    report = monthly_report(conn, 2023, today=date(2024, 6, 15))
    assert len(report) == 12
    assert report["month"].iloc[0] == "2023-12"
    assert report["month"].iloc[-1] == "2023-01"


def test_empty_database_reports_zeros(conn):
    report = monthly_report(conn, 2024, today=date(2024, 2, 1))
    assert len(report) == 2
    assert report.drop(columns=["month"]).to_numpy().sum() == 0


def test_profit_split(conn, march_activity):
    report = monthly_report(conn, 2024, today=date(2024, 6, 15))
    march = report.set_index("month").loc["2024-03"]

    assert march["total_sales"] == 8000.0
    assert march["amount_collected"] == 6000.0
    assert march["outstanding"] == 2000.0
    assert march["material_cost"] == 2000.0
    assert march["expenses"] == 500.0
    assert march["stock_purchased"] == 1000.0
    assert march["sewing_profit"] == 2500.0
    assert march["inventory_profit"] == 1000.0
    assert march["total_profit"] == 3500.0

    april = report.set_index("month").loc["2024-04"]
    assert april["total_sales"] == 0.0


def test_year_totals(conn, march_activity):
    totals = year_totals(monthly_report(conn, 2024, today=date(2024, 6, 15)))
    assert totals["total_sales"] == 8000.0
    assert totals["total_profit"] == 3500.0
    assert "month" not in totals


def test_report_months_and_years():
    assert report_months(2024, date(2024, 3, 31)) == ["2024-01", "2024-02", "2024-03"]
    assert len(report_months(2022, date(2024, 3, 31))) == 12
    assert available_years(date(2024, 1, 1)) == [2022, 2023, 2024, 2025]


def test_dashboard_metrics(conn, march_activity):
    m = dashboard_metrics(conn)

    assert m.total_sales == 8999.0
    assert m.amount_collected == 6999.0
    assert m.outstanding_balance == 2000.0
    assert m.total_expenses == 500.0
    assert m.material_cost == 2000.0
    assert m.profit == 4499.0
    assert m.inventory_value == 1000.0


def test_report_profit_agrees_with_dashboard(conn, make_job, fabric_id, today):
    # Fabric drawn from stock is costed once, through the job's material cost
    save_job(
        conn,
        make_job(fabric_source="Yours", inventory_item_id=fabric_id, amount_paid=5000.0),
        today=today,
    )

    report = monthly_report(conn, 2024, today=today)
    totals = year_totals(report)
    june = report.set_index("month").loc["2024-06"]

    assert june["amount_collected"] == 9500.0
    assert june["stock_purchased"] == 45000.0
    assert june["total_profit"] == 7500.0
    assert totals["total_profit"] == dashboard_metrics(conn).profit


def test_recent_jobs_newest_first(conn, make_job, today):
    for item in ("Agbada", "Kaftan", "Gown"):
        save_job(conn, make_job(item_sewn=item), today=today)

    assert [r["item_sewn"] for r in recent_jobs(conn, limit=2)] == ["Gown", "Kaftan"]
