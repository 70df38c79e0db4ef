from __future__ import annotations

import sqlite3

import pytest

from tailor.errors import NotFoundError, ValidationError
from tailor.services.expenses import (
    ExpenseInput,
    create_expense,
    delete_expense,
    expense_totals_by_type,
    get_expense,
    list_expenses,
    update_expense,
)
from tailor.services.sales import (
    SaleInput,
    create_sale,
    delete_sale,
    get_sale,
    insert_sale,
    list_sales,
    sales_totals,
    set_sale_amounts,
    update_sale,
)


def _sale(**overrides) -> SaleInput:
    fields = dict(
        date="2024-06-01", sale_type="Fabric", customer_name="Walk-in", total_amount=1000.0, amount_paid=0.0
    )
    fields.update(overrides)
    return SaleInput(**fields)


# ---------- sales ----------

def test_sale_balance_is_computed(conn):
    sale_id = create_sale(conn, _sale(total_amount=1000.004, amount_paid=250.0))
    row = get_sale(conn, sale_id)
    assert row["total_amount"] == 1000.0
    assert row["balance"] == 750.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"total_amount": 0.0},
        {"total_amount": -5.0},
        {"amount_paid": -1.0},
        {"sale_type": "Barter"},
        {"customer_name": "<>"},
        {"date": ""},
    ],
)
def test_invalid_sale(conn, overrides):
    with pytest.raises(ValidationError):
        create_sale(conn, _sale(**overrides))
    assert list_sales(conn) == []


def test_one_sewing_sale_per_job(conn):
    row = {
        "date": "2024-06-01", "sale_type": "Sewing", "customer_name": "Walk-in",
        "total_amount": 100.0, "amount_paid": 0.0, "sewing_job_id": 7,
    }
    insert_sale(conn, row)
    with pytest.raises(sqlite3.IntegrityError):
        insert_sale(conn, row)
    conn.rollback()

    # other sale types may point at the same job
    insert_sale(conn, {**row, "sale_type": "Fabric"})


def test_update_amounts_and_delete(conn):
    sale_id = create_sale(conn, _sale())
    update_sale(conn, sale_id, _sale(customer_name="Bola", amount_paid=400.0))
    assert get_sale(conn, sale_id)["customer_name"] == "Bola"

    set_sale_amounts(conn, sale_id, amount_paid=1000.0)
    assert get_sale(conn, sale_id)["balance"] == 0.0
    set_sale_amounts(conn, sale_id, total_amount=1500.0, amount_paid=1000.0)
    assert get_sale(conn, sale_id)["balance"] == 500.0

    delete_sale(conn, sale_id)
    with pytest.raises(NotFoundError):
        delete_sale(conn, sale_id)
    with pytest.raises(NotFoundError):
        set_sale_amounts(conn, sale_id, amount_paid=1.0)
    with pytest.raises(NotFoundError):
        update_sale(conn, sale_id, _sale())


def test_list_sales_filters_and_totals(conn):
    create_sale(conn, _sale(date="2024-05-01", customer_name="Adaeze", total_amount=1000.0, amount_paid=1000.0))
    create_sale(conn, _sale(date="2024-06-01", sale_type="Other", customer_name="Bola", total_amount=500.0))
    create_sale(conn, _sale(date="2024-06-20", customer_name="Chioma", total_amount=200.0, amount_paid=50.0))

    rows = list_sales(conn)
    assert [r["customer_name"] for r in rows] == ["Chioma", "Bola", "Adaeze"]
    assert [r["customer_name"] for r in list_sales(conn, sale_type="Other")] == ["Bola"]
    assert [r["customer_name"] for r in list_sales(conn, start="2024-06-01", end="2024-06-10")] == ["Bola"]
    assert [r["customer_name"] for r in list_sales(conn, search="ADA")] == ["Adaeze"]
    assert sales_totals(rows) == {"total_amount": 1700.0, "amount_paid": 1050.0, "balance": 650.0}


# ---------- expenses ----------

def _expense(**overrides) -> ExpenseInput:
    fields = dict(date="2024-06-01", expense_type="Transport", description="Market trip", amount=2500.0)
    fields.update(overrides)
    return ExpenseInput(**fields)


@pytest.mark.parametrize(
    "overrides",
    [
        {"amount": 0.0},
        {"expense_type": "Rent"},
        {"description": "  "},
        {"payment_method": "Cheque"},
    ],
)
def test_invalid_expense(conn, overrides):
    with pytest.raises(ValidationError):
        create_expense(conn, _expense(**overrides))
    assert list_expenses(conn) == []


def test_expense_crud_and_totals(conn):
    a = create_expense(conn, _expense(payment_method="Cash", vendor_payee="Danfo driver"))
    create_expense(conn, _expense(date="2024-06-05", expense_type="Repair", description="Machine", amount=7000.0))
    create_expense(conn, _expense(date="2024-07-01", amount=500.0))

    assert get_expense(conn, a)["payment_method"] == "Cash"
    assert [r["description"] for r in list_expenses(conn, search="danfo")] == ["Market trip"]
    assert len(list_expenses(conn, expense_type="Transport")) == 2
    assert len(list_expenses(conn, start="2024-06-01", end="2024-06-30")) == 2

    totals = expense_totals_by_type(list_expenses(conn))
    assert totals["Transport"] == 3000.0
    assert totals["Repair"] == 7000.0
    assert totals["Other"] == 0.0

    update_expense(conn, a, _expense(amount=3000.0, is_fixed=True))
    row = get_expense(conn, a)
    assert row["amount"] == 3000.0
    assert row["is_fixed"] == 1

    delete_expense(conn, a)
    with pytest.raises(NotFoundError):
        delete_expense(conn, a)
