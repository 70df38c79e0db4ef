from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tailor.constants import EXPENSE_TYPES, PAYMENT_METHODS
from tailor.db import q, q1, u, x
from tailor.errors import NotFoundError, ValidationError
from tailor.sanitize import sanitize_input
from tailor.utils import clean_text, iso_now, money

logger = logging.getLogger(__name__)


@dataclass
class ExpenseInput:
    date: str
    expense_type: str
    description: str
    amount: float
    vendor_payee: Optional[str] = None
    payment_method: Optional[str] = None
    is_fixed: bool = False
    job_link: Optional[str] = None


def _clean(data: ExpenseInput) -> dict:
    desc = sanitize_input(data.description)
    if not data.date:
        raise ValidationError("Date is required.")
    if data.expense_type not in EXPENSE_TYPES:
        raise ValidationError(f"Invalid expense type: {data.expense_type!r}.")
    if not desc:
        raise ValidationError("Description is required.")
    if len(desc) > 200:
        raise ValidationError("Description is too long (max 200).")
    if data.amount is None or float(data.amount) <= 0:
        raise ValidationError("Amount must be a positive number.")
    method = clean_text(data.payment_method)
    if method is not None and method not in PAYMENT_METHODS:
        raise ValidationError(f"Invalid payment method: {method!r}.")
    vendor = clean_text(sanitize_input(data.vendor_payee))
    if vendor and len(vendor) > 100:
        raise ValidationError("Vendor name is too long (max 100).")
    return {
        "date": str(data.date),
        "expense_type": data.expense_type,
        "description": desc,
        "amount": money(data.amount),
        "vendor_payee": vendor,
        "payment_method": method,
        "is_fixed": 1 if data.is_fixed else 0,
        "job_link": clean_text(data.job_link),
    }


def create_expense(conn, data: ExpenseInput) -> int:
    row = _clean(data)
    now = iso_now()
    eid = x(
        conn,
        """
        INSERT INTO expenses (
            date, expense_type, description, amount, vendor_payee,
            payment_method, is_fixed, job_link, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            row["date"], row["expense_type"], row["description"], row["amount"], row["vendor_payee"],
            row["payment_method"], row["is_fixed"], row["job_link"], now, now,
        ),
    )
    logger.info("Recorded expense %s: %s %.2f", eid, row["expense_type"], row["amount"])
    return eid


def update_expense(conn, expense_id: int, data: ExpenseInput) -> None:
    row = _clean(data)
    n = u(
        conn,
        """
        UPDATE expenses
        SET date=?, expense_type=?, description=?, amount=?, vendor_payee=?,
            payment_method=?, is_fixed=?, job_link=?, updated_at=?
        WHERE id=?
        """,
        (
            row["date"], row["expense_type"], row["description"], row["amount"], row["vendor_payee"],
            row["payment_method"], row["is_fixed"], row["job_link"], iso_now(), int(expense_id),
        ),
    )
    if n == 0:
        raise NotFoundError("Expense not found.")


def delete_expense(conn, expense_id: int) -> None:
    n = u(conn, "DELETE FROM expenses WHERE id=?", (int(expense_id),))
    if n == 0:
        raise NotFoundError("Expense not found.")
    logger.info("Deleted expense %s", expense_id)


def get_expense(conn, expense_id: int):
    return q1(conn, "SELECT * FROM expenses WHERE id=?", (int(expense_id),))


def list_expenses(
    conn,
    *,
    expense_type: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    search: str = "",
):
    sql = "SELECT * FROM expenses WHERE 1=1"
    params: list = []
    if expense_type:
        sql += " AND expense_type=?"
        params.append(expense_type)
    if start:
        sql += " AND date >= ?"
        params.append(start)
    if end:
        sql += " AND date <= ?"
        params.append(end)
    if search.strip():
        sql += " AND (LOWER(COALESCE(description,'')) LIKE ? OR LOWER(COALESCE(vendor_payee,'')) LIKE ?)"
        like = f"%{search.strip().lower()}%"
        params.extend([like, like])
    sql += " ORDER BY date DESC, id DESC"
    return q(conn, sql, params)


def expense_totals_by_type(rows) -> dict:
    out = {t: 0.0 for t in EXPENSE_TYPES}
    for r in rows:
        out[r["expense_type"]] = round(out[r["expense_type"]] + float(r["amount"]), 2)
    return out
