from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tailor.constants import SALE_SEWING, SALE_TYPES
from tailor.db import q, q1, u, x
from tailor.errors import NotFoundError, ValidationError
from tailor.sanitize import sanitize_input
from tailor.utils import clean_text, iso_now, money

logger = logging.getLogger(__name__)


@dataclass
class SaleInput:
    date: str
    sale_type: str
    customer_name: str
    total_amount: float
    amount_paid: float = 0.0
    customer_id: Optional[int] = None
    notes: Optional[str] = None
    sewing_job_id: Optional[int] = None


def _clean(data: SaleInput) -> dict:
    name = sanitize_input(data.customer_name)
    if not data.date:
        raise ValidationError("Date is required.")
    if data.sale_type not in SALE_TYPES:
        raise ValidationError(f"Invalid sale type: {data.sale_type!r}.")
    if not name:
        raise ValidationError("Customer name is required.")
    if data.total_amount is None or float(data.total_amount) <= 0:
        raise ValidationError("Total amount must be a positive number.")
    if data.amount_paid is None or float(data.amount_paid) < 0:
        raise ValidationError("Amount paid must be a positive number.")
    notes = clean_text(sanitize_input(data.notes))
    if notes and len(notes) > 500:
        raise ValidationError("Notes are too long (max 500).")
    return {
        "date": str(data.date),
        "sale_type": data.sale_type,
        "customer_id": int(data.customer_id) if data.customer_id else None,
        "customer_name": name,
        "total_amount": money(data.total_amount),
        "amount_paid": money(data.amount_paid),
        "notes": notes,
        "sewing_job_id": int(data.sewing_job_id) if data.sewing_job_id else None,
    }


def insert_sale(conn, row: dict) -> int:
    now = iso_now()
    sale_id = x(
        conn,
        """
        INSERT INTO sales_summary (
            date, sale_type, customer_id, customer_name,
            total_amount, amount_paid, notes, sewing_job_id,
            created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            row["date"], row["sale_type"], row.get("customer_id"), row["customer_name"],
            money(row["total_amount"]), money(row["amount_paid"]),
            row.get("notes"), row.get("sewing_job_id"),
            now, now,
        ),
    )
    logger.info(
        "Recorded %s sale %s for %s: total=%.2f paid=%.2f",
        row["sale_type"], sale_id, row["customer_name"], money(row["total_amount"]), money(row["amount_paid"]),
    )
    return sale_id


def create_sale(conn, data: SaleInput) -> int:
    return insert_sale(conn, _clean(data))


def update_sale(conn, sale_id: int, data: SaleInput) -> None:
    row = _clean(data)
    n = u(
        conn,
        """
        UPDATE sales_summary
        SET date=?, sale_type=?, customer_id=?, customer_name=?,
            total_amount=?, amount_paid=?, notes=?, sewing_job_id=?, updated_at=?
        WHERE id=?
        """,
        (
            row["date"], row["sale_type"], row["customer_id"], row["customer_name"],
            row["total_amount"], row["amount_paid"], row["notes"], row["sewing_job_id"],
            iso_now(), int(sale_id),
        ),
    )
    if n == 0:
        raise NotFoundError("Sale not found.")


def set_sale_amounts(conn, sale_id: int, *, total_amount: Optional[float] = None, amount_paid: float) -> None:
    if total_amount is None:
        n = u(
            conn,
            "UPDATE sales_summary SET amount_paid=?, updated_at=? WHERE id=?",
            (money(amount_paid), iso_now(), int(sale_id)),
        )
    else:
        n = u(
            conn,
            "UPDATE sales_summary SET total_amount=?, amount_paid=?, updated_at=? WHERE id=?",
            (money(total_amount), money(amount_paid), iso_now(), int(sale_id)),
        )
    if n == 0:
        raise NotFoundError("Sale not found.")


def delete_sale(conn, sale_id: int) -> None:
    n = u(conn, "DELETE FROM sales_summary WHERE id=?", (int(sale_id),))
    if n == 0:
        raise NotFoundError("Sale not found.")
    logger.info("Deleted sale %s", sale_id)


def get_sale(conn, sale_id: int):
    return q1(conn, "SELECT * FROM sales_summary WHERE id=?", (int(sale_id),))


def sewing_sale_for_job(conn, job_id: int):
    return q1(
        conn,
        "SELECT * FROM sales_summary WHERE sewing_job_id=? AND sale_type=?",
        (int(job_id), SALE_SEWING),
    )


def list_sales(
    conn,
    *,
    sale_type: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    search: str = "",
):
    sql = "SELECT * FROM sales_summary WHERE 1=1"
    params: list = []
    if sale_type:
        sql += " AND sale_type=?"
        params.append(sale_type)
    if start:
        sql += " AND date >= ?"
        params.append(start)
    if end:
        sql += " AND date <= ?"
        params.append(end)
    if search.strip():
        sql += " AND LOWER(customer_name) LIKE ?"
        params.append(f"%{search.strip().lower()}%")
    sql += " ORDER BY date DESC, id DESC"
    return q(conn, sql, params)


def sales_totals(rows) -> dict:
    return {
        "total_amount": round(sum(float(r["total_amount"]) for r in rows), 2),
        "amount_paid": round(sum(float(r["amount_paid"]) for r in rows), 2),
        "balance": round(sum(float(r["balance"]) for r in rows), 2),
    }
