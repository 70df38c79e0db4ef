from __future__ import annotations

import logging
from typing import Optional

from tailor.constants import PAYMENT_METHODS
from tailor.db import q, x
from tailor.utils import iso_now, money

logger = logging.getLogger(__name__)


# Collections are append-only: no update or delete.

def record_collection(
    conn,
    *,
    date: str,
    customer_id: Optional[int],
    customer_name: str,
    amount: float,
    payment_method: str,
    notes: Optional[str] = None,
    sale_id: Optional[int] = None,
) -> int:
    now = iso_now()
    cid = x(
        conn,
        """
        INSERT INTO collections_log (
            date, customer_id, customer_name, amount, payment_method, notes, sale_id,
            created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            date,
            int(customer_id) if customer_id else None,
            customer_name,
            money(amount),
            payment_method,
            notes,
            int(sale_id) if sale_id else None,
            now,
            now,
        ),
    )
    logger.info("Logged collection %s: %.2f from %s via %s", cid, money(amount), customer_name, payment_method)
    return cid


def list_collections(
    conn,
    *,
    start: Optional[str] = None,
    end: Optional[str] = None,
    method: Optional[str] = None,
    search: str = "",
):
    sql = "SELECT * FROM collections_log WHERE 1=1"
    params: list = []
    if start:
        sql += " AND date >= ?"
        params.append(start)
    if end:
        sql += " AND date <= ?"
        params.append(end)
    if method:
        sql += " AND payment_method=?"
        params.append(method)
    if search.strip():
        sql += " AND LOWER(customer_name) LIKE ?"
        params.append(f"%{search.strip().lower()}%")
    sql += " ORDER BY date DESC, id DESC"
    return q(conn, sql, params)


def totals_by_method(rows) -> dict:
    out = {m: 0.0 for m in PAYMENT_METHODS}
    for r in rows:
        out[r["payment_method"]] = round(out.get(r["payment_method"], 0.0) + float(r["amount"]), 2)
    return out


def total_collected(rows) -> float:
    return round(sum(float(r["amount"]) for r in rows), 2)
