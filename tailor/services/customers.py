from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from tailor.constants import CUSTOMER_INACTIVE_DAYS
from tailor.db import q, q1, u, x
from tailor.errors import NotFoundError, ValidationError
from tailor.sanitize import sanitize_input, sanitize_phone
from tailor.utils import clean_text, days_between, iso_now

logger = logging.getLogger(__name__)


@dataclass
class CustomerInput:
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    measurements_notes: Optional[str] = None
    preferred_contact: Optional[str] = None
    fabric_preferences: Optional[str] = None
    size_fit_notes: Optional[str] = None


_LIMITS = {
    "name": 100,
    "address": 200,
    "fabric_preferences": 500,
    "size_fit_notes": 500,
    "measurements_notes": 1000,
}


def _clean(data: CustomerInput) -> dict:
    row = {
        "name": sanitize_input(data.name),
        "phone": sanitize_phone(data.phone),
        "address": clean_text(sanitize_input(data.address)),
        "measurements_notes": clean_text(sanitize_input(data.measurements_notes)),
        "preferred_contact": clean_text(sanitize_input(data.preferred_contact)),
        "fabric_preferences": clean_text(sanitize_input(data.fabric_preferences)),
        "size_fit_notes": clean_text(sanitize_input(data.size_fit_notes)),
    }
    if not row["name"]:
        raise ValidationError("Customer name is required.")
    for field, limit in _LIMITS.items():
        if row[field] and len(row[field]) > limit:
            raise ValidationError(f"{field.replace('_', ' ').capitalize()} is too long (max {limit}).")
    return row


def get_customer(conn, customer_id: int):
    return q1(conn, "SELECT * FROM customers WHERE id=?", (int(customer_id),))


def require_customer(conn, customer_id: int):
    r = get_customer(conn, customer_id)
    if r is None:
        raise NotFoundError("Customer not found.")
    return r


def create_customer(conn, data: CustomerInput) -> int:
    row = _clean(data)
    now = iso_now()
    cid = x(
        conn,
        """
        INSERT INTO customers (
            name, phone, address, measurements_notes,
            preferred_contact, fabric_preferences, size_fit_notes,
            created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            row["name"], row["phone"], row["address"], row["measurements_notes"],
            row["preferred_contact"], row["fabric_preferences"], row["size_fit_notes"],
            now, now,
        ),
    )
    logger.info("Created customer %s (%s)", cid, row["name"])
    return cid


def update_customer(conn, customer_id: int, data: CustomerInput) -> None:
    row = _clean(data)
    n = u(
        conn,
        """
        UPDATE customers
        SET name=?, phone=?, address=?, measurements_notes=?,
            preferred_contact=?, fabric_preferences=?, size_fit_notes=?,
            updated_at=?
        WHERE id=?
        """,
        (
            row["name"], row["phone"], row["address"], row["measurements_notes"],
            row["preferred_contact"], row["fabric_preferences"], row["size_fit_notes"],
            iso_now(), int(customer_id),
        ),
    )
    if n == 0:
        raise NotFoundError("Customer not found.")


def delete_customer(conn, customer_id: int) -> None:
    # Jobs and sales keep their customer_id / customer_name as-is.
    n = u(conn, "DELETE FROM customers WHERE id=?", (int(customer_id),))
    if n == 0:
        raise NotFoundError("Customer not found.")
    logger.info("Deleted customer %s", customer_id)


def list_customers(conn):
    return q(conn, "SELECT id, name, phone FROM customers ORDER BY name")


def touch_order_dates(conn, customer_id: int, order_date: str) -> None:
    """Move last_order_date to `order_date`; fill first_order_date when empty."""
    c = q1(conn, "SELECT first_order_date FROM customers WHERE id=?", (int(customer_id),))
    if c is None:
        logger.warning("Order dates not updated: customer %s does not exist", customer_id)
        return
    if c["first_order_date"]:
        u(
            conn,
            "UPDATE customers SET last_order_date=?, updated_at=? WHERE id=?",
            (order_date, iso_now(), int(customer_id)),
        )
    else:
        u(
            conn,
            "UPDATE customers SET last_order_date=?, first_order_date=?, updated_at=? WHERE id=?",
            (order_date, order_date, iso_now(), int(customer_id)),
        )


def is_inactive(customer, today: Optional[date] = None) -> bool:
    """No order for more than CUSTOMER_INACTIVE_DAYS (customers who never ordered are not counted)."""
    last = customer["last_order_date"]
    if not last:
        return False
    return days_between(last, today or date.today()) > CUSTOMER_INACTIVE_DAYS


def list_customers_with_stats(conn):
    """Customers plus total_orders, lifetime_value and outstanding_balance, one query."""
    return q(
        conn,
        """
        WITH jobs AS (
          SELECT customer_id, COUNT(*) AS total_orders
          FROM sewing_jobs
          WHERE customer_id IS NOT NULL
          GROUP BY customer_id
        ),
        sales AS (
          SELECT customer_id,
                 COALESCE(SUM(amount_paid),0) AS lifetime_value,
                 COALESCE(SUM(balance),0) AS outstanding_balance
          FROM sales_summary
          WHERE customer_id IS NOT NULL
          GROUP BY customer_id
        )
        SELECT c.*,
               COALESCE(j.total_orders,0) AS total_orders,
               ROUND(COALESCE(s.lifetime_value,0),2) AS lifetime_value,
               ROUND(COALESCE(s.outstanding_balance,0),2) AS outstanding_balance
        FROM customers c
        LEFT JOIN jobs j ON j.customer_id = c.id
        LEFT JOIN sales s ON s.customer_id = c.id
        ORDER BY c.id DESC
        """,
    )


def customer_history(conn, customer_id: int) -> dict:
    """Drill-down: the customer row with their jobs and sales, newest first."""
    c = require_customer(conn, customer_id)
    jobs = q(
        conn,
        "SELECT * FROM sewing_jobs WHERE customer_id=? ORDER BY date DESC, id DESC",
        (int(customer_id),),
    )
    sales = q(
        conn,
        "SELECT * FROM sales_summary WHERE customer_id=? ORDER BY date DESC, id DESC",
        (int(customer_id),),
    )
    return {"customer": c, "jobs": jobs, "sales": sales}
