"""
Sewing jobs and the payment-status cascade.

A job's status is never chosen by the user; it follows the payment:

    Pending  amount_paid == 0 (or nothing charged yet)
    Part     0 < amount_paid < total_charged
    Done     amount_paid >= total_charged, total_charged > 0

Moving a job into Done (once per transition) stamps the actual delivery date,
creates or refreshes the job's single Sewing sale, and for a brand-new job cut
from our own stock, records the fabric sale and draws 1 unit from inventory.
Every save also moves the customer's order dates.

All writes of one save run in a single `atomic` unit of work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from tailor.constants import (
    DONE,
    FABRIC_SOURCES,
    FABRIC_UNITS_PER_JOB,
    FABRIC_YOURS,
    JOB_STATUSES,
    PART,
    PENDING,
    SALE_FABRIC,
    SALE_SEWING,
)
from tailor.db import atomic, q, q1, u, x
from tailor.errors import NotFoundError, ValidationError
from tailor.sanitize import sanitize_input, sanitize_phone
from tailor.services import customers, inventory, sales
from tailor.utils import clean_text, iso_now, money, to_date

logger = logging.getLogger(__name__)


@dataclass
class JobInput:
    date: str
    customer_name: str
    item_sewn: str
    material_cost: float
    labour_charge: float
    amount_paid: float = 0.0
    fabric_source: str = FABRIC_YOURS
    customer_id: Optional[int] = None
    phone: Optional[str] = None
    inventory_item_id: Optional[int] = None
    delivery_date_expected: Optional[str] = None
    delivery_date_actual: Optional[str] = None
    fitting_date: Optional[str] = None
    hours_spent: Optional[float] = None
    measurements_reference: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class JobSaveResult:
    job_id: int
    status: str
    total_charged: float
    amount_paid: float
    became_done: bool = False
    sale_id: Optional[int] = None
    fabric_sale_id: Optional[int] = None

    @property
    def balance(self) -> float:
        return round(self.total_charged - self.amount_paid, 2)


# -------------------------
# Status rules
# -------------------------

def is_fully_paid(total_charged: float, amount_paid: float) -> bool:
    # Compared in cents.
    return round(money(amount_paid) - money(total_charged), 2) >= 0


def derive_status(total_charged: float, amount_paid: float) -> str:
    total = money(total_charged)
    paid = money(amount_paid)
    if total > 0 and is_fully_paid(total, paid):
        return DONE
    if 0 < paid < total:
        return PART
    return PENDING


def is_overdue(job, today: Optional[date] = None) -> bool:
    if not job["delivery_date_expected"] or job["status"] == DONE:
        return False
    return to_date(job["delivery_date_expected"]) < (today or date.today())


def job_totals(rows) -> dict:
    return {
        "revenue": round(sum(float(r["total_charged"]) for r in rows), 2),
        "collected": round(sum(float(r["amount_paid"]) for r in rows), 2),
        "profit": round(sum(float(r["profit"]) for r in rows), 2),
    }


# -------------------------
# Reads
# -------------------------

def get_job(conn, job_id: int):
    return q1(conn, "SELECT * FROM sewing_jobs WHERE id=?", (int(job_id),))


def require_job(conn, job_id: int):
    r = get_job(conn, job_id)
    if r is None:
        raise NotFoundError("Job not found.")
    return r


def list_jobs(
    conn,
    *,
    search: str = "",
    status: Optional[str] = None,
    fabric_source: Optional[str] = None,
):
    sql = "SELECT * FROM sewing_jobs WHERE 1=1"
    params: list = []
    if status:
        sql += " AND status=?"
        params.append(status)
    if fabric_source:
        sql += " AND fabric_source=?"
        params.append(fabric_source)
    if search.strip():
        sql += " AND (LOWER(customer_name) LIKE ? OR LOWER(item_sewn) LIKE ?)"
        like = f"%{search.strip().lower()}%"
        params.extend([like, like])
    sql += " ORDER BY id DESC"
    return q(conn, sql, params)


# -------------------------
# Writes
# -------------------------

def _clean(data: JobInput) -> dict:
    name = sanitize_input(data.customer_name)
    item = sanitize_input(data.item_sewn)
    if not data.date:
        raise ValidationError("Date is required.")
    if not name:
        raise ValidationError("Customer name is required.")
    if not item:
        raise ValidationError("Item description is required.")
    if len(item) > 200:
        raise ValidationError("Item description is too long (max 200).")
    if data.fabric_source not in FABRIC_SOURCES:
        raise ValidationError(f"Invalid fabric source: {data.fabric_source!r}.")
    for label, v in (
        ("Material cost", data.material_cost),
        ("Labour charge", data.labour_charge),
        ("Amount paid", data.amount_paid),
    ):
        if v is None or float(v) < 0:
            raise ValidationError(f"{label} must be a positive number.")
    notes = clean_text(sanitize_input(data.notes))
    if notes and len(notes) > 1000:
        raise ValidationError("Notes are too long (max 1000).")
    for label, v in (
        ("Date", data.date),
        ("Expected delivery date", data.delivery_date_expected),
        ("Actual delivery date", data.delivery_date_actual),
        ("Fitting date", data.fitting_date),
    ):
        if clean_text(v) is None:
            continue
        try:
            to_date(clean_text(v))
        except ValueError:
            raise ValidationError(f"{label} must be a date like 2024-06-30.")

    # Stock is only drawn when we supply the fabric.
    item_id = data.inventory_item_id if data.fabric_source == FABRIC_YOURS else None

    return {
        "date": str(data.date),
        "customer_id": int(data.customer_id) if data.customer_id else None,
        "customer_name": name,
        "phone": sanitize_phone(data.phone),
        "fabric_source": data.fabric_source,
        "inventory_item_id": int(item_id) if item_id else None,
        "item_sewn": item,
        "material_cost": money(data.material_cost),
        "labour_charge": money(data.labour_charge),
        "amount_paid": money(data.amount_paid),
        "delivery_date_expected": clean_text(data.delivery_date_expected),
        "delivery_date_actual": clean_text(data.delivery_date_actual),
        "fitting_date": clean_text(data.fitting_date),
        "hours_spent": float(data.hours_spent) if data.hours_spent is not None else None,
        "measurements_reference": clean_text(sanitize_input(data.measurements_reference)),
        "notes": notes,
    }


_JOB_COLUMNS = (
    "date", "customer_id", "customer_name", "phone", "fabric_source", "inventory_item_id",
    "item_sewn", "material_cost", "labour_charge", "amount_paid", "status",
    "delivery_date_expected", "delivery_date_actual", "fitting_date",
    "hours_spent", "measurements_reference", "notes",
)


def _insert_job(conn, row: dict) -> int:
    now = iso_now()
    cols = ", ".join(_JOB_COLUMNS)
    marks = ", ".join("?" for _ in _JOB_COLUMNS)
    return x(
        conn,
        f"INSERT INTO sewing_jobs ({cols}, created_at, updated_at) VALUES ({marks}, ?, ?)",
        tuple(row[c] for c in _JOB_COLUMNS) + (now, now),
    )


def _update_job(conn, job_id: int, row: dict) -> None:
    sets = ", ".join(f"{c}=?" for c in _JOB_COLUMNS)
    u(
        conn,
        f"UPDATE sewing_jobs SET {sets}, updated_at=? WHERE id=?",
        tuple(row[c] for c in _JOB_COLUMNS) + (iso_now(), int(job_id)),
    )


def _sync_sewing_sale(conn, job_id: int, row: dict, total: float, paid: float) -> int:
    """Insert the job's Sewing sale, or bring an existing one in line."""
    existing = sales.sewing_sale_for_job(conn, job_id)
    if existing is None:
        return sales.insert_sale(
            conn,
            {
                "date": row["date"],
                "sale_type": SALE_SEWING,
                "customer_id": row["customer_id"],
                "customer_name": row["customer_name"],
                "total_amount": total,
                "amount_paid": paid,
                "notes": f"Auto-created from job: {row['item_sewn']}",
                "sewing_job_id": int(job_id),
            },
        )
    sales.set_sale_amounts(conn, int(existing["id"]), total_amount=total, amount_paid=paid)
    logger.info("Updated sale %s for job %s: total=%.2f paid=%.2f", existing["id"], job_id, total, paid)
    return int(existing["id"])


def _draw_fabric(conn, job_id: int, row: dict) -> int:
    """Fabric sale at unit cost (fully paid) plus a fixed 1-unit stock draw."""
    item = inventory.require_item(conn, row["inventory_item_id"])
    unit_cost = money(item["unit_cost"])
    sale_id = sales.insert_sale(
        conn,
        {
            "date": row["date"],
            "sale_type": SALE_FABRIC,
            "customer_id": row["customer_id"],
            "customer_name": row["customer_name"],
            "total_amount": unit_cost,
            "amount_paid": unit_cost,
            "notes": f"Fabric for job #{job_id}: {item['item_name']}",
            "sewing_job_id": None,
        },
    )
    inventory.consume_item(conn, int(item["id"]), used_on=row["date"], quantity=FABRIC_UNITS_PER_JOB)
    return sale_id


def save_job(conn, data: JobInput, *, job_id: Optional[int] = None, today: Optional[date] = None) -> JobSaveResult:
    """
    Create (job_id=None) or edit a job and run its cascade.
    Raises ValidationError / NotFoundError before anything is written.
    """
    row = _clean(data)
    total = money(row["material_cost"] + row["labour_charge"])
    paid = row["amount_paid"]
    status = derive_status(total, paid)
    row["status"] = status

    if row["inventory_item_id"] is not None:
        inventory.require_item(conn, row["inventory_item_id"])

    with atomic(conn):
        previous = require_job(conn, job_id) if job_id is not None else None
        became_done = status == DONE and (previous is None or previous["status"] != DONE)

        if became_done and not row["delivery_date_actual"]:
            row["delivery_date_actual"] = (today or date.today()).isoformat()

        if previous is None:
            job_id = _insert_job(conn, row)
            logger.info("Created job %s for %s: total=%.2f paid=%.2f status=%s",
                        job_id, row["customer_name"], total, paid, status)
        else:
            _update_job(conn, job_id, row)
            logger.info("Updated job %s: total=%.2f paid=%.2f status %s -> %s",
                        job_id, total, paid, previous["status"], status)

        result = JobSaveResult(
            job_id=int(job_id),
            status=status,
            total_charged=total,
            amount_paid=paid,
            became_done=became_done,
        )

        if became_done:
            result.sale_id = _sync_sewing_sale(conn, job_id, row, total, paid)
            if previous is None and row["inventory_item_id"] is not None:
                result.fabric_sale_id = _draw_fabric(conn, job_id, row)

        if row["customer_id"]:
            customers.touch_order_dates(conn, row["customer_id"], row["date"])

    return result


def complete_job(
    conn,
    job_id: int,
    *,
    amount_paid: Optional[float] = None,
    on: Optional[str] = None,
    today: Optional[date] = None,
) -> JobSaveResult:
    """
    Explicit "complete job" action: mark a fully-paid job Done, stamp the
    delivery date and settle its Sewing sale. Any failure undoes the status
    change together with everything else.
    """
    with atomic(conn):
        job = require_job(conn, job_id)
        if job["status"] == DONE:
            raise ValidationError("Job is already completed.")

        paid = money(job["amount_paid"] if amount_paid is None else amount_paid)
        total = money(job["total_charged"])
        if paid < 0:
            raise ValidationError("Amount paid must be a positive number.")
        if total <= 0:
            raise ValidationError("Job has nothing charged; set material cost or labour charge first.")
        if not is_fully_paid(total, paid):
            raise ValidationError(f"Job is not fully paid: {total - paid:,.2f} outstanding.")

        delivered = on or job["delivery_date_actual"] or (today or date.today()).isoformat()
        u(
            conn,
            "UPDATE sewing_jobs SET status=?, amount_paid=?, delivery_date_actual=?, updated_at=? WHERE id=?",
            (DONE, paid, delivered, iso_now(), int(job_id)),
        )
        logger.info("Completed job %s (was %s), delivered %s", job_id, job["status"], delivered)

        row = dict(job)
        sale_id = _sync_sewing_sale(conn, job_id, row, total, paid)

        if job["customer_id"]:
            customers.touch_order_dates(conn, job["customer_id"], job["date"])

    return JobSaveResult(
        job_id=int(job_id),
        status=DONE,
        total_charged=total,
        amount_paid=paid,
        became_done=True,
        sale_id=sale_id,
    )


def add_payment_to_job(conn, job_id: int, amount: float) -> str:
    """Add a collected amount to a job and re-derive its status. Returns the new status."""
    job = require_job(conn, job_id)
    new_paid = money(float(job["amount_paid"]) + float(amount))
    status = derive_status(job["total_charged"], new_paid)
    u(
        conn,
        "UPDATE sewing_jobs SET amount_paid=?, status=?, updated_at=? WHERE id=?",
        (new_paid, status, iso_now(), int(job_id)),
    )
    logger.info("Job %s paid %.2f -> %.2f, status %s -> %s",
                job_id, float(job["amount_paid"]), new_paid, job["status"], status)
    return status


def delete_job(conn, job_id: int) -> None:
    # Linked sales stay; they are reconciled by hand.
    n = u(conn, "DELETE FROM sewing_jobs WHERE id=?", (int(job_id),))
    if n == 0:
        raise NotFoundError("Job not found.")
    logger.info("Deleted job %s", job_id)


def status_counts(conn) -> dict:
    rows = q(conn, "SELECT status, COUNT(*) AS n FROM sewing_jobs GROUP BY status")
    out = {s: 0 for s in JOB_STATUSES}
    for r in rows:
        out[r["status"]] = int(r["n"])
    return out
