from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from tailor.constants import PAYMENT_METHODS, RECEIVABLE_OVERDUE_DAYS
from tailor.db import atomic, q
from tailor.errors import ValidationError
from tailor.sanitize import sanitize_input
from tailor.services import jobs, sales
from tailor.services.collections import record_collection
from tailor.utils import clean_text, days_between, money, to_date

logger = logging.getLogger(__name__)


@dataclass
class Receivable:
    customer_id: Optional[int]
    customer_name: str
    phone: Optional[str]
    total_outstanding: float
    last_sale_date: str
    days_since_sale: int = 0

    @property
    def is_overdue(self) -> bool:
        return self.days_since_sale > RECEIVABLE_OVERDUE_DAYS


@dataclass
class Allocation:
    sale_id: int
    amount: float
    sewing_job_id: Optional[int] = None
    job_status: Optional[str] = None


@dataclass
class PaymentResult:
    collection_id: int
    amount: float
    allocations: list[Allocation] = field(default_factory=list)


def _customer_where(customer_id: Optional[int], customer_name: str) -> tuple[str, tuple]:
    # Sales without a customer id are matched by name only among id-less rows.
    if customer_id:
        return "customer_id = ?", (int(customer_id),)
    return "customer_id IS NULL AND customer_name = ?", (customer_name,)


def list_receivables(conn, *, today: Optional[date] = None) -> list[Receivable]:
    today = today or date.today()
    rows = q(
        conn,
        """
        SELECT id, date, customer_id, customer_name, balance
        FROM sales_summary
        WHERE balance > 0
        ORDER BY date ASC, id ASC
        """,
    )

    grouped: dict[tuple, Receivable] = {}
    for r in rows:
        key = ("id", int(r["customer_id"])) if r["customer_id"] is not None else ("name", r["customer_name"])
        rec = grouped.get(key)
        if rec is None:
            grouped[key] = Receivable(
                customer_id=int(r["customer_id"]) if r["customer_id"] is not None else None,
                customer_name=str(r["customer_name"]),
                phone=None,
                total_outstanding=float(r["balance"]),
                last_sale_date=str(r["date"]),
            )
        else:
            rec.total_outstanding += float(r["balance"])
            if to_date(r["date"]) > to_date(rec.last_sale_date):
                rec.last_sale_date = str(r["date"])

    out = list(grouped.values())

    # One query for every phone number.
    ids = sorted({rec.customer_id for rec in out if rec.customer_id is not None})
    phones: dict[int, Optional[str]] = {}
    if ids:
        marks = ",".join("?" for _ in ids)
        for c in q(conn, f"SELECT id, phone FROM customers WHERE id IN ({marks})", ids):
            phones[int(c["id"])] = c["phone"]

    for rec in out:
        rec.total_outstanding = money(rec.total_outstanding)
        if rec.customer_id is not None:
            rec.phone = phones.get(rec.customer_id)
        rec.days_since_sale = days_between(rec.last_sale_date, today)

    out.sort(key=lambda rec: rec.total_outstanding, reverse=True)
    return out


def receivables_summary(rows: list[Receivable]) -> dict:
    return {
        "total_outstanding": money(sum(r.total_outstanding for r in rows)),
        "customers": len(rows),
        "overdue": sum(1 for r in rows if r.is_overdue),
    }


def outstanding_for(conn, *, customer_id: Optional[int], customer_name: str) -> float:
    where, params = _customer_where(customer_id, customer_name)
    r = q(conn, f"SELECT COALESCE(SUM(balance),0) AS v FROM sales_summary WHERE balance > 0 AND {where}", params)[0]
    return money(r["v"])


def unpaid_sales_for(conn, *, customer_id: Optional[int], customer_name: str):
    where, params = _customer_where(customer_id, customer_name)
    return q(
        conn,
        f"""
        SELECT * FROM sales_summary
        WHERE balance > 0 AND {where}
        ORDER BY date ASC, id ASC
        """,
        params,
    )


def apply_payment(
    conn,
    *,
    customer_id: Optional[int],
    customer_name: str,
    amount: float,
    payment_method: str = "Transfer",
    on: Optional[str] = None,
    notes: Optional[str] = None,
) -> PaymentResult:
    """
    Log a payment from a customer and spread it over their unpaid sales,
    oldest first. Sales linked to a job pass the allocation on to the job,
    whose status is re-derived.

    Nothing is written when the amount is not positive, exceeds what the
    customer owes, or the payment method is unknown.
    """
    try:
        amount = money(amount)
    except (TypeError, ValueError):
        raise ValidationError("Please enter a valid amount greater than zero.")
    if amount <= 0:
        raise ValidationError("Please enter a valid amount greater than zero.")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"Invalid payment method: {payment_method!r}.")
    name = sanitize_input(customer_name)
    if not customer_id and not name:
        raise ValidationError("Customer is required.")
    notes = clean_text(sanitize_input(notes))
    if notes and len(notes) > 500:
        raise ValidationError("Notes are too long (max 500).")

    owed = outstanding_for(conn, customer_id=customer_id, customer_name=name)
    if amount > owed:
        raise ValidationError(f"Amount cannot exceed outstanding balance of {owed:,.2f}.")

    on = on or date.today().isoformat()

    with atomic(conn):
        plan = []
        remaining = amount
        for sale in unpaid_sales_for(conn, customer_id=customer_id, customer_name=name):
            if remaining <= 0:
                break
            portion = money(min(remaining, float(sale["balance"])))
            if portion <= 0:
                continue
            plan.append((sale, portion))
            remaining = money(remaining - portion)

        collection_id = record_collection(
            conn,
            date=on,
            customer_id=customer_id,
            customer_name=name,
            amount=amount,
            payment_method=payment_method,
            notes=notes,
            sale_id=int(plan[0][0]["id"]) if len(plan) == 1 else None,
        )
        result = PaymentResult(collection_id=collection_id, amount=amount)

        for sale, portion in plan:
            sales.set_sale_amounts(conn, int(sale["id"]), amount_paid=money(float(sale["amount_paid"]) + portion))
            alloc = Allocation(sale_id=int(sale["id"]), amount=portion)

            job_id = sale["sewing_job_id"]
            if job_id is not None:
                if jobs.get_job(conn, int(job_id)) is None:
                    logger.warning("Sale %s points at deleted job %s; only the sale was paid", sale["id"], job_id)
                else:
                    alloc.sewing_job_id = int(job_id)
                    alloc.job_status = jobs.add_payment_to_job(conn, alloc.sewing_job_id, portion)

            result.allocations.append(alloc)

    logger.info(
        "Applied payment %.2f from %s across %d sale(s)",
        amount, name or customer_id, len(result.allocations),
    )
    return result
