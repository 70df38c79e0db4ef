from __future__ import annotations

import logging
import random
from datetime import date, timedelta

from tailor.constants import FABRIC_CUSTOMERS, FABRIC_YOURS, SALE_FABRIC, SALE_OTHER
from tailor.db import atomic, q, q1, u, x
from tailor.schema import DATA_TABLES
from tailor.services.customers import CustomerInput, create_customer
from tailor.services.expenses import ExpenseInput, create_expense
from tailor.services.inventory import InventoryItemInput, create_item
from tailor.services.jobs import JobInput, save_job
from tailor.services.receivables import apply_payment
from tailor.services.sales import SaleInput, create_sale
from tailor.services.settings_store import BusinessSettings, SETTING_KEYS
from tailor.utils import iso_now

logger = logging.getLogger(__name__)

DEMO_CUSTOMERS = [
    ("Adaeze Okafor", "+234 803 555 0101"),
    ("Bola Adeyemi", "+234 805 555 0102"),
    ("Chioma Eze", "+234 806 555 0103"),
    ("Fatima Bello", "+234 807 555 0104"),
]
DEMO_STOCK = [
    ("Ankara print", "Fabric", 12, 4500.0),
    ("Lace (French)", "Fabric", 6, 12000.0),
    ("Lining satin", "Lining", 20, 1500.0),
    ("Thread pack", "Thread", 30, 300.0),
]
DEMO_ITEMS = ["Iro and buba", "Agbada", "Kaftan", "Wrapper skirt", "Gown", "Shirt"]


def upsert_reference_data(conn) -> None:
    """Seed default business settings without touching values already saved."""
    defaults = BusinessSettings()
    now = iso_now()
    with atomic(conn):
        for key in SETTING_KEYS:
            x(
                conn,
                "INSERT OR IGNORE INTO settings(key, value, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (key, getattr(defaults, key), now, now),
            )


def wipe_all(conn) -> None:
    # Keep schema and settings, delete data.
    with atomic(conn):
        for t in DATA_TABLES:
            u(conn, f"DELETE FROM {t};")
    logger.warning("Wiped all business data")


def table_counts(conn) -> dict:
    return {t: int(q1(conn, f"SELECT COUNT(*) AS n FROM {t}")["n"]) for t in (*DATA_TABLES, "settings")}


def load_demo_data(conn, *, seed: int = 7, today: date | None = None) -> None:
    """Seed a small, deterministic business: customers, stock, jobs, expenses and open invoices."""
    with atomic(conn):
        _load_demo_data(conn, random.Random(seed), today or date.today())
    logger.info("Loaded demo data")


def _load_demo_data(conn, rng: random.Random, today: date) -> None:
    upsert_reference_data(conn)

    customer_ids = [create_customer(conn, CustomerInput(name=n, phone=p)) for n, p in DEMO_CUSTOMERS]

    stock_date = (today - timedelta(days=45)).isoformat()
    item_ids = [
        create_item(
            conn,
            InventoryItemInput(
                date=stock_date, item_name=name, category=cat,
                quantity_bought=qty, unit_cost=cost, reorder_level=3,
            ),
        )
        for name, cat, qty, cost in DEMO_STOCK
    ]
    fabric_ids = item_ids[:2]

    # Ten jobs over the last six weeks, a mix of paid, part-paid and unpaid
    for i in range(10):
        cid = rng.choice(customer_ids)
        cust = q(conn, "SELECT name, phone FROM customers WHERE id=?", (cid,))[0]
        material = float(rng.choice([2000, 3500, 5000]))
        labour = float(rng.choice([3000, 5000, 8000]))
        total = material + labour
        paid = rng.choice([0.0, round(total / 2, 2), total])
        ours = rng.random() < 0.6
        save_job(
            conn,
            JobInput(
                date=(today - timedelta(days=42 - i * 4)).isoformat(),
                customer_id=cid,
                customer_name=str(cust["name"]),
                phone=cust["phone"],
                fabric_source=FABRIC_YOURS if ours else FABRIC_CUSTOMERS,
                inventory_item_id=rng.choice(fabric_ids) if ours else None,
                item_sewn=rng.choice(DEMO_ITEMS),
                material_cost=material,
                labour_charge=labour,
                amount_paid=paid,
                delivery_date_expected=(today - timedelta(days=30 - i * 4)).isoformat(),
            ),
            today=today,
        )

    for i, (etype, desc, amount) in enumerate(
        [("Transport", "Fabric market trip", 2500.0), ("Supplies", "Needles and chalk", 1800.0),
         ("Repair", "Machine service", 7000.0)]
    ):
        create_expense(
            conn,
            ExpenseInput(
                date=(today - timedelta(days=35 - i * 10)).isoformat(),
                expense_type=etype, description=desc, amount=amount, payment_method="Cash",
            ),
        )

    # Invoices raised by hand, not yet settled
    for i, cid in enumerate(customer_ids[:3]):
        cust = q(conn, "SELECT name FROM customers WHERE id=?", (cid,))[0]
        total = float(rng.choice([6000, 9500, 15000]))
        create_sale(
            conn,
            SaleInput(
                date=(today - timedelta(days=50 - i * 15)).isoformat(),
                sale_type=SALE_OTHER if i % 2 else SALE_FABRIC,
                customer_id=cid,
                customer_name=str(cust["name"]),
                total_amount=total,
                amount_paid=round(total * 0.25, 2),
                notes="Demo invoice",
            ),
        )

    # One part payment against whoever owes the most
    owed = q(
        conn,
        """
        SELECT customer_id, customer_name, SUM(balance) AS owed
        FROM sales_summary WHERE balance > 0
        GROUP BY customer_id, customer_name ORDER BY owed DESC LIMIT 1
        """,
    )
    if owed:
        r = owed[0]
        apply_payment(
            conn,
            customer_id=r["customer_id"],
            customer_name=r["customer_name"],
            amount=round(float(r["owed"]) / 2, 2),
            payment_method="Transfer",
            on=today.isoformat(),
            notes="Demo part payment",
        )
