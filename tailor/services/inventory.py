from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from tailor.constants import (
    FABRIC_UNITS_PER_JOB,
    INVENTORY_CATEGORIES,
    LOW_STOCK_ITEMS_LIMIT,
    LOW_STOCK_THRESHOLD,
)
from tailor.db import q, q1, u, x
from tailor.errors import NotFoundError, ValidationError
from tailor.sanitize import sanitize_input
from tailor.utils import clean_text, iso_now

logger = logging.getLogger(__name__)


@dataclass
class InventoryItemInput:
    date: str
    item_name: str
    category: str = "Fabric"
    quantity_bought: float = 0.0
    quantity_used: float = 0.0
    unit_cost: float = 0.0
    reorder_level: Optional[float] = None
    location: Optional[str] = None
    preferred_supplier: Optional[str] = None
    supplier_notes: Optional[str] = None


def _clean(data: InventoryItemInput) -> dict:
    name = sanitize_input(data.item_name)
    if not data.date:
        raise ValidationError("Date is required.")
    if not name:
        raise ValidationError("Item name is required.")
    if len(name) > 100:
        raise ValidationError("Item name is too long (max 100).")
    if data.category not in INVENTORY_CATEGORIES:
        raise ValidationError(f"Invalid category: {data.category!r}.")
    for label, v in (
        ("Quantity bought", data.quantity_bought),
        ("Quantity used", data.quantity_used),
        ("Unit cost", data.unit_cost),
    ):
        if v is None or float(v) < 0:
            raise ValidationError(f"{label} must be a positive number.")

    return {
        "date": str(data.date),
        "item_name": name,
        "category": data.category,
        "quantity_bought": float(data.quantity_bought),
        "quantity_used": float(data.quantity_used),
        "unit_cost": float(data.unit_cost),
        "reorder_level": float(data.reorder_level) if data.reorder_level is not None else None,
        "location": clean_text(sanitize_input(data.location)),
        "preferred_supplier": clean_text(sanitize_input(data.preferred_supplier)),
        "supplier_notes": clean_text(sanitize_input(data.supplier_notes)),
    }


def get_item(conn, item_id: int):
    return q1(conn, "SELECT * FROM inventory_items WHERE id=?", (int(item_id),))


def require_item(conn, item_id: int):
    r = get_item(conn, item_id)
    if r is None:
        raise NotFoundError("Inventory item not found.")
    return r


def create_item(conn, data: InventoryItemInput) -> int:
    row = _clean(data)
    now = iso_now()
    item_id = x(
        conn,
        """
        INSERT INTO inventory_items (
            date, item_name, category, quantity_bought, quantity_used, unit_cost,
            reorder_level, location, preferred_supplier, supplier_notes,
            created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            row["date"], row["item_name"], row["category"],
            row["quantity_bought"], row["quantity_used"], row["unit_cost"],
            row["reorder_level"], row["location"], row["preferred_supplier"], row["supplier_notes"],
            now, now,
        ),
    )
    logger.info("Created inventory item %s (%s)", item_id, row["item_name"])
    return item_id


def update_item(conn, item_id: int, data: InventoryItemInput) -> None:
    row = _clean(data)
    n = u(
        conn,
        """
        UPDATE inventory_items
        SET date=?, item_name=?, category=?, quantity_bought=?, quantity_used=?, unit_cost=?,
            reorder_level=?, location=?, preferred_supplier=?, supplier_notes=?, updated_at=?
        WHERE id=?
        """,
        (
            row["date"], row["item_name"], row["category"],
            row["quantity_bought"], row["quantity_used"], row["unit_cost"],
            row["reorder_level"], row["location"], row["preferred_supplier"], row["supplier_notes"],
            iso_now(), int(item_id),
        ),
    )
    if n == 0:
        raise NotFoundError("Inventory item not found.")


def delete_item(conn, item_id: int) -> None:
    n = u(conn, "DELETE FROM inventory_items WHERE id=?", (int(item_id),))
    if n == 0:
        raise NotFoundError("Inventory item not found.")
    logger.info("Deleted inventory item %s", item_id)


def list_items(conn, *, search: str = "", category: Optional[str] = None):
    sql = "SELECT * FROM inventory_items WHERE 1=1"
    params: list = []
    if category:
        sql += " AND category=?"
        params.append(category)
    if search.strip():
        sql += " AND (LOWER(item_name) LIKE ? OR LOWER(COALESCE(location,'')) LIKE ?)"
        like = f"%{search.strip().lower()}%"
        params.extend([like, like])
    sql += " ORDER BY date DESC, id DESC"
    return q(conn, sql, params)


def low_stock_items(conn, *, threshold: float = LOW_STOCK_THRESHOLD, limit: int = LOW_STOCK_ITEMS_LIMIT):
    return q(
        conn,
        """
        SELECT * FROM inventory_items
        WHERE quantity_left < ?
        ORDER BY quantity_left ASC, id ASC
        LIMIT ?
        """,
        (float(threshold), int(limit)),
    )


def needs_reorder(item) -> bool:
    level = item["reorder_level"]
    if level is None:
        return False
    return float(item["quantity_left"]) <= float(level)


def inventory_value(conn) -> float:
    r = q1(conn, "SELECT COALESCE(SUM(total_cost),0) AS v FROM inventory_items")
    return round(float(r["v"]), 2)


def consume_item(conn, item_id: int, *, used_on: str, quantity: float = FABRIC_UNITS_PER_JOB):
    """
    Record that `quantity` units of an item went into a job. Returns the
    updated row. quantity_left is allowed to go negative (logged).
    """
    n = u(
        conn,
        """
        UPDATE inventory_items
        SET quantity_used = quantity_used + ?, last_used_date=?, updated_at=?
        WHERE id=?
        """,
        (float(quantity), used_on, iso_now(), int(item_id)),
    )
    if n == 0:
        raise NotFoundError("Inventory item not found.")

    item = get_item(conn, item_id)
    if float(item["quantity_left"]) < 0:
        logger.warning(
            "Inventory item %s (%s) is now below zero: %s left",
            item_id, item["item_name"], item["quantity_left"],
        )
    return item
