from __future__ import annotations

import pytest

from tailor.errors import NotFoundError, ValidationError
from tailor.services.inventory import (
    InventoryItemInput,
    consume_item,
    create_item,
    delete_item,
    get_item,
    inventory_value,
    list_items,
    low_stock_items,
    needs_reorder,
    update_item,
)


def _item(conn, name, bought, used=0, cost=100.0, category="Fabric", reorder=None, location=None):
    return create_item(
        conn,
        InventoryItemInput(
            date="2024-06-01",
            item_name=name,
            category=category,
            quantity_bought=bought,
            quantity_used=used,
            unit_cost=cost,
            reorder_level=reorder,
            location=location,
        ),
    )


def test_generated_columns(conn, fabric_id):
    item = get_item(conn, fabric_id)
    assert item["quantity_left"] == 7
    assert item["total_cost"] == 45000.0


def test_consume_item_allows_negative_stock(conn):
    item_id = _item(conn, "Lace", bought=1)

    consume_item(conn, item_id, used_on="2024-06-02")
    row = consume_item(conn, item_id, used_on="2024-06-03")

    assert row["quantity_used"] == 2
    assert row["quantity_left"] == -1
    assert row["last_used_date"] == "2024-06-03"

    with pytest.raises(NotFoundError):
        consume_item(conn, 999, used_on="2024-06-03")


def test_low_stock_is_sorted_and_limited(conn):
    _item(conn, "Plenty", bought=50)
    _item(conn, "Four", bought=4)
    _item(conn, "Two", bought=5, used=3)
    _item(conn, "Five", bought=5)

    names = [r["item_name"] for r in low_stock_items(conn)]
    assert names == ["Two", "Four"]
    assert [r["item_name"] for r in low_stock_items(conn, limit=1)] == ["Two"]


def test_needs_reorder(conn):
    at_level = get_item(conn, _item(conn, "A", bought=10, used=5, reorder=5))
    above = get_item(conn, _item(conn, "B", bought=10, reorder=5))
    unset = get_item(conn, _item(conn, "C", bought=0))
    assert needs_reorder(at_level)
    assert not needs_reorder(above)
    assert not needs_reorder(unset)


def test_list_filters_and_value(conn):
    _item(conn, "Ankara", bought=10, cost=4500.0, location="Shelf A")
    _item(conn, "Thread pack", bought=30, cost=300.0, category="Thread")

    assert len(list_items(conn)) == 2
    assert [r["item_name"] for r in list_items(conn, category="Thread")] == ["Thread pack"]
    assert [r["item_name"] for r in list_items(conn, search="shelf")] == ["Ankara"]
    assert inventory_value(conn) == 54000.0


def test_update_delete_and_validation(conn, fabric_id):
    update_item(
        conn,
        fabric_id,
        InventoryItemInput(date="2024-06-01", item_name="Ankara (blue)", quantity_bought=12, quantity_used=3),
    )
    assert get_item(conn, fabric_id)["quantity_left"] == 9

    with pytest.raises(ValidationError):
        update_item(conn, fabric_id, InventoryItemInput(date="2024-06-01", item_name="X", unit_cost=-1))
    with pytest.raises(ValidationError):
        create_item(conn, InventoryItemInput(date="2024-06-01", item_name="X", category="Buttons"))

    delete_item(conn, fabric_id)
    assert get_item(conn, fabric_id) is None
    with pytest.raises(NotFoundError):
        delete_item(conn, fabric_id)
