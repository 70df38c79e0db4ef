from __future__ import annotations

from tailor.services import collections
from tailor.services.collections import list_collections, record_collection, total_collected, totals_by_method


def _log(conn, on, name, amount, method):
    return record_collection(
        conn, date=on, customer_id=None, customer_name=name, amount=amount, payment_method=method
    )


def test_collections_are_append_only():
    public = {n for n in dir(collections) if not n.startswith("_")}
    assert not any(n.startswith(("update", "delete")) for n in public)


def test_list_and_totals(conn):
    _log(conn, "2024-06-01", "Adaeze", 1000.0, "Cash")
    _log(conn, "2024-06-10", "Bola", 2500.0, "Transfer")
    _log(conn, "2024-07-02", "Adaeze", 400.0, "Cash")

    rows = list_collections(conn)
    assert [r["amount"] for r in rows] == [400.0, 2500.0, 1000.0]
    assert total_collected(rows) == 3900.0
    assert totals_by_method(rows) == {"Transfer": 2500.0, "Cash": 1400.0, "POS": 0.0, "Other": 0.0}

    june = list_collections(conn, start="2024-06-01", end="2024-06-30")
    assert len(june) == 2
    assert [r["customer_name"] for r in list_collections(conn, method="Transfer")] == ["Bola"]
    assert len(list_collections(conn, search="ada")) == 2
