# tests/conftest.py
# ---------------------------------------------------------------------
# - Every test gets its own in-memory SQLite database with the full schema
# - Rows come back as sqlite3.Row, like in the app
# - Small factory fixtures for the rows most tests need
# ---------------------------------------------------------------------

from __future__ import annotations

from datetime import date

import pytest

from tailor.db import connect, ensure_schema
from tailor.services.customers import CustomerInput, create_customer
from tailor.services.inventory import InventoryItemInput, create_item
from tailor.services.jobs import JobInput

TODAY = date(2024, 6, 15)


@pytest.fixture
def conn():
    c = connect(":memory:")
    ensure_schema(c)
    try:
        yield c
    finally:
        c.close()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def customer_id(conn) -> int:
    return create_customer(conn, CustomerInput(name="Adaeze Okafor", phone="+234 803 555 0101"))


@pytest.fixture
def fabric_id(conn) -> int:
    return create_item(
        conn,
        InventoryItemInput(
            date="2024-06-01",
            item_name="Ankara print",
            category="Fabric",
            quantity_bought=10,
            quantity_used=3,
            unit_cost=4500.0,
            reorder_level=5,
        ),
    )


@pytest.fixture
def make_job(customer_id):
    """JobInput factory for the default customer; override any field."""

    def _make(**overrides) -> JobInput:
        fields = dict(
            date="2024-06-10",
            customer_id=customer_id,
            customer_name="Adaeze Okafor",
            item_sewn="Iro and buba",
            material_cost=2000.0,
            labour_charge=3000.0,
            amount_paid=0.0,
            fabric_source="Customer's",
        )
        fields.update(overrides)
        return JobInput(**fields)

    return _make
