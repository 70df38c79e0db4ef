from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Union

import streamlit as st

from tailor.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)


class Connection(sqlite3.Connection):
    """sqlite3 connection that knows whether it is inside an `atomic` block."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.atomic_depth = 0


def connect(db_path: Union[Path, str]) -> Connection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False, factory=Connection)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> Connection:
    logger.info("Opening database %s", db_path)
    return connect(db_path)


def _column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    # table_xinfo also lists generated columns
    rows = conn.execute(f"PRAGMA table_xinfo({table});").fetchall()
    cols = [r["name"] for r in rows]
    return column in cols


def ensure_schema(conn: sqlite3.Connection) -> None:
    # Create base schema (for new installs)
    conn.executescript(SCHEMA_SQL)

    # ---- migrations for existing installs ----
    # Jobs that draw fabric from stock remember which item
    if not _column_exists(conn, "sewing_jobs", "inventory_item_id"):
        conn.execute("ALTER TABLE sewing_jobs ADD COLUMN inventory_item_id INTEGER;")

    # Collections may point at the sale they settled
    if not _column_exists(conn, "collections_log", "sale_id"):
        conn.execute("ALTER TABLE collections_log ADD COLUMN sale_id INTEGER;")

    conn.commit()


@contextmanager
def atomic(conn: Connection) -> Iterator[Connection]:
    """
    Unit of work: writes issued through `x`/`u` inside the block are committed
    together when the outermost block exits, or rolled back if it raises.
    """
    conn.atomic_depth += 1
    try:
        yield conn
    except BaseException:
        conn.atomic_depth -= 1
        if conn.atomic_depth == 0:
            conn.rollback()
            logger.warning("Rolled back unit of work")
        raise
    else:
        conn.atomic_depth -= 1
        if conn.atomic_depth == 0:
            conn.commit()


def _maybe_commit(conn: sqlite3.Connection) -> None:
    if not getattr(conn, "atomic_depth", 0):
        conn.commit()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    cur = conn.execute(sql, tuple(params))
    rows = cur.fetchall()
    cur.close()
    return rows


def q1(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()):
    rows = q(conn, sql, params)
    return rows[0] if rows else None


def x(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    cur = conn.execute(sql, tuple(params))
    _maybe_commit(conn)
    last = cur.lastrowid
    cur.close()
    return int(last or 0)


def u(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    """Like `x` but returns the number of rows touched (for UPDATE / DELETE)."""
    cur = conn.execute(sql, tuple(params))
    _maybe_commit(conn)
    n = cur.rowcount
    cur.close()
    return int(n)
