"""
Search / sort / paginate helpers for the list pages.

Rows are anything that supports ``row[field]`` (dicts, sqlite3.Row).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from tailor.constants import DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class Page:
    items: list
    page: int
    per_page: int
    total_pages: int
    total_items: int
    start: int  # 1-based index of the first item shown, 0 when empty
    end: int


def paginate(items: Sequence[Any], page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> Page:
    per_page = max(1, int(per_page))
    total = len(items)
    total_pages = math.ceil(total / per_page)

    # clamp into range; an empty list still reports page 1
    page = min(max(1, int(page)), total_pages or 1)

    last = page * per_page
    first = last - per_page
    return Page(
        items=list(items[first:last]),
        page=page,
        per_page=per_page,
        total_pages=total_pages,
        total_items=total,
        start=0 if total == 0 else first + 1,
        end=min(last, total),
    )


def search_rows(rows: Iterable[Any], term: str, fields: Sequence[str]) -> list:
    """Case-insensitive substring match on any of `fields`."""
    rows = list(rows)
    needle = (term or "").strip().lower()
    if not needle:
        return rows
    out = []
    for r in rows:
        for f in fields:
            v = r[f]
            if v is not None and needle in str(v).lower():
                out.append(r)
                break
    return out


def sort_rows(rows: Iterable[Any], field: str, direction: str = "asc", numeric: bool = False) -> list:
    """Stable sort; missing values sort as '' (or 0 for numeric fields)."""

    def key(r):
        v = r[field]
        if numeric:
            return float(v or 0)
        return "" if v is None else v

    return sorted(rows, key=key, reverse=(direction == "desc"))
