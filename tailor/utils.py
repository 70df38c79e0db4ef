from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def money(v) -> float:
    """Round a currency amount to cents; None counts as 0."""
    if v is None:
        return 0.0
    return round(float(v), 2)


def to_date(value: Union[str, date, None]) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def days_between(earlier: Union[str, date], later: Union[str, date]) -> int:
    return (to_date(later) - to_date(earlier)).days


def clean_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None
