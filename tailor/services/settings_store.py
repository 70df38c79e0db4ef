"""
Business settings kept in the key/value `settings` table.

Loaded once per session into an immutable `BusinessSettings` and handed to
whatever needs branding or the reporting year.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from datetime import date

from tailor.db import atomic, q, x
from tailor.errors import ValidationError
from tailor.sanitize import sanitize_input
from tailor.utils import iso_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BusinessSettings:
    business_name: str = "A'ish Raiments"
    business_motto: str = "Fashion Designer with Panache"
    brand_primary_color: str = "#72D0CF"
    brand_accent_color: str = "#EC88C7"
    reporting_year: str = str(date.today().year)

    @property
    def reporting_year_int(self) -> int:
        return int(self.reporting_year)


SETTING_KEYS = tuple(f.name for f in fields(BusinessSettings))


def load_business_settings(conn) -> BusinessSettings:
    stored = {r["key"]: r["value"] for r in q(conn, "SELECT key, value FROM settings")}
    known = {k: v for k, v in stored.items() if k in SETTING_KEYS and v}
    return replace(BusinessSettings(), **known)


def _validate(s: BusinessSettings) -> None:
    if not s.business_name.strip():
        raise ValidationError("Business name is required.")
    for label, color in (("Primary colour", s.brand_primary_color), ("Accent colour", s.brand_accent_color)):
        c = color.strip()
        if not (c.startswith("#") and len(c) in (4, 7)):
            raise ValidationError(f"{label} must be a hex colour like #72D0CF.")
    try:
        year = int(s.reporting_year)
    except ValueError:
        raise ValidationError("Reporting year must be a number.")
    if not 2000 <= year <= 2100:
        raise ValidationError("Reporting year is out of range.")


def save_business_settings(conn, s: BusinessSettings) -> BusinessSettings:
    s = BusinessSettings(**{k: sanitize_input(v) for k, v in asdict(s).items()})
    _validate(s)
    now = iso_now()
    with atomic(conn):
        for key, value in asdict(s).items():
            x(
                conn,
                """
                INSERT INTO settings (key, value, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                """,
                (key, value, now, now),
            )
    logger.info("Saved business settings")
    return s
