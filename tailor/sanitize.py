from __future__ import annotations

import re
from typing import Optional

_ANGLE = re.compile(r"[<>]")
_PHONE_JUNK = re.compile(r"[^\d+\s()-]")


def sanitize_input(dirty: Optional[str]) -> str:
    """Strip angle brackets and surrounding whitespace from free text."""
    if not dirty:
        return ""
    return _ANGLE.sub("", str(dirty)).strip()


def sanitize_phone(phone: Optional[str]) -> Optional[str]:
    # Keep digits, +, spaces, parentheses and dashes
    if not phone:
        return None
    s = _PHONE_JUNK.sub("", str(phone)).strip()
    return s or None
