from __future__ import annotations

import hmac
import logging

import streamlit as st

from tailor.config import Settings
from tailor.errors import TailorError
from tailor.services.settings_store import BusinessSettings, load_business_settings

logger = logging.getLogger(__name__)

_BUSINESS_KEY = "tailor_business_settings"
_UNLOCKED_KEY = "tailor_unlocked"


def show_error(exc: Exception, action: str) -> None:
    """Inline message for validation / not-found, generic one for anything else."""
    if isinstance(exc, TailorError):
        st.error(str(exc))
        return
    logger.exception("%s failed", action)
    st.error(f"{action} failed. Please try again.")


def fmt_money(v, symbol: str = "₦") -> str:
    return f"{symbol}{float(v or 0):,.2f}"


def business_settings(conn) -> BusinessSettings:
    """Loaded once per session; call `refresh_business_settings` after saving."""
    if _BUSINESS_KEY not in st.session_state:
        st.session_state[_BUSINESS_KEY] = load_business_settings(conn)
    return st.session_state[_BUSINESS_KEY]


def refresh_business_settings(conn) -> BusinessSettings:
    st.session_state.pop(_BUSINESS_KEY, None)
    return business_settings(conn)


def require_passcode(settings: Settings) -> None:
    """Stop the page until the session is unlocked (no-op without a passcode)."""
    if not settings.passcode or st.session_state.get(_UNLOCKED_KEY):
        return

    st.title("🔒 Sign in")
    entered = st.text_input("Passcode", type="password")
    if st.button("Unlock", type="primary"):
        if hmac.compare_digest(entered.encode("utf-8"), settings.passcode.encode("utf-8")):
            st.session_state[_UNLOCKED_KEY] = True
            st.rerun()
        else:
            logger.warning("Rejected passcode attempt")
            st.error("Unauthorized.")
    st.stop()


def paginator(total_pages: int, key: str) -> int:
    if total_pages <= 1:
        return 1
    return int(st.number_input("Page", min_value=1, max_value=total_pages, value=1, step=1, key=key))
