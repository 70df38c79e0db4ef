from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import streamlit as st

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "TAILOR_ERP_DATA_DIR"
ENV_PASSCODE = "TAILOR_ERP_PASSCODE"
SESSION_DATA_DIR_KEY = "tailor_erp_data_dir"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    currency: str = "NGN"
    currency_symbol: str = "₦"
    passcode: Optional[str] = None


def _default_data_dir() -> Path:
    return Path.home() / ".tailor_erp"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable %s", cfg)
            return {}
    return {}


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    # The pointer lives in the default folder so the next start can find it.
    default_dir = _default_data_dir()
    default_dir.mkdir(parents=True, exist_ok=True)
    payload = {"data_dir": str(data_dir)}
    (default_dir / CONFIG_FILE_NAME).write_text(json.dumps(payload, indent=2), encoding="utf-8")

    st.session_state[SESSION_DATA_DIR_KEY] = str(data_dir)
    logger.info("Data directory set to %s", data_dir)


def resolve_data_dir() -> Path:
    # Priority order:
    # 1) Session state (set via Data Management page)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    if SESSION_DATA_DIR_KEY in st.session_state:
        return Path(st.session_state[SESSION_DATA_DIR_KEY]).expanduser().resolve()
    if os.getenv(ENV_DATA_DIR):
        return Path(os.getenv(ENV_DATA_DIR, "")).expanduser().resolve()
    default_dir = _default_data_dir()
    persisted = _load_persisted_settings(default_dir)
    return Path(persisted.get("data_dir", default_dir)).expanduser().resolve()


def build_settings(data_dir: Path) -> Settings:
    data_dir.mkdir(parents=True, exist_ok=True)
    return Settings(
        data_dir=data_dir,
        db_path=data_dir / "tailor.db",
        passcode=os.getenv(ENV_PASSCODE) or None,
    )


@st.cache_resource
def _settings_for(data_dir: str) -> Settings:
    return build_settings(Path(data_dir))


def get_settings() -> Settings:
    return _settings_for(str(resolve_data_dir()))
