"""
Logging setup for the app.

One stderr handler plus an append-only file handler in the data directory.
Modules log through ``logging.getLogger(__name__)``; this only wires handlers
onto the ``tailor`` logger, once per process.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

__all__ = ["configure_logging", "LOG_FILE_NAME"]

LOG_FILE_NAME = "tailor_erp.log"
ENV_LOG_LEVEL = "TAILOR_ERP_LOG_LEVEL"
_LOGGER_NAME = "tailor"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_env(default: int) -> int:
    name = os.getenv(ENV_LOG_LEVEL, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def configure_logging(data_dir: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Return the package logger, adding handlers on first call only
    (Streamlit re-runs scripts on every interaction).
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(_level_from_env(level))
    logger.propagate = False

    if logger.handlers:
        return logger

    formatter = logging.Formatter(_FORMAT)

    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    if data_dir is not None:
        log_file = Path(data_dir) / LOG_FILE_NAME
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(str(log_file), mode="a", encoding="utf-8", delay=True)
        except OSError:
            logger.warning("Cannot open %s; logging to stderr only", log_file)
        else:
            fh.setFormatter(formatter)
            logger.addHandler(fh)

    return logger
