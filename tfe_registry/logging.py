"""
Logging helpers. Library modules log through logging.getLogger(__name__) and never configure
handlers; applications call configure_logging() once at startup.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Logger for an application module; messages flow through configure_logging handlers."""
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", log_path: str | Path | None = None) -> None:
    """
    Install root handlers: stderr via basicConfig plus an optional UTF-8 log file.

    Args:
        level: Level name (DEBUG, INFO, ...); unknown names fall back to INFO
        log_path: Optional file to also log to; parent directories are created
    """
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    if not isinstance(lvl, int):
        lvl = logging.INFO
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    logging.getLogger("tfe_registry").setLevel(lvl)
    if log_path:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(lvl)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(fh)
