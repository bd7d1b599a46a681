# === FILE: polite_crawl/logger.py ===
"""Logging setup for PoliteCrawl.

Library modules log through ``logging.getLogger("PoliteCrawl")`` and never
install handlers themselves; :func:`init_logging` is called once by the CLI.
Every record gets a ``session`` attribute (a short id of the current run), so
the log lines of parallel runs written to one file can be told apart.
"""
from __future__ import annotations

import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, Union

LOGGER_NAME: Final[str] = "PoliteCrawl"
DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(session)s | %(message)s"

_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


class SessionFilter(logging.Filter):
    """Stamps each record with the crawl session id."""

    def __init__(self, session: str) -> None:
        super().__init__()
        self.session = session

    def filter(self, record: logging.LogRecord) -> bool:
        record.session = self.session
        return True


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    session: Optional[str] = None,
) -> logging.Logger:
    """Replace the handlers of the project logger: stdout plus an optional rotating file."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()

    tag = SessionFilter(session or uuid.uuid4().hex[:8])
    formatter = logging.Formatter(log_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(tag)
        lg.addHandler(handler)

    lg.propagate = False
    return lg


__all__ = ["init_logging", "SessionFilter", "LOGGER_NAME", "DEFAULT_FORMAT"]
