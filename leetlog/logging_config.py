"""Logging configuration for the API and the maintenance scripts."""
import logging
import logging.handlers
from pathlib import Path
from typing import List

from .config import settings

CONSOLE_HANDLER = "leetlog.console"
FILE_HANDLER = "leetlog.file"

# Rotate the log file at 10MB, keep five old ones
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access")


def _build_handlers() -> List[logging.Handler]:
    console = logging.StreamHandler()
    console.set_name(CONSOLE_HANDLER)
    handlers: List[logging.Handler] = [console]

    if settings.logging.file:
        log_path = Path(settings.logging.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8",
        )
        rotating.set_name(FILE_HANDLER)
        handlers.append(rotating)

    return handlers


def setup_logging() -> None:
    """
    Attach LeetLog's handlers to the root logger.

    Safe to call more than once (app lifespan restarts, backfill runs): the
    handlers are only installed the first time.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.logging.level)

    if any(h.get_name() == CONSOLE_HANDLER for h in root_logger.handlers):
        return

    formatter = logging.Formatter(settings.logging.format)
    for handler in _build_handlers():
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured (level=%s, file=%s)", settings.logging.level, settings.logging.file or "-",
    )
