"""Logging setup.

The terminal belongs to the reader while a session runs, so log records go
to a rotating file when ``--debug`` is given and nowhere otherwise.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

PACKAGE_LOGGER = "epc"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 2


def setup_logging(debug: bool, log_path: Path) -> logging.Logger:
    """Attach the package handler: a rotating file in debug mode, else a null sink."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False
    if not debug:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.WARNING)
        return logger
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        print(f"epc: cannot open debug log {log_path}: {exc}", file=sys.stderr)
        logger.addHandler(logging.NullHandler())
        return logger
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.debug("debug logging enabled")
    return logger


__all__ = ["setup_logging"]
