"""Logging for the API process and its background analysis/sync tasks."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_handler: Optional[logging.Handler] = None


def _install_handler(level: str) -> None:
    global _handler
    if _handler is not None:
        return
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root = logging.getLogger()
    root.addHandler(_handler)
    root.setLevel(level)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Logger for a deconstruct module, at ``level`` or the configured LOG_LEVEL."""
    resolved = (level or settings.LOG_LEVEL).upper()
    _install_handler(resolved)
    logger = logging.getLogger(name)
    logger.setLevel(resolved)
    return logger


def emit_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    details = " ".join(f"{key}={value}" for key, value in fields.items())
    if details:
        logger.info("%s %s", event, details)
    else:
        logger.info("%s", event)
