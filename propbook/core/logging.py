"""JSON logging for the booking payments backend."""
from __future__ import annotations

import logging

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Route every record through one JSON handler on the root logger.

    Structured context passed through ``extra=`` (payment ids, receipts, soft
    failure reasons) ends up as top-level JSON keys.
    """

    root_logger = logging.getLogger()
    # Reloads would otherwise stack handlers.
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    root_logger.addHandler(handler)
    # SQL echo stays off unless asked for explicitly.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["LOG_FORMAT", "setup_logging", "get_logger"]
