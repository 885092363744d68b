"""Structured JSON logger for closetcare.

Every log record is emitted as a single-line JSON object::

    {"ts": "2026-10-17T12:00:00.123456+00:00", "level": "INFO",
     "logger": "closetcare.image", "message": "image processed",
     "op": "process_image_for_upload", "bytes": 31877, "elapsed_ms": 41.2}

Usage::

    from closetcare.observability import get_logger

    log = get_logger("closetcare.image")
    log.info("image processed", extra={"extra_fields": {"bytes": 31877}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys are ``ts``, ``level``, ``logger`` and ``message``.
    Fields passed via ``extra={"extra_fields": {...}}`` are merged into the
    top-level object; ``exc_info`` and ``stack_info`` are serialised when
    present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(
            record, "extra_fields", None
        )
        if extra_fields is not None:
            log_entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(log_entry, default=str)


# One handler per logger name so that ``get_logger`` is idempotent.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "closetcare",
    *,
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Defaults to ``"closetcare"``.
    level:
        Minimum log level, as an ``int`` or a case-insensitive name.  Only
        applied the first time a given *name* is configured.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        A logger with a :class:`StructuredFormatter` handler attached.
        Repeated calls with the same *name* return the same logger and do
        **not** add duplicate handlers.
    """
    logger = logging.getLogger(name)

    if name not in _configured_loggers:
        resolved_level = (
            logging.getLevelName(level.upper())
            if isinstance(level, str)
            else level
        )
        logger.setLevel(resolved_level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

        _configured_loggers.add(name)

    return logger


def set_level(level: int | str, prefix: str = "closetcare") -> None:
    """Change the level of every configured logger under *prefix*."""
    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    for name in _configured_loggers:
        if name == prefix or name.startswith(prefix + "."):
            logging.getLogger(name).setLevel(resolved)
