"""Logging configuration for achievement-store.

Both output shapes go through one stdout handler on the root logger:

  _ContainerFormatter: one human-readable line per record, for a terminal.
  _JsonFormatter: one JSON object per line, for a log pipeline.

LOG_JSON=true switches to the JSON shape.  Store operations attach
``caller``, ``owner``, ``achievement_id`` and ``error`` through ``extra=``
so a rejected write can be filtered by principal without parsing messages.
Content hashes and attachments are never logged.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

SERVICE_NAME = "achievement-store"

# Set by RequestContextMiddleware and its log filter.
_REQUEST_FIELDS = ("request_id", "method", "path", "status_code", "duration_ms")
# Passed by the store and the quota ledger via extra=.
_STORE_FIELDS = ("caller", "owner", "achievement_id", "error")

# Chatty below WARNING; held there whatever LOG_LEVEL says.
_NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "httpcore", "httpx")


def _iso_timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds")


class _ContainerFormatter(logging.Formatter):
    """``<ts> <LEVEL> <logger>  <message>``, plus ``[file:line]`` from WARNING up."""

    def __init__(self) -> None:
        super().__init__("%(levelname)-8s %(name)s  %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = f"{_iso_timestamp(record)} {super().format(record)}"
        if record.levelno >= logging.WARNING:
            line += f"  [{record.filename}:{record.lineno}]"
        return line


class _JsonFormatter(logging.Formatter):
    """JSON Lines; context fields become top-level keys when present."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": _iso_timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "message": record.getMessage(),
        }
        for field in (*_REQUEST_FIELDS, *_STORE_FIELDS):
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Replace the root handlers with a single stdout handler.

    Unknown level names fall back to INFO.
    """
    level = logging.getLevelNamesMapping().get(level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
