"""
afroute logging setup

Modules log through ``logging.getLogger(__name__)`` and attach structured
fields as ``extra={"context": {...}}``. This module decides how those records
are rendered:

    text   "2026-01-15T10:00:00+00:00 WARNING afroute.registry: message country=NG"
    json   one JSON object per line (timestamp, level, logger, message, context)

Handlers are installed on the ``afroute`` package logger only, so importing
afroute as a library never changes the host application's root logger.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "afroute"


class LogLevel(Enum):
    """Log severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class LogFormat(Enum):
    TEXT = "text"
    JSON = "json"


@dataclass
class LogEvent:
    """Structured log event."""
    timestamp: str
    level: str
    logger: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding empty values."""
        d = asdict(self)
        return {k: v for k, v in d.items() if v is not None and v != "" and v != {}}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str, sort_keys=True)


def _event_from_record(record: logging.LogRecord) -> LogEvent:
    context = getattr(record, "context", None)
    event = LogEvent(
        timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="seconds"),
        level=record.levelname.lower(),
        logger=record.name,
        message=record.getMessage(),
        context=dict(context) if isinstance(context, dict) else {},
    )
    if record.exc_info:
        event.exception = "".join(traceback.format_exception(*record.exc_info))
    return event


class StructuredFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        return _event_from_record(record).to_json()


class TextFormatter(logging.Formatter):
    """Human readable line with ``key=value`` context appended."""

    def format(self, record: logging.LogRecord) -> str:
        event = _event_from_record(record)
        line = f"{event.timestamp} {record.levelname} {event.logger}: {event.message}"
        if event.context:
            line += " " + " ".join(f"{k}={v}" for k, v in sorted(event.context.items()))
        if event.exception:
            line += "\n" + event.exception.rstrip("\n")
        return line


class StructuredHandler(logging.StreamHandler):
    """Stream handler marker so ``configure_logging`` can find and replace its own handler."""


def configure_logging(
    level: str = LogLevel.WARNING.value,
    fmt: str = LogFormat.TEXT.value,
    stream: Any = None,
) -> logging.Logger:
    """Install (or replace) the afroute handler and set the package log level.

    Raises ``ValueError`` for an unknown level or format.
    """
    log_level = LogLevel(str(level).lower())
    log_format = LogFormat(str(fmt).lower())

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, StructuredHandler):
            logger.removeHandler(h)

    handler = StructuredHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(StructuredFormatter() if log_format is LogFormat.JSON else TextFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, log_level.value.upper()))
    logger.propagate = False
    return logger
