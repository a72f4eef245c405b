"""Structured Logging — JSON formatter, setup, and the stdlib-backed dispatch log sink.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (path, action, category, error_code) surfaced when present
    - JSON format in production, human-readable in development
    - setup_logging is idempotent: calling it twice never doubles output

Design Decisions:
    - StdlibLogSink maps a sink category to the logger "api_dispatch.<category>"
"""

import json
import logging
from datetime import datetime, timezone

from api_dispatch.core.boundary_protocols import LogLevel

_EXTRA_KEYS = ("path", "action", "category", "error_code")
_LEVELS = {"info": logging.INFO, "error": logging.ERROR}


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


class _DispatchHandler(logging.StreamHandler):
    """Marker type so setup_logging can find the handler it installed."""


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure logging for the application."""
    for existing in list(logging.root.handlers):
        if isinstance(existing, _DispatchHandler):
            logging.root.removeHandler(existing)
    handler = _DispatchHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


class StdlibLogSink:
    """LogSink that writes through the logging module."""

    def __init__(self, namespace: str = "api_dispatch"):
        self._namespace = namespace

    def log(self, message: str, category: str, level: LogLevel) -> None:
        logger = logging.getLogger(f"{self._namespace}.{category}")
        logger.log(
            _LEVELS.get(level, logging.INFO), message,
            extra={"category": category},
        )
