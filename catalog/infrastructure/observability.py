"""Structured Logging - JSON formatter, setup, and the telemetry sink.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (operation_id, sku, error_code, path) surfaced when present
    - Telemetry events carry their kind under "event" plus every event field
    - JSON format in production, human-readable in development

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once on startup via lifespan
    - Telemetry rides on logging: one record per event, the kind is the message
"""

import logging
import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from catalog.core.domain_types import EventKind

TELEMETRY_LOGGER = "catalog.telemetry"

_WARNING_EVENTS = frozenset({EventKind.VALIDATION_FAILED})


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime,)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return str(value)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("operation_id", "sku", "error_code", "path"):
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        event_kind = record.__dict__.get("event_kind")
        if event_kind is not None:
            log["event"] = event_kind
            log.update(record.__dict__.get("event_fields") or {})
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=_json_default)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


class LoggingTelemetrySink:
    """TelemetrySink that writes each pipeline event as one log record."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(TELEMETRY_LOGGER)

    def emit(self, kind: EventKind, fields: dict[str, Any]) -> None:
        level = logging.WARNING if kind in _WARNING_EVENTS else logging.INFO
        message = fields.get("message") or kind.value
        self._logger.log(
            level, message,
            extra={
                "event_kind": kind.value,
                "event_fields": {k: v for k, v in fields.items() if k != "message"},
            },
        )
