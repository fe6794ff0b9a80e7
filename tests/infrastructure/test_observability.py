"""Tests for JSONFormatter and LoggingTelemetrySink."""

import json
import logging

from catalog.core.domain_types import EventKind
from catalog.infrastructure.observability import JSONFormatter, LoggingTelemetrySink


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


def _sink():
    logger = logging.getLogger("tests.telemetry")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = ListHandler()
    logger.handlers = [handler]
    return LoggingTelemetrySink(logger), handler


def test_formatter_surfaces_known_extras():
    record = logging.LogRecord("catalog", logging.INFO, __file__, 1, "hello", None, None)
    record.operation_id = "ab12cd34"
    record.sku = "LAP-12345"
    out = json.loads(JSONFormatter().format(record))
    assert out["message"] == "hello"
    assert out["level"] == "INFO"
    assert out["operation_id"] == "ab12cd34"
    assert out["sku"] == "LAP-12345"
    assert "error_code" not in out


def test_sink_logs_event_kind_and_fields():
    sink, handler = _sink()
    sink.emit(EventKind.CACHE_INVALIDATED, {
        "operation_id": "ab12cd34", "message": "Cache invalidated", "cache_key": "all_products",
    })
    [record] = handler.records
    assert record.levelno == logging.INFO
    assert record.getMessage() == "Cache invalidated"
    out = json.loads(JSONFormatter().format(record))
    assert out["event"] == "CacheInvalidated"
    assert out["cache_key"] == "all_products"
    assert out["operation_id"] == "ab12cd34"


def test_validation_failed_is_a_warning():
    sink, handler = _sink()
    sink.emit(EventKind.VALIDATION_FAILED, {"message": "bad"})
    assert handler.records[0].levelno == logging.WARNING


def test_message_defaults_to_event_kind():
    sink, handler = _sink()
    sink.emit(EventKind.METRICS_RECORDED, {"total_ms": 1.5})
    assert handler.records[0].getMessage() == "MetricsRecorded"
