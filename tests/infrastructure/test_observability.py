"""Observability — tests for the JSON formatter, setup_logging and StdlibLogSink."""

import json
import logging

from api_dispatch.infrastructure.observability import (
    JSONFormatter, StdlibLogSink, _DispatchHandler, setup_logging,
)


def test_json_formatter_surfaces_extra_fields():
    record = logging.LogRecord(
        "api_dispatch.api", logging.ERROR, __file__, 1, "boom", None, None,
    )
    record.category = "api"
    record.path = "/api/x"
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "boom"
    assert payload["level"] == "ERROR"
    assert payload["category"] == "api"
    assert payload["path"] == "/api/x"
    assert "error_code" not in payload


def test_setup_logging_is_idempotent():
    setup_logging("INFO", "text")
    setup_logging("DEBUG", "json")
    installed = [h for h in logging.root.handlers if isinstance(h, _DispatchHandler)]
    assert len(installed) == 1
    assert isinstance(installed[0].formatter, JSONFormatter)
    assert logging.root.level == logging.DEBUG


def test_stdlib_sink_routes_category_and_level(caplog):
    sink = StdlibLogSink()
    with caplog.at_level(logging.INFO, logger="api_dispatch"):
        sink.log(">> Api Request: /api/x; Params: {}", "api", "info")
        sink.log("Api Request Error", "api", "error")
    assert [r.name for r in caplog.records] == ["api_dispatch.api", "api_dispatch.api"]
    assert [r.levelno for r in caplog.records] == [logging.INFO, logging.ERROR]
    assert caplog.records[0].category == "api"
