"""Tests for logging setup and structured output."""

from __future__ import annotations

import logging

import orjson

from tedexplorer.core.logging import (
    JSONFormatter,
    get_contextual_logger,
    get_logger,
    setup_logging,
)


def test_json_lines_carry_context():
    record = logging.LogRecord("tedexplorer.search", logging.WARNING, __file__, 1, "failed %s", ("count",), None)
    record.phase = "count"
    record.endpoint = "https://sparql.test/sparql"

    data = orjson.loads(JSONFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["logger"] == "tedexplorer.search"
    assert data["message"] == "failed count"
    assert data["phase"] == "count"
    assert data["endpoint"] == "https://sparql.test/sparql"
    assert "session" not in data


def test_contextual_logger_adds_fields(caplog):
    log = get_contextual_logger("search", endpoint="https://sparql.test/sparql").with_context(session=4)

    with caplog.at_level(logging.INFO, logger="tedexplorer"):
        log.info("hello", extra={"page": 2})

    (record,) = caplog.records
    assert record.endpoint == "https://sparql.test/sparql"
    assert record.session == 4
    assert record.page == 2


def test_setup_logging_writes_json_file(tmp_path):
    log_file = tmp_path / "logs" / "app.log"
    logger = setup_logging(level="DEBUG", log_file=log_file, json_format=True, rich_console=False)
    try:
        get_logger("export").info("Exported %d result(s)", 3)
        for handler in logger.handlers:
            handler.flush()
        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert orjson.loads(line)["message"] == "Exported 3 result(s)"
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
