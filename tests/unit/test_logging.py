"""Unit tests for the logging utilities.

This module tests:
- Logger naming under the sqlsession namespace
- Correlation ID propagation through the filter and formatter
- Structured rendering of session diagnostics
"""

import logging
from collections.abc import Generator
from typing import Optional
from unittest.mock import MagicMock

import pytest

from sqlsession import Session, query_of
from sqlsession.utils.logging import (
    CorrelationIDFilter,
    StructuredFormatter,
    get_correlation_id,
    get_logger,
    log_with_context,
    set_correlation_id,
)
from sqlsession.utils.serializers import from_json


@pytest.fixture(autouse=True)
def clear_correlation_id() -> Generator[None, None, None]:
    yield
    set_correlation_id(None)


def _record(message: str = "hello", **extra_fields: object) -> logging.LogRecord:
    record = logging.LogRecord("sqlsession.test", logging.WARNING, __file__, 10, message, None, None)
    if extra_fields:
        record.extra_fields = extra_fields  # type: ignore[attr-defined]
    return record


@pytest.mark.parametrize(
    "name,expected",
    [
        ("driver.session", "sqlsession.driver.session"),
        ("sqlsession.core", "sqlsession.core"),
        ("sqlsession", "sqlsession"),
        ("sqlsessions", "sqlsession.sqlsessions"),
        (None, "sqlsession"),
    ],
)
def test_get_logger_namespaces_names(name: "Optional[str]", expected: str) -> None:
    assert get_logger(name).name == expected


def test_get_logger_adds_filter_once() -> None:
    logger = get_logger("tests.filters")
    get_logger("tests.filters")

    assert sum(isinstance(f, CorrelationIDFilter) for f in logger.filters) == 1


def test_structured_formatter_includes_extra_fields() -> None:
    payload = from_json(StructuredFormatter().format(_record(statement="select 1")))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "sqlsession.test"
    assert payload["message"] == "hello"
    assert payload["statement"] == "select 1"
    assert "correlation_id" not in payload


def test_structured_formatter_includes_correlation_id() -> None:
    set_correlation_id("req-1")

    payload = from_json(StructuredFormatter().format(_record()))

    assert payload["correlation_id"] == "req-1"


def test_correlation_filter_sets_attribute() -> None:
    set_correlation_id("req-2")
    record = _record()

    assert CorrelationIDFilter().filter(record) is True
    assert record.correlation_id == "req-2"  # type: ignore[attr-defined]
    assert get_correlation_id() == "req-2"


def test_log_with_context(caplog: pytest.LogCaptureFixture) -> None:
    logger = get_logger("tests.context")

    with caplog.at_level(logging.INFO, logger="sqlsession"):
        log_with_context(logger, logging.INFO, "prepared", dialect="sqlite")
        log_with_context(logger, logging.DEBUG, "suppressed")

    assert [record.getMessage() for record in caplog.records] == ["prepared"]
    assert caplog.records[0].extra_fields == {"dialect": "sqlite"}  # type: ignore[attr-defined]


def test_session_diagnostic_renders_as_json(
    mock_connection: MagicMock, mock_statement: MagicMock, caplog: pytest.LogCaptureFixture
) -> None:
    session = Session(mock_connection)
    set_correlation_id("req-3")

    with caplog.at_level(logging.WARNING, logger="sqlsession"):
        session.transaction(lambda tx: session.update(query_of("delete from members")))

    payload = from_json(StructuredFormatter().format(caplog.records[0]))
    assert payload["logger"] == "sqlsession.driver.session"
    assert payload["operation"] == "update"
    assert payload["dialect"] == "sqlite"
    assert payload["correlation_id"] == "req-3"
