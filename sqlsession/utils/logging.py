"""Loggers and structured diagnostics for sqlsession.

Library loggers live under the ``sqlsession`` namespace and never install
handlers. Diagnostics are emitted through :func:`log_with_context`, which
attaches their fields to the record as ``extra_fields``; attach
:class:`StructuredFormatter` to a handler to render those records as JSON.
"""

import logging
from contextvars import ContextVar
from typing import Any, Optional

from sqlsession.utils.serializers import to_json

__all__ = (
    "CorrelationIDFilter",
    "StructuredFormatter",
    "correlation_id_var",
    "get_correlation_id",
    "get_logger",
    "log_with_context",
    "set_correlation_id",
)

ROOT_LOGGER_NAME = "sqlsession"

correlation_id_var: "ContextVar[Optional[str]]" = ContextVar("sqlsession_correlation_id", default=None)


def set_correlation_id(correlation_id: "Optional[str]") -> None:
    """Tag records logged from the current context with ``correlation_id``; ``None`` clears it."""
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> "Optional[str]":
    return correlation_id_var.get()


class CorrelationIDFilter(logging.Filter):
    """Copies the context's correlation ID onto each record it sees."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id is not None:
            record.correlation_id = correlation_id  # type: ignore[attr-defined]
        return True


class StructuredFormatter(logging.Formatter):
    """Render a record and its ``extra_fields`` as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = getattr(record, "correlation_id", None) or get_correlation_id()
        if correlation_id is not None:
            entry["correlation_id"] = correlation_id
        entry.update(getattr(record, "extra_fields", {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return to_json(entry)


def get_logger(name: "Optional[str]" = None) -> logging.Logger:
    """Return ``sqlsession.<name>``, or the namespace root when ``name`` is omitted.

    Named loggers carry a :class:`CorrelationIDFilter`.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if not any(isinstance(existing, CorrelationIDFilter) for existing in logger.filters):
        logger.addFilter(CorrelationIDFilter())
    return logger


def log_with_context(logger: logging.Logger, level: int, message: str, **extra_fields: Any) -> None:
    """Log ``message`` with ``extra_fields`` attached for :class:`StructuredFormatter`.

    Args:
        logger: The logger to use.
        level: Log level.
        message: Log message, used verbatim.
        **extra_fields: Structured fields describing the event.
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, extra={"extra_fields": extra_fields})
