"""sqlsession: session-scoped SQL execution over DB-API connections."""

from sqlsession import adapters, core, driver, exceptions, utils
from sqlsession.__metadata__ import __version__
from sqlsession.adapters.dbapi import DbapiConnection
from sqlsession.base import session_of
from sqlsession.config import SessionConfig
from sqlsession.core import Parameter, Query, Row, RowCursor, SqlArray, SqlType, param, query_of
from sqlsession.dialects import Dialect
from sqlsession.driver import Session, SessionState, TransactionalSession
from sqlsession.exceptions import (
    ImproperConfigurationError,
    MultipleResultsFoundError,
    NotFoundError,
    SQLSessionError,
    TransactionError,
)
from sqlsession.protocols import ConnectionProtocol, PreparedStatementProtocol, ResultSetProtocol

__all__ = (
    "ConnectionProtocol",
    "DbapiConnection",
    "Dialect",
    "ImproperConfigurationError",
    "MultipleResultsFoundError",
    "NotFoundError",
    "Parameter",
    "PreparedStatementProtocol",
    "Query",
    "ResultSetProtocol",
    "Row",
    "RowCursor",
    "SQLSessionError",
    "Session",
    "SessionConfig",
    "SessionState",
    "SqlArray",
    "SqlType",
    "TransactionError",
    "TransactionalSession",
    "__version__",
    "adapters",
    "core",
    "driver",
    "exceptions",
    "param",
    "query_of",
    "session_of",
    "utils",
)
