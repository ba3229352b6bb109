"""Query, parameter, encoding and row primitives."""

from sqlsession.core.binder import bind_named_row, bind_positional_row, populate_params
from sqlsession.core.encoder import BoundValue, ValueKind, bind_parameter, encode_value
from sqlsession.core.parameters import Parameter, SqlArray, SqlType, param
from sqlsession.core.query import Query, query_of
from sqlsession.core.result import Row, RowCursor

__all__ = (
    "BoundValue",
    "Parameter",
    "Query",
    "Row",
    "RowCursor",
    "SqlArray",
    "SqlType",
    "ValueKind",
    "bind_named_row",
    "bind_parameter",
    "bind_positional_row",
    "encode_value",
    "param",
    "populate_params",
    "query_of",
)
