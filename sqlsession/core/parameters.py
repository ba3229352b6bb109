"""Typed parameter wrapper and SQL type codes.

A :class:`Parameter` carries an application value together with the Python
type it was declared with, so that a ``None`` value can still be bound as a
typed SQL null.
"""

import datetime
import decimal
import io
import time
import uuid
from enum import IntEnum
from typing import Any, Generic, Optional
from urllib.parse import ParseResult, SplitResult
from xml.etree.ElementTree import Element

import numpy as np
from typing_extensions import TypeVar

__all__ = ("Parameter", "SqlArray", "SqlType", "param")

T = TypeVar("T", default=Any)


class SqlType(IntEnum):
    """Generic SQL type codes (JDBC numbering, understood by most drivers)."""

    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    TIMESTAMP_WITH_TIMEZONE = 2014
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    NULL = 0
    OTHER = 1111
    ARRAY = 2003
    BOOLEAN = 16
    SQLXML = 2009
    DATALINK = 70


class SqlArray:
    """A driver-bound SQL array built by ``create_array_of``."""

    __slots__ = ("items", "type_name")

    def __init__(self, type_name: str, items: "tuple[Any, ...]") -> None:
        self.type_name = type_name
        self.items = items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self.type_name == other.type_name and self.items == other.items

    def __hash__(self) -> int:
        return hash((self.type_name, self.items))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type_name={self.type_name!r}, items={self.items!r})"


# Ordered: subclasses before their bases (bool before int, datetime before date).
_SQL_TYPE_BY_PYTHON_TYPE: "tuple[tuple[Any, SqlType], ...]" = (
    (np.bool_, SqlType.BOOLEAN),
    (np.int8, SqlType.TINYINT),
    (np.int16, SqlType.SMALLINT),
    (np.int32, SqlType.INTEGER),
    (np.integer, SqlType.BIGINT),
    (np.float32, SqlType.REAL),
    (np.floating, SqlType.DOUBLE),
    (np.datetime64, SqlType.TIMESTAMP),
    (str, SqlType.VARCHAR),
    (bool, SqlType.BOOLEAN),
    (int, SqlType.NUMERIC),
    (float, SqlType.DOUBLE),
    (decimal.Decimal, SqlType.DECIMAL),
    (datetime.datetime, SqlType.TIMESTAMP),
    (time.struct_time, SqlType.TIMESTAMP),
    (datetime.date, SqlType.DATE),
    (datetime.time, SqlType.TIME),
    (bytes, SqlType.BINARY),
    (bytearray, SqlType.BINARY),
    (memoryview, SqlType.BINARY),
    (io.TextIOBase, SqlType.LONGVARCHAR),
    (io.IOBase, SqlType.LONGVARBINARY),
    (SqlArray, SqlType.ARRAY),
    ((ParseResult, SplitResult), SqlType.VARCHAR),
    (Element, SqlType.SQLXML),
    (uuid.UUID, SqlType.OTHER),
)


def sql_type_for(type_: "Optional[type]") -> SqlType:
    """Return the SQL type code used for a null of the given Python type."""
    if type_ is None or type_ is type(None):
        return SqlType.OTHER
    for candidate, sql_type in _SQL_TYPE_BY_PYTHON_TYPE:
        if issubclass(type_, candidate):
            return sql_type
    return SqlType.OTHER


class Parameter(Generic[T]):
    """A nullable value with its declared type.

    Args:
        value: The application value, possibly ``None``.
        type_: Declared Python type. Defaults to ``type(value)``.
    """

    __slots__ = ("type_", "value")

    def __init__(self, value: "Optional[T]", type_: "Optional[type]" = None) -> None:
        self.value = value
        self.type_ = type_ if type_ is not None else (type(value) if value is not None else None)

    def sql_type(self) -> SqlType:
        return sql_type_for(self.type_)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self.value == other.value and self.type_ is other.type_

    def __hash__(self) -> int:
        try:
            return hash((self.value, self.type_))
        except TypeError:
            return hash((repr(self.value), self.type_))

    def __repr__(self) -> str:
        type_name = self.type_.__name__ if self.type_ is not None else None
        return f"{type(self).__name__}(value={self.value!r}, type_={type_name})"


def param(value: Any) -> Parameter[Any]:
    """Wrap a value as a :class:`Parameter`, keeping existing wrappers intact."""
    if isinstance(value, Parameter):
        return value
    return Parameter(value)
