"""Value encoding for statement binding.

The encoder turns an application value into a :class:`BoundValue`: a closed
``ValueKind`` tag plus the driver-native value for that kind. Dispatch is an
ordered table walked top to bottom; the first matching entry wins. Values that
match no entry are bound as :attr:`ValueKind.OBJECT` and handed to the driver
untouched, which is how driver-specific types such as ``uuid.UUID`` reach the
database.
"""

import datetime
import decimal
import io
import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Final, Optional
from urllib.parse import ParseResult, SplitResult
from xml.etree import ElementTree

import numpy as np
from mypy_extensions import mypyc_attr

from sqlsession.core.parameters import Parameter, SqlArray, SqlType

if TYPE_CHECKING:
    from sqlsession.protocols import PreparedStatementProtocol

__all__ = ("MAX_32BIT_INT", "MIN_32BIT_INT", "BoundValue", "ValueKind", "bind_parameter", "encode_value")

MAX_32BIT_INT: Final[int] = 2147483647
MIN_32BIT_INT: Final[int] = -2147483648


class ValueKind(str, Enum):
    """Driver-level binding categories."""

    NULL = "null"
    TEXT = "text"
    BYTE = "byte"
    BOOLEAN = "boolean"
    SHORT = "short"
    INTEGER = "integer"
    BIGINT = "bigint"
    FLOAT = "float"
    DOUBLE = "double"
    TIMESTAMP = "timestamp"
    TIMESTAMP_TZ = "timestamp_tz"
    DATE = "date"
    TIME = "time"
    DECIMAL = "decimal"
    BINARY = "binary"
    STREAM = "stream"
    ARRAY = "array"
    URL = "url"
    XML = "xml"
    OBJECT = "object"

    def __str__(self) -> str:
        return self.value


@mypyc_attr(allow_interpreted_subclasses=False)
class BoundValue:
    """A value ready to be placed in a statement slot."""

    __slots__ = ("kind", "sql_type", "value")

    def __init__(self, kind: ValueKind, value: Any, sql_type: "Optional[SqlType]" = None) -> None:
        self.kind = kind
        self.value = value
        self.sql_type = sql_type

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self.kind is other.kind and self.value == other.value and self.sql_type == other.sql_type

    def __hash__(self) -> int:
        try:
            return hash((self.kind, self.value, self.sql_type))
        except TypeError:
            return hash((self.kind, repr(self.value), self.sql_type))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!s}, value={self.value!r}, sql_type={self.sql_type!r})"


def _int_kind(value: int) -> ValueKind:
    if MIN_32BIT_INT <= value <= MAX_32BIT_INT:
        return ValueKind.INTEGER
    return ValueKind.BIGINT


def _encode_datetime(value: datetime.datetime) -> BoundValue:
    if value.tzinfo is not None and value.utcoffset() is not None:
        return BoundValue(ValueKind.TIMESTAMP_TZ, value.astimezone(datetime.timezone.utc))
    return BoundValue(ValueKind.TIMESTAMP, value)


def _encode_datetime64(value: np.datetime64) -> BoundValue:
    if np.isnat(value):
        return BoundValue(ValueKind.NULL, None, SqlType.TIMESTAMP)
    return BoundValue(ValueKind.TIMESTAMP, value.astype("datetime64[us]").item())


def _encode_stream(value: io.IOBase) -> BoundValue:
    return BoundValue(ValueKind.STREAM, value.read())  # type: ignore[attr-defined]


_Encoder = Callable[[Any], BoundValue]

_ENCODERS: "Final[tuple[tuple[Any, _Encoder], ...]]" = (
    (np.datetime64, _encode_datetime64),
    (np.bool_, lambda v: BoundValue(ValueKind.BOOLEAN, bool(v))),
    (np.int8, lambda v: BoundValue(ValueKind.BYTE, int(v))),
    (np.int16, lambda v: BoundValue(ValueKind.SHORT, int(v))),
    (np.int32, lambda v: BoundValue(ValueKind.INTEGER, int(v))),
    (np.integer, lambda v: BoundValue(ValueKind.BIGINT, int(v))),
    (np.float32, lambda v: BoundValue(ValueKind.FLOAT, float(v))),
    (np.floating, lambda v: BoundValue(ValueKind.DOUBLE, float(v))),
    (str, lambda v: BoundValue(ValueKind.TEXT, v)),
    (bool, lambda v: BoundValue(ValueKind.BOOLEAN, v)),
    (int, lambda v: BoundValue(_int_kind(v), v)),
    (float, lambda v: BoundValue(ValueKind.DOUBLE, v)),
    (datetime.datetime, _encode_datetime),
    (time.struct_time, lambda v: BoundValue(ValueKind.TIMESTAMP, datetime.datetime(*v[:6]))),
    (datetime.date, lambda v: BoundValue(ValueKind.DATE, v)),
    (datetime.time, lambda v: BoundValue(ValueKind.TIME, v)),
    (decimal.Decimal, lambda v: BoundValue(ValueKind.DECIMAL, v)),
    ((bytes, bytearray, memoryview), lambda v: BoundValue(ValueKind.BINARY, bytes(v))),
    (io.IOBase, _encode_stream),
    (SqlArray, lambda v: BoundValue(ValueKind.ARRAY, v)),
    ((ParseResult, SplitResult), lambda v: BoundValue(ValueKind.URL, v.geturl())),
    (ElementTree.Element, lambda v: BoundValue(ValueKind.XML, ElementTree.tostring(v, encoding="unicode"))),
)


def encode_value(value: Any, sql_type: "Optional[SqlType]" = None) -> BoundValue:
    """Encode a single application value.

    Args:
        value: The value to encode.
        sql_type: Declared SQL type, required to bind a typed null.

    Returns:
        The driver-level binding for ``value``.
    """
    if value is None:
        return BoundValue(ValueKind.NULL, None, sql_type if sql_type is not None else SqlType.OTHER)
    for value_type, encoder in _ENCODERS:
        if isinstance(value, value_type):
            return encoder(value)
    return BoundValue(ValueKind.OBJECT, value)


def bind_parameter(statement: "PreparedStatementProtocol", index: int, parameter: Parameter[Any]) -> None:
    """Bind ``parameter`` into 1-based slot ``index`` of ``statement``."""
    statement.bind(index, encode_value(parameter.value, parameter.sql_type()))
