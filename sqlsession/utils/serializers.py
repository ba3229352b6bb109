"""JSON serialization utilities for sqlsession.

Thin wrappers around :mod:`msgspec` used by the structured log formatter.
"""

import datetime
import decimal
import enum
import uuid
from typing import Any, Literal, overload

import msgspec

__all__ = ("from_json", "to_json")


def _enc_hook(value: Any) -> Any:
    """Encode values msgspec does not handle natively."""
    if isinstance(value, (decimal.Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return repr(value)


_encoder = msgspec.json.Encoder(enc_hook=_enc_hook)
_decoder = msgspec.json.Decoder()


@overload
def to_json(data: Any, *, as_bytes: Literal[False] = ...) -> str: ...


@overload
def to_json(data: Any, *, as_bytes: Literal[True]) -> bytes: ...


def to_json(data: Any, *, as_bytes: bool = False) -> "str | bytes":
    """Encode data to JSON string or bytes.

    Args:
        data: Data to encode.
        as_bytes: Whether to return bytes instead of string.

    Returns:
        JSON string or bytes representation based on as_bytes parameter.
    """
    encoded = _encoder.encode(data)
    if as_bytes:
        return encoded
    return encoded.decode("utf-8")


def from_json(data: "str | bytes") -> Any:
    """Decode a JSON string or bytes to a Python object."""
    return _decoder.decode(data)
