"""Unit tests for binding query parameters into statement slots."""

from unittest.mock import MagicMock, call

from sqlsession.core.binder import bind_named_row, bind_positional_row, populate_params
from sqlsession.core.encoder import BoundValue, ValueKind
from sqlsession.core.parameters import Parameter, SqlType
from sqlsession.core.query import Query, query_of


def _text(value: str) -> BoundValue:
    return BoundValue(ValueKind.TEXT, value)


def test_positional_values_bind_at_one_based_slots() -> None:
    statement = MagicMock()

    result = populate_params(query_of("insert into t values (?, ?, ?)", "a", "b", "c"), statement)

    assert result is statement
    assert statement.bind.call_args_list == [call(1, _text("a")), call(2, _text("b")), call(3, _text("c"))]


def test_named_value_binds_at_every_occurrence() -> None:
    statement = MagicMock()
    query = Query("select :a, :b, :x, :c, :d, :x", param_map={"a": "a", "b": "b", "x": "x", "c": "c", "d": "d"})

    populate_params(query, statement)

    x_slots = [args[0] for args, _ in statement.bind.call_args_list if args[1] == _text("x")]
    assert x_slots == [3, 6]
    assert statement.bind.call_count == 6


def test_repeated_name_binds_same_value() -> None:
    statement = MagicMock()

    populate_params(query_of("select :x + :x", x=7), statement)

    integer = BoundValue(ValueKind.INTEGER, 7)
    assert statement.bind.call_args_list == [call(1, integer), call(2, integer)]


def test_missing_named_value_binds_untyped_null() -> None:
    statement = MagicMock()

    populate_params(query_of("select :present, :absent", present="here"), statement)

    assert statement.bind.call_args_list == [
        call(1, _text("here")),
        call(2, BoundValue(ValueKind.NULL, None, SqlType.OTHER)),
    ]


def test_named_typed_null() -> None:
    statement = MagicMock()

    bind_named_row(statement, {"email": [0]}, {"email": Parameter(None, str)})

    statement.bind.assert_called_once_with(1, BoundValue(ValueKind.NULL, None, SqlType.VARCHAR))


def test_bind_positional_row() -> None:
    statement = MagicMock()

    bind_positional_row(statement, [None, 2])

    assert statement.bind.call_args_list == [
        call(1, BoundValue(ValueKind.NULL, None, SqlType.OTHER)),
        call(2, BoundValue(ValueKind.INTEGER, 2)),
    ]
