"""Fill prepared-statement slots from query parameters.

Slots are 1-based. Named parameters are bound at every occurrence recorded in
the query's replacement map; otherwise positional values are bound in order.
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sqlsession.core.encoder import bind_parameter
from sqlsession.core.parameters import param

if TYPE_CHECKING:
    from sqlsession.core.query import Query
    from sqlsession.protocols import PreparedStatementProtocol

__all__ = ("bind_named_row", "bind_positional_row", "populate_params")


def bind_named_row(
    statement: "PreparedStatementProtocol", occurrences: "Mapping[str, Sequence[int]]", values: "Mapping[str, Any]"
) -> None:
    """Bind each name's value at all of its occurrences."""
    for name, indices in occurrences.items():
        parameter = param(values.get(name))
        for occurrence in indices:
            bind_parameter(statement, occurrence + 1, parameter)


def bind_positional_row(statement: "PreparedStatementProtocol", values: "Sequence[Any]") -> None:
    for index, value in enumerate(values):
        bind_parameter(statement, index + 1, param(value))


def populate_params(query: "Query", statement: "PreparedStatementProtocol") -> "PreparedStatementProtocol":
    """Bind every parameter of ``query`` into ``statement`` and return it."""
    if query.replacement_map:
        bind_named_row(statement, query.replacement_map, query.param_map)
    else:
        bind_positional_row(statement, query.params)
    return statement
