"""Runtime-checkable protocols for the connection capability a session drives.

Any object satisfying :class:`ConnectionProtocol` can back a
:class:`~sqlsession.driver.session.Session`;
:class:`~sqlsession.adapters.dbapi.DbapiConnection` is the bundled implementation
for PEP 249 drivers.
"""

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlsession.core.encoder import BoundValue

__all__ = ("ConnectionProtocol", "PreparedStatementProtocol", "ResultSetProtocol")


@runtime_checkable
class ResultSetProtocol(Protocol):
    """A forward-only result set."""

    @property
    def description(self) -> "Optional[Sequence[Sequence[Any]]]":
        """PEP 249 column description, first item of each entry is the label."""
        ...

    def fetchone(self) -> "Optional[Sequence[Any]]":
        """Return the next row or None when exhausted."""
        ...

    def close(self) -> None:
        """Release the result set."""
        ...


@runtime_checkable
class PreparedStatementProtocol(Protocol):
    """A prepared statement with 1-based parameter slots."""

    query_timeout: "Optional[float]"

    def bind(self, index: int, value: "BoundValue") -> None:
        """Place ``value`` into slot ``index``."""
        ...

    def add_batch(self) -> None:
        """Queue the currently bound slots as one batch unit and clear them."""
        ...

    def execute(self) -> bool:
        """Execute and report whether the statement produced rows."""
        ...

    def execute_query(self) -> ResultSetProtocol:
        """Execute a row-producing statement."""
        ...

    def execute_update(self) -> int:
        """Execute a statement and return the affected-row count."""
        ...

    def execute_batch(self) -> "list[int]":
        """Execute every queued batch unit and return their affected-row counts in order."""
        ...

    def generated_keys(self) -> ResultSetProtocol:
        """Keys generated by the last execution."""
        ...

    def close(self) -> None:
        """Release the statement and any driver resources it holds."""
        ...


@runtime_checkable
class ConnectionProtocol(Protocol):
    """The capability a session needs from a database connection."""

    @property
    def driver_name(self) -> str:
        """Identifies the underlying driver, e.g. ``sqlite3`` or ``oracledb``."""
        ...

    def prepare(
        self, sql: str, *, return_generated_keys: bool = False, key_columns: "Optional[Sequence[str]]" = None
    ) -> PreparedStatementProtocol:
        """Prepare ``sql`` (``?`` placeholders), optionally capturing generated keys."""
        ...

    def begin(self) -> None:
        """Begin a transaction."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Roll back the current transaction."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...

    def create_array_of(self, type_name: str, items: "Iterable[Any]") -> Any:
        """Build a driver-native SQL array."""
        ...
