"""Session: statement execution, result policy and transaction scoping."""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from contextlib import closing
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, TypeVar

from mypy_extensions import mypyc_attr

from sqlsession.config import SessionConfig
from sqlsession.core.result import RowCursor
from sqlsession.dialects import Dialect
from sqlsession.driver._statement import StatementBuilder
from sqlsession.exceptions import MultipleResultsFoundError, NotFoundError, TransactionError
from sqlsession.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from sqlsession.core.query import Query
    from sqlsession.core.result import Row
    from sqlsession.protocols import ConnectionProtocol, ResultSetProtocol

__all__ = ("Session", "SessionState", "TransactionalSession")

logger = get_logger("driver.session")

A = TypeVar("A")


class SessionState(str, Enum):
    """Whether a transaction opened through :meth:`Session.transaction` is in progress."""

    PLAIN = "plain"
    IN_TRANSACTION = "in_transaction"


def _drain_keys(result_set: "ResultSetProtocol") -> "list[int]":
    keys: list[int] = []
    while (row := result_set.fetchone()) is not None:
        keys.append(int(row[0]))
    return keys


@mypyc_attr(allow_interpreted_subclasses=True)
class Session:
    """Executes queries against one connection.

    Args:
        connection: The connection capability to drive.
        config: Session options. Keyword ``options`` override individual fields.
        dialect: Skip negotiation and use this dialect.
        **options: Overrides applied to ``config``
            (``return_generated_keys``, ``generated_key_columns``, ``strict``, ``query_timeout``).

    Example:
        >>> with session_of(sqlite3.connect(":memory:")) as session:
        ...     session.update(query_of("create table members (id integer primary key, name text)"))
        ...     session.update_and_return_generated_key(
        ...         query_of("insert into members (name) values (:name)", name="Alice")
        ...     )
        1
    """

    __slots__ = ("_builder", "config", "connection", "dialect", "state")

    def __init__(
        self,
        connection: "ConnectionProtocol",
        config: "Optional[SessionConfig]" = None,
        *,
        dialect: "Optional[Dialect]" = None,
        **options: Any,
    ) -> None:
        config = config or SessionConfig()
        if options:
            config = config.replace(**options)
        self.connection = connection
        self.config = config
        self.dialect = dialect if dialect is not None else Dialect.from_driver_name(connection.driver_name)
        self.state = SessionState.PLAIN
        self._builder = StatementBuilder(connection, config, self.dialect)

    @property
    def transactional(self) -> bool:
        return self.state is SessionState.IN_TRANSACTION

    @property
    def strict(self) -> bool:
        return self.config.strict

    def close(self) -> None:
        self.state = SessionState.PLAIN
        self.connection.close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dialect={self.dialect!s}, state={self.state.value}, config={self.config!r})"

    def create_array_of(self, type_name: str, items: "Iterable[Any]") -> Any:
        """Build a driver-native SQL array that can be passed as a parameter."""
        return self.connection.create_array_of(type_name, items)

    def _warn_if_transactional(self, operation: str) -> None:
        if self.transactional:
            log_with_context(
                logger,
                logging.WARNING,
                "Use the transactional session passed to transaction() instead of the outer session",
                operation=operation,
                dialect=str(self.dialect),
            )

    def _rows(self, query: "Query", extractor: "Callable[[Row], Optional[A]]") -> "list[A]":
        with closing(self._builder.create_prepared_statement(query)) as statement:
            with RowCursor(statement.execute_query()) as rows:
                return [value for value in rows.map(extractor) if value is not None]

    # Result shapes

    def single(self, query: "Query", extractor: "Callable[[Row], Optional[A]]") -> "Optional[A]":
        """Return the only row of ``query`` or ``None``.

        In strict mode more than one row raises :class:`MultipleResultsFoundError`;
        otherwise the first row wins.
        """
        self._warn_if_transactional("single")
        results = self._rows(query, extractor)
        if self.config.strict and len(results) > 1:
            raise MultipleResultsFoundError(len(results))
        return results[0] if results else None

    def list(self, query: "Query", extractor: "Callable[[Row], Optional[A]]") -> "list[A]":
        """Return every row of ``query`` the extractor maps to a value, in result order."""
        self._warn_if_transactional("list")
        return self._rows(query, extractor)

    def for_each(self, query: "Query", operator: "Callable[[Row], Any]") -> None:
        """Stream every row of ``query`` through ``operator`` without collecting them."""
        self._warn_if_transactional("for_each")
        with closing(self._builder.create_prepared_statement(query)) as statement:
            with RowCursor(statement.execute_query()) as rows:
                rows.for_each(operator)

    def execute(self, query: "Query") -> bool:
        self._warn_if_transactional("execute")
        with closing(self._builder.create_prepared_statement(query)) as statement:
            return statement.execute()

    def update(self, query: "Query") -> int:
        """Execute ``query`` and return the affected-row count."""
        self._warn_if_transactional("update")
        with closing(self._builder.create_prepared_statement(query)) as statement:
            return statement.execute_update()

    def update_and_return_generated_key(self, query: "Query") -> "Optional[int]":
        """Execute ``query`` and return the key generated for it.

        Returns ``None`` without reading generated keys when no row was affected.

        Raises:
            NotFoundError: Rows were affected but the driver reported no key.
        """
        self._warn_if_transactional("update_and_return_generated_key")
        with closing(self._builder.create_prepared_statement(query)) as statement:
            if statement.execute_update() <= 0:
                return None
            with closing(statement.generated_keys()) as keys:
                row = keys.fetchone()
                if row is None:
                    log_with_context(
                        logger,
                        logging.WARNING,
                        "Generated keys result is unexpectedly empty",
                        statement=query.statement,
                    )
                    msg = f"No generated key is available for {query.statement!r}"
                    raise NotFoundError(msg)
                return int(row[0])

    # Batches

    def _batch(
        self, statement: str, params: "Sequence[Sequence[Any]]", named_params: "Sequence[Mapping[str, Any]]"
    ) -> "list[int]":
        prepared = self._builder.create_batch_statement(statement, params, named_params, generated_keys=False)
        with closing(prepared):
            return list(prepared.execute_batch())

    def _batch_returning_generated_keys(
        self, statement: str, params: "Sequence[Sequence[Any]]", named_params: "Sequence[Mapping[str, Any]]"
    ) -> "list[int]":
        prepared = self._builder.create_batch_statement(statement, params, named_params, generated_keys=True)
        with closing(prepared):
            prepared.execute_batch()
            with closing(prepared.generated_keys()) as result_set:
                keys = _drain_keys(result_set)
        if not keys:
            log_with_context(
                logger,
                logging.WARNING,
                "Generated keys result is unexpectedly empty for batch",
                statement=statement,
                row_count=len(params) + len(named_params),
            )
        return keys

    def batch_prepared_statement(self, statement: str, params: "Sequence[Sequence[Any]]") -> "list[int]":
        """Execute ``statement`` once per positional parameter row; return per-row counts."""
        self._warn_if_transactional("batch_prepared_statement")
        return self._batch(statement, params, ())

    def batch_prepared_statement_and_return_generated_keys(
        self, statement: str, params: "Sequence[Sequence[Any]]"
    ) -> "list[int]":
        self._warn_if_transactional("batch_prepared_statement_and_return_generated_keys")
        return self._batch_returning_generated_keys(statement, params, ())

    def batch_prepared_named_statement(self, statement: str, params: "Sequence[Mapping[str, Any]]") -> "list[int]":
        """Execute ``statement`` once per named parameter row; return per-row counts."""
        self._warn_if_transactional("batch_prepared_named_statement")
        return self._batch(statement, (), params)

    def batch_prepared_named_statement_and_return_generated_keys(
        self, statement: str, params: "Sequence[Mapping[str, Any]]"
    ) -> "list[int]":
        self._warn_if_transactional("batch_prepared_named_statement_and_return_generated_keys")
        return self._batch_returning_generated_keys(statement, (), params)

    # Transactions

    def transaction(self, operation: "Callable[[TransactionalSession], A]") -> A:
        """Run ``operation`` inside a transaction.

        ``operation`` receives a :class:`TransactionalSession` sharing this
        session's connection. The transaction commits when ``operation``
        returns and rolls back when ``begin``, ``operation`` or ``commit``
        raises; the original exception is re-raised.
        """
        try:
            self.connection.begin()
            self.state = SessionState.IN_TRANSACTION
            tx = TransactionalSession(self.connection, self.config, dialect=self.dialect)
            result = operation(tx)
            self.connection.commit()
            return result
        except BaseException:
            self._rollback()
            raise
        finally:
            self.state = SessionState.PLAIN

    def _rollback(self) -> None:
        try:
            self.connection.rollback()
        except Exception:
            logger.exception("Rollback failed; re-raising the error that triggered it")


@mypyc_attr(allow_interpreted_subclasses=True)
class TransactionalSession(Session):
    """The session handed to :meth:`Session.transaction` operations."""

    __slots__ = ()

    def transaction(self, operation: "Callable[[TransactionalSession], A]") -> A:
        msg = "Nested transactions are not supported; use the transactional session directly"
        raise TransactionError(msg)
