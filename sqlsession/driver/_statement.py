"""Statement preparation for sessions."""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from mypy_extensions import mypyc_attr

from sqlsession.core.binder import bind_named_row, bind_positional_row, populate_params
from sqlsession.core.query import Query

if TYPE_CHECKING:
    from sqlsession.config import SessionConfig
    from sqlsession.dialects import Dialect
    from sqlsession.protocols import ConnectionProtocol, PreparedStatementProtocol

__all__ = ("StatementBuilder",)


@mypyc_attr(allow_interpreted_subclasses=False)
class StatementBuilder:
    """Prepares and binds statements according to a session's configuration."""

    __slots__ = ("config", "connection", "dialect")

    def __init__(self, connection: "ConnectionProtocol", config: "SessionConfig", dialect: "Dialect") -> None:
        self.connection = connection
        self.config = config
        self.dialect = dialect

    def prepare(self, sql: str, *, generated_keys: bool) -> "PreparedStatementProtocol":
        """Prepare ``sql`` and apply the configured timeout.

        In generated-key mode, dialects that only report keys for named columns
        are given the configured key columns instead of the generic flag. Without
        configured columns those dialects fall back to the flag.
        """
        if not generated_keys:
            statement = self.connection.prepare(sql)
        elif self.dialect.requires_key_columns and self.config.generated_key_columns:
            statement = self.connection.prepare(sql, key_columns=self.config.generated_key_columns)
        else:
            statement = self.connection.prepare(sql, return_generated_keys=True)
        if self.config.query_timeout is not None:
            statement.query_timeout = self.config.query_timeout
        return statement

    def create_prepared_statement(self, query: Query) -> "PreparedStatementProtocol":
        """Prepare and fully bind ``query``. The caller closes the returned statement."""
        statement = self.prepare(query.clean_statement, generated_keys=self.config.return_generated_keys)
        try:
            return populate_params(query, statement)
        except BaseException:
            statement.close()
            raise

    def create_batch_statement(
        self,
        statement: str,
        params: "Sequence[Sequence[Any]]",
        named_params: "Sequence[Mapping[str, Any]]",
        *,
        generated_keys: bool,
    ) -> "PreparedStatementProtocol":
        """Prepare ``statement`` once and queue one batch unit per parameter row.

        Named rows take precedence; the occurrence map is derived from the raw
        statement text once for the whole batch.
        """
        prepared = self.prepare(Query(statement).clean_statement, generated_keys=generated_keys)
        try:
            if named_params:
                occurrences = Query.extract_named_params_indexed(statement)
                for values in named_params:
                    bind_named_row(prepared, occurrences, values)
                    prepared.add_batch()
            else:
                for row in params:
                    bind_positional_row(prepared, row)
                    prepared.add_batch()
        except BaseException:
            prepared.close()
            raise
        return prepared
