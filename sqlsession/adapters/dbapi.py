"""Connection capability over PEP 249 (DB-API 2.0) drivers.

Statements are prepared with ``?`` placeholders and rendered to the driver's
``paramstyle`` at execution time. Bound values are coerced per dialect the
same way for every statement, e.g. SQLite receives temporal values as ISO
text because its stdlib adapters for them are deprecated.
"""

import datetime
import logging
import re
import sys
import time
from collections.abc import Callable, Generator, Iterable, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Final, Optional

from sqlsession.core.encoder import ValueKind
from sqlsession.core.parameters import SqlArray
from sqlsession.core.query import iter_placeholders
from sqlsession.dialects import Dialect
from sqlsession.exceptions import ImproperConfigurationError
from sqlsession.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from sqlsession.core.encoder import BoundValue

__all__ = ("DbapiConnection", "DbapiResultSet", "DbapiStatement", "KeyResultSet", "render_placeholders")

logger = get_logger("adapters.dbapi")

SUPPORTED_PARAMSTYLES: Final = frozenset({"qmark", "numeric", "named", "format", "pyformat"})
SQLITE_PROGRESS_STEPS: Final = 1000

_DML_REGEX: Final = re.compile(r"^\s*(?:insert|update|delete|merge)\b", re.IGNORECASE)


def _iso_text(value: Any) -> str:
    if isinstance(value, datetime.datetime):
        return value.isoformat(sep=" ")
    return value.isoformat()  # type: ignore[no-any-return]


_COERCIONS: "Final[dict[Dialect, dict[ValueKind, Callable[[Any], Any]]]]" = {
    Dialect.SQLITE: {
        ValueKind.BOOLEAN: int,
        ValueKind.TIMESTAMP: _iso_text,
        ValueKind.TIMESTAMP_TZ: _iso_text,
        ValueKind.DATE: _iso_text,
        ValueKind.TIME: _iso_text,
        ValueKind.DECIMAL: str,
        ValueKind.ARRAY: lambda v: list(v.items),
    },
}
_DEFAULT_COERCIONS: "Final[dict[ValueKind, Callable[[Any], Any]]]" = {ValueKind.ARRAY: lambda v: list(v.items)}


def render_placeholders(sql: str, paramstyle: str) -> str:
    """Rewrite ``?`` placeholders in ``sql`` for a driver ``paramstyle``.

    Quoted literals and comments are left untouched. For ``format`` and
    ``pyformat`` drivers literal ``%`` characters are doubled.
    """
    if paramstyle == "qmark":
        return sql
    if paramstyle not in SUPPORTED_PARAMSTYLES:
        msg = f"Unsupported DB-API paramstyle: {paramstyle!r}"
        raise ImproperConfigurationError(msg)
    percent_escaped = paramstyle in {"format", "pyformat"}
    parts: list[str] = []
    position = 0
    ordinal = 0
    for match in iter_placeholders(sql):
        if match.group("qmark") is None:
            continue
        segment = sql[position : match.start()]
        parts.append(segment.replace("%", "%%") if percent_escaped else segment)
        ordinal += 1
        parts.append("%s" if percent_escaped else f":{ordinal}")
        position = match.end()
    tail = sql[position:]
    parts.append(tail.replace("%", "%%") if percent_escaped else tail)
    return "".join(parts)


class KeyResultSet:
    """Generated keys collected by a statement, read back like a result set."""

    __slots__ = ("_position", "_rows", "description")

    def __init__(self, columns: "Sequence[str]", rows: "Sequence[Sequence[Any]]") -> None:
        self.description = tuple((column, None, None, None, None, None, None) for column in columns)
        self._rows = list(rows)
        self._position = 0

    def fetchone(self) -> "Optional[Sequence[Any]]":
        if self._position >= len(self._rows):
            return None
        row = self._rows[self._position]
        self._position += 1
        return row

    def close(self) -> None:
        self._rows = []
        self._position = 0


class DbapiResultSet:
    """A result set backed by a DB-API cursor; closing it closes the cursor."""

    __slots__ = ("cursor",)

    def __init__(self, cursor: Any) -> None:
        self.cursor = cursor

    @property
    def description(self) -> "Optional[Sequence[Sequence[Any]]]":
        return self.cursor.description  # type: ignore[no-any-return]

    def fetchone(self) -> "Optional[Sequence[Any]]":
        return self.cursor.fetchone()  # type: ignore[no-any-return]

    def close(self) -> None:
        self.cursor.close()


class DbapiStatement:
    """A prepared statement over a DB-API connection.

    DB-API has no server-side prepared statement handle, so slots are
    collected here and sent with ``cursor.execute`` when the statement runs.
    Batches execute one row at a time so every row reports its own count and
    generated keys.
    """

    __slots__ = (
        "_batch",
        "_cursors",
        "_keys",
        "_slots",
        "closed",
        "connection",
        "key_columns",
        "query_timeout",
        "return_generated_keys",
        "sql",
    )

    def __init__(
        self,
        connection: "DbapiConnection",
        sql: str,
        *,
        return_generated_keys: bool = False,
        key_columns: "Optional[Sequence[str]]" = None,
    ) -> None:
        self.connection = connection
        self.sql = sql
        self.return_generated_keys = return_generated_keys or bool(key_columns)
        self.key_columns: tuple[str, ...] = tuple(key_columns or ())
        self.query_timeout: Optional[float] = None
        self.closed = False
        self._slots: dict[int, BoundValue] = {}
        self._batch: list[list[Any]] = []
        self._cursors: list[Any] = []
        self._keys: list[tuple[Any, ...]] = []

    def bind(self, index: int, value: "BoundValue") -> None:
        self._slots[index] = value

    def _values(self) -> "list[Any]":
        coercions = _COERCIONS.get(self.connection.dialect, _DEFAULT_COERCIONS)
        values: list[Any] = []
        for index in sorted(self._slots):
            bound = self._slots[index]
            coerce = coercions.get(bound.kind)
            values.append(coerce(bound.value) if coerce is not None and not bound.is_null else bound.value)
        return values

    def add_batch(self) -> None:
        self._batch.append(self._values())
        self._slots = {}

    def _open_cursor(self) -> Any:
        cursor = self.connection.connection.cursor()
        self._cursors.append(cursor)
        return cursor

    def _captures_keys(self) -> bool:
        return self.return_generated_keys and _DML_REGEX.match(self.sql) is not None

    def _run(self, cursor: Any, values: "list[Any]") -> int:
        """Execute one parameter row on ``cursor``, capturing generated keys when enabled."""
        capture = self._captures_keys()
        dialect = self.connection.dialect
        sql = self.sql
        out_vars: list[Any] = []
        if capture and self.key_columns:
            columns = ", ".join(self.key_columns)
            if dialect is Dialect.ORACLE:
                out_vars = [cursor.var(int) for _ in self.key_columns]
                targets = ", ".join("?" for _ in out_vars)
                sql = f"{sql} RETURNING {columns} INTO {targets}"
            else:
                sql = f"{sql} RETURNING {columns}"
        with self.connection.timeout_scope(self.query_timeout):
            cursor.execute(self.connection.render(sql), [*values, *out_vars])
        rowcount = cursor.rowcount
        if capture:
            self._keys.extend(self._read_keys(cursor, out_vars))
        return rowcount  # type: ignore[no-any-return]

    def _read_keys(self, cursor: Any, out_vars: "list[Any]") -> "list[tuple[Any, ...]]":
        if out_vars:
            columns = [var.getvalue() for var in out_vars]
            return list(zip(*columns))
        if self.key_columns:
            return [tuple(row) for row in cursor.fetchall()]
        # Postgres and Oracle report an OID or ROWID here, never the key.
        if self.connection.dialect.requires_key_columns or cursor.rowcount == 0:
            return []
        lastrowid = getattr(cursor, "lastrowid", None)
        return [] if lastrowid is None else [(lastrowid,)]

    def execute(self) -> bool:
        self._keys = []
        cursor = self._open_cursor()
        self._run(cursor, self._values())
        return cursor.description is not None and not (self._captures_keys() and self.key_columns)

    def execute_query(self) -> DbapiResultSet:
        cursor = self._open_cursor()
        with self.connection.timeout_scope(self.query_timeout):
            cursor.execute(self.connection.render(self.sql), self._values())
        return DbapiResultSet(cursor)

    def execute_update(self) -> int:
        self._keys = []
        return self._run(self._open_cursor(), self._values())

    def execute_batch(self) -> "list[int]":
        self._keys = []
        cursor = self._open_cursor()
        try:
            return [self._run(cursor, values) for values in self._batch]
        finally:
            self._batch = []

    def generated_keys(self) -> KeyResultSet:
        columns = self.key_columns or ("generated_key",)
        return KeyResultSet(columns, self._keys)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        cursors, self._cursors = self._cursors, []
        for cursor in cursors:
            cursor.close()


class DbapiConnection:
    """Wraps a DB-API connection as a session connection capability.

    Args:
        connection: An open PEP 249 connection.
        driver_name: Override the driver tag, defaults to the connection's top-level module.
        paramstyle: Override the placeholder style, defaults to the driver module's ``paramstyle``.
    """

    __slots__ = ("_restore_autocommit", "connection", "dialect", "driver_name", "paramstyle")

    def __init__(
        self, connection: Any, driver_name: "Optional[str]" = None, paramstyle: "Optional[str]" = None
    ) -> None:
        module_name = type(connection).__module__.split(".")[0]
        self.connection = connection
        self.driver_name = driver_name or module_name
        self.paramstyle = paramstyle or getattr(sys.modules.get(module_name), "paramstyle", "qmark")
        if self.paramstyle not in SUPPORTED_PARAMSTYLES:
            msg = f"Unsupported DB-API paramstyle: {self.paramstyle!r}"
            raise ImproperConfigurationError(msg)
        self.dialect = Dialect.from_driver_name(self.driver_name)
        self._restore_autocommit = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(driver_name={self.driver_name!r}, paramstyle={self.paramstyle!r})"

    def render(self, sql: str) -> str:
        return render_placeholders(sql, self.paramstyle)

    def prepare(
        self, sql: str, *, return_generated_keys: bool = False, key_columns: "Optional[Sequence[str]]" = None
    ) -> DbapiStatement:
        return DbapiStatement(self, sql, return_generated_keys=return_generated_keys, key_columns=key_columns)

    @contextmanager
    def timeout_scope(self, timeout: "Optional[float]") -> "Generator[None, None, None]":
        """Apply ``timeout`` (seconds) around one execution and restore the previous setting afterwards."""
        if timeout is None:
            yield
            return
        if self.dialect is Dialect.SQLITE:
            deadline = time.monotonic() + timeout
            self.connection.set_progress_handler(lambda: int(time.monotonic() > deadline), SQLITE_PROGRESS_STEPS)
            try:
                yield
            finally:
                self.connection.set_progress_handler(None, 0)
        elif self.dialect is Dialect.POSTGRES:
            with self._postgres_statement_timeout(int(timeout * 1000)):
                yield
        elif self.dialect is Dialect.ORACLE:
            previous = self.connection.call_timeout
            self.connection.call_timeout = int(timeout * 1000)
            try:
                yield
            finally:
                self.connection.call_timeout = previous
        else:
            log_with_context(
                logger,
                logging.DEBUG,
                "Query timeout is not supported by this driver; ignoring it",
                driver=self.driver_name,
            )
            yield

    @contextmanager
    def _postgres_statement_timeout(self, milliseconds: int) -> "Generator[None, None, None]":
        # A separate cursor keeps the statement's own result set intact.
        cursor = self.connection.cursor()
        try:
            cursor.execute("SHOW statement_timeout")
            previous = cursor.fetchone()[0]
            cursor.execute(f"SET statement_timeout = {milliseconds}")
            try:
                yield
            except BaseException:
                try:
                    self._set_statement_timeout(cursor, previous)
                except Exception:
                    # An aborted transaction rejects the reset; its rollback reverts the SET.
                    logger.exception("Could not restore statement_timeout after a failed statement")
                raise
            self._set_statement_timeout(cursor, previous)
        finally:
            cursor.close()

    def _set_statement_timeout(self, cursor: Any, value: str) -> None:
        cursor.execute(self.render("SELECT set_config('statement_timeout', ?, false)"), [value])

    def _in_sqlite_autocommit(self) -> bool:
        if self.dialect is not Dialect.SQLITE:
            return False
        if getattr(self.connection, "isolation_level", None) is not None:
            return False
        return not bool(getattr(self.connection, "in_transaction", False))

    def begin(self) -> None:
        if self._in_sqlite_autocommit():
            self.connection.execute("BEGIN")
        elif getattr(self.connection, "autocommit", None) is True:
            self.connection.autocommit = False
            self._restore_autocommit = True

    def _end_transaction(self) -> None:
        if self._restore_autocommit:
            self._restore_autocommit = False
            self.connection.autocommit = True

    def commit(self) -> None:
        try:
            self.connection.commit()
        finally:
            self._end_transaction()

    def rollback(self) -> None:
        try:
            self.connection.rollback()
        finally:
            self._end_transaction()

    def close(self) -> None:
        self.connection.close()

    def create_array_of(self, type_name: str, items: "Iterable[Any]") -> SqlArray:
        return SqlArray(type_name, tuple(items))
