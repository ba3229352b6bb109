import sqlite3
from collections.abc import Generator, Sequence
from typing import Any
from unittest.mock import MagicMock

import pytest

from sqlsession import Session, session_of


def make_result_set(columns: "Sequence[str]", rows: "Sequence[Sequence[Any]]") -> MagicMock:
    """Create a result set double that yields ``rows`` then ``None``."""
    result_set = MagicMock(name="result_set")
    result_set.description = [(column, None, None, None, None, None, None) for column in columns]
    result_set.fetchone.side_effect = [*rows, None]
    return result_set


@pytest.fixture
def mock_statement() -> MagicMock:
    """Create a prepared statement double."""
    statement = MagicMock(name="statement")
    statement.query_timeout = None
    statement.execute.return_value = False
    statement.execute_update.return_value = 1
    statement.execute_batch.return_value = []
    statement.execute_query.return_value = make_result_set(["id"], [])
    statement.generated_keys.return_value = make_result_set(["generated_key"], [])
    return statement


@pytest.fixture
def mock_connection(mock_statement: MagicMock) -> MagicMock:
    """Create a connection capability double that prepares ``mock_statement``."""
    connection = MagicMock(name="connection")
    connection.driver_name = "sqlite3"
    connection.prepare.return_value = mock_statement
    return connection


@pytest.fixture
def session(mock_connection: MagicMock) -> Session:
    return Session(mock_connection)


@pytest.fixture
def sqlite_session() -> "Generator[Session, None, None]":
    """A session over an in-memory SQLite database with a ``members`` table."""
    connection = sqlite3.connect(":memory:")
    with session_of(connection) as session:
        connection.execute(
            "create table members (id integer primary key autoincrement, name text not null, "
            "email text, active integer, joined_at text)"
        )
        connection.commit()
        yield session
