"""Integration tests for Session over the stdlib sqlite3 driver."""

import datetime
from typing import Optional

import pytest

from sqlsession import Parameter, Session, TransactionalSession, query_of
from sqlsession.core.result import Row
from sqlsession.exceptions import MultipleResultsFoundError

pytestmark = pytest.mark.integration


def _name(row: Row) -> Optional[str]:
    return row["name"]  # type: ignore[no-any-return]


def _insert(session: Session, name: str, email: Optional[str] = None) -> Optional[int]:
    return session.update_and_return_generated_key(
        query_of(
            "insert into members (name, email, active) values (:name, :email, :active)",
            name=name,
            email=Parameter(email, str),
            active=True,
        )
    )


def test_insert_returns_generated_keys(sqlite_session: Session) -> None:
    assert _insert(sqlite_session, "Alice") == 1
    assert _insert(sqlite_session, "Bob") == 2


def test_single_and_list(sqlite_session: Session) -> None:
    _insert(sqlite_session, "Alice", "alice@example.com")
    _insert(sqlite_session, "Bob")

    member = sqlite_session.single(
        query_of("select id, name, email, active from members where name = ?", "Alice"), lambda row: row.as_dict()
    )
    names = sqlite_session.list(query_of("select name from members order by id"), _name)

    assert member == {"id": 1, "name": "Alice", "email": "alice@example.com", "active": 1}
    assert names == ["Alice", "Bob"]


def test_typed_null_round_trips(sqlite_session: Session) -> None:
    _insert(sqlite_session, "Alice", None)

    email = sqlite_session.single(query_of("select email from members"), lambda row: row["email"])

    assert email is None


def test_strict_single_rejects_many_rows(sqlite_session: Session) -> None:
    _insert(sqlite_session, "Alice")
    _insert(sqlite_session, "Bob")
    strict = Session(sqlite_session.connection, strict=True)

    with pytest.raises(MultipleResultsFoundError):
        strict.single(query_of("select name from members"), _name)


def test_repeated_named_parameter(sqlite_session: Session) -> None:
    _insert(sqlite_session, "Alice")

    found = sqlite_session.single(
        query_of("select name from members where name = :name or email = :name", name="Alice"), _name
    )

    assert found == "Alice"


def test_update_counts_rows(sqlite_session: Session) -> None:
    _insert(sqlite_session, "Alice")
    _insert(sqlite_session, "Bob")

    assert sqlite_session.update(query_of("update members set active = :active", active=False)) == 2
    assert sqlite_session.update(query_of("delete from members where id = ?", 99)) == 0


def test_generated_key_none_when_nothing_inserted(sqlite_session: Session) -> None:
    key = sqlite_session.update_and_return_generated_key(
        query_of("insert into members (name) select name from members where id = ?", 99)
    )

    assert key is None


def test_timestamps_are_stored_as_iso_text(sqlite_session: Session) -> None:
    joined = datetime.datetime(2024, 1, 2, 3, 4, 5)
    sqlite_session.update(query_of("insert into members (name, joined_at) values (?, ?)", "Alice", joined))

    stored = sqlite_session.single(query_of("select joined_at from members"), lambda row: row[0])

    assert stored == "2024-01-02 03:04:05"


def test_batches(sqlite_session: Session) -> None:
    keys = sqlite_session.batch_prepared_named_statement_and_return_generated_keys(
        "insert into members (name) values (:name)", [{"name": "Alice"}, {"name": "Bob"}, {"name": "Carol"}]
    )
    counts = sqlite_session.batch_prepared_statement(
        "update members set active = ? where name = ?", [[1, "Alice"], [1, "Zed"]]
    )

    assert keys == [1, 2, 3]
    assert counts == [1, 0]


def test_for_each_streams_rows(sqlite_session: Session) -> None:
    sqlite_session.batch_prepared_statement("insert into members (name) values (?)", [["Alice"], ["Bob"]])
    seen: list[str] = []

    sqlite_session.for_each(query_of("select name from members order by id"), lambda row: seen.append(row["name"]))

    assert seen == ["Alice", "Bob"]


def test_transaction_commits(sqlite_session: Session) -> None:
    def operation(tx: TransactionalSession) -> Optional[int]:
        return _insert(tx, "Alice")

    assert sqlite_session.transaction(operation) == 1
    assert sqlite_session.list(query_of("select name from members"), _name) == ["Alice"]


def test_transaction_rolls_back(sqlite_session: Session) -> None:
    def operation(tx: TransactionalSession) -> None:
        _insert(tx, "Alice")
        msg = "abort"
        raise RuntimeError(msg)

    with pytest.raises(RuntimeError, match="abort"):
        sqlite_session.transaction(operation)

    assert sqlite_session.list(query_of("select name from members"), _name) == []
