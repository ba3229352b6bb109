"""Unit tests for Row and RowCursor."""

import pytest

from sqlsession.core.result import Row, RowCursor
from tests.conftest import make_result_set


def test_row_access_by_index_and_label() -> None:
    row = Row(("id", "Name"), (1, "Alice"), 1)

    assert row[0] == 1
    assert row["Name"] == "Alice"
    assert row["name"] == "Alice"
    assert row.as_dict() == {"id": 1, "Name": "Alice"}
    assert list(row) == [1, "Alice"]
    assert len(row) == 2


def test_row_missing_column() -> None:
    row = Row(("id",), (1,), 1)

    with pytest.raises(KeyError, match="email"):
        row["email"]
    assert row.get("email", "n/a") == "n/a"
    assert row.get(5) is None


def test_cursor_numbers_rows_from_one() -> None:
    cursor = RowCursor(make_result_set(["id"], [(10,), (20,)]))

    rows = list(cursor)

    assert [row.row_number for row in rows] == [1, 2]
    assert cursor.columns == ("id",)


def test_cursor_map_is_lazy() -> None:
    result_set = make_result_set(["id"], [(1,), (2,)])
    mapped = RowCursor(result_set).map(lambda row: row[0])

    result_set.fetchone.assert_not_called()
    assert list(mapped) == [1, 2]


def test_cursor_close_is_idempotent() -> None:
    result_set = make_result_set(["id"], [])

    with RowCursor(result_set) as cursor:
        cursor.close()

    result_set.close.assert_called_once_with()


def test_cursor_without_description() -> None:
    result_set = make_result_set([], [])
    result_set.description = None

    assert RowCursor(result_set).columns == ()
