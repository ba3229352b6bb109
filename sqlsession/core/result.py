"""Row access over driver result sets."""

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, Optional, TypeVar, Union

if TYPE_CHECKING:
    from sqlsession.protocols import ResultSetProtocol

__all__ = ("Row", "RowCursor")

A = TypeVar("A")


class Row:
    """One row of a result set.

    Columns are reachable by zero-based index or by column label.
    """

    __slots__ = ("columns", "row_number", "values")

    def __init__(self, columns: "tuple[str, ...]", values: "tuple[Any, ...]", row_number: int) -> None:
        self.columns = columns
        self.values = values
        self.row_number = row_number

    def _index_of(self, column: str) -> int:
        try:
            return self.columns.index(column)
        except ValueError:
            lowered = column.lower()
            for index, label in enumerate(self.columns):
                if label.lower() == lowered:
                    return index
            msg = f"No column named {column!r}; available columns: {', '.join(self.columns)}"
            raise KeyError(msg) from None

    def __getitem__(self, key: "Union[int, str]") -> Any:
        if isinstance(key, str):
            return self.values[self._index_of(key)]
        return self.values[key]

    def get(self, key: "Union[int, str]", default: Any = None) -> Any:
        try:
            return self[key]
        except (KeyError, IndexError):
            return default

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> "Iterator[Any]":
        return iter(self.values)

    def keys(self) -> "tuple[str, ...]":
        return self.columns

    def as_dict(self) -> "dict[str, Any]":
        return dict(zip(self.columns, self.values))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self.columns == other.columns and self.values == other.values

    def __hash__(self) -> int:
        return hash((self.columns, self.values))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.as_dict()!r})"


class RowCursor:
    """Iterates a driver result set as :class:`Row` objects.

    The cursor owns the result set and closes it in :meth:`close`.
    """

    __slots__ = ("_closed", "_columns", "_result_set")

    def __init__(self, result_set: "ResultSetProtocol") -> None:
        self._result_set = result_set
        self._columns: Optional[tuple[str, ...]] = None
        self._closed = False

    @property
    def columns(self) -> "tuple[str, ...]":
        if self._columns is None:
            description = self._result_set.description or ()
            self._columns = tuple(str(column[0]) for column in description)
        return self._columns

    def __iter__(self) -> "Iterator[Row]":
        row_number = 0
        while True:
            values = self._result_set.fetchone()
            if values is None:
                return
            row_number += 1
            yield Row(self.columns, tuple(values), row_number)

    def map(self, extractor: "Callable[[Row], A]") -> "Iterator[A]":
        """Lazily apply ``extractor`` to each row."""
        return (extractor(row) for row in self)

    def for_each(self, operator: "Callable[[Row], Any]") -> None:
        for row in self:
            operator(row)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._result_set.close()

    def __enter__(self) -> "RowCursor":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
