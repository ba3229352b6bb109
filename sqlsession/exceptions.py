from typing import Any, Optional

__all__ = (
    "ImproperConfigurationError",
    "MultipleResultsFoundError",
    "NotFoundError",
    "SQLSessionError",
    "TransactionError",
)


class SQLSessionError(Exception):
    """Base exception class from which all sqlsession exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLSessionError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLSessionError):
    """Improper Configuration error.

    Raised when a session or adapter is constructed with invalid options.
    """


class TransactionError(SQLSessionError):
    """Transaction scope was used incorrectly."""


class NotFoundError(SQLSessionError):
    """An expected row or value does not exist."""


class MultipleResultsFoundError(SQLSessionError):
    """A single database result was required but more than one were found.

    Args:
        row_count: Number of rows actually returned by the statement.
    """

    row_count: int

    def __init__(self, row_count: int, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Expected 1 row but received {row_count}."
        super().__init__(message)
        self.row_count = row_count
