"""Session configuration."""

from collections.abc import Iterable
from typing import Any, Final, Optional

from sqlsession.exceptions import ImproperConfigurationError

__all__ = ("SESSION_CONFIG_SLOTS", "SessionConfig")

SESSION_CONFIG_SLOTS: Final = ("generated_key_columns", "query_timeout", "return_generated_keys", "strict")


class SessionConfig:
    """Immutable per-session options.

    Args:
        return_generated_keys: Prepare statements in generated-key mode.
        generated_key_columns: Key columns for dialects that only report keys by column name.
        strict: Treat more than one row in ``single`` as an error.
        query_timeout: Statement timeout in seconds, applied before execution.
    """

    __slots__ = SESSION_CONFIG_SLOTS

    def __init__(
        self,
        return_generated_keys: bool = True,
        generated_key_columns: "Iterable[str]" = (),
        strict: bool = False,
        query_timeout: "Optional[float]" = None,
    ) -> None:
        columns = tuple(generated_key_columns)
        if any(not isinstance(column, str) for column in columns):
            msg = f"generated_key_columns must be column names, got {columns!r}"
            raise ImproperConfigurationError(msg)
        if query_timeout is not None and query_timeout < 0:
            msg = f"query_timeout must be a non-negative number of seconds, got {query_timeout!r}"
            raise ImproperConfigurationError(msg)
        object.__setattr__(self, "return_generated_keys", return_generated_keys)
        object.__setattr__(self, "generated_key_columns", columns)
        object.__setattr__(self, "strict", strict)
        object.__setattr__(self, "query_timeout", query_timeout)

    def __setattr__(self, name: str, value: Any) -> None:
        msg = f"{type(self).__name__} is immutable; use replace()"
        raise AttributeError(msg)

    def replace(self, **changes: Any) -> "SessionConfig":
        """Create a new SessionConfig with specified changes."""
        for key in changes:
            if key not in SESSION_CONFIG_SLOTS:
                msg = f"{key!r} is not a field in {type(self).__name__}"
                raise TypeError(msg)
        kwargs = {slot: getattr(self, slot) for slot in SESSION_CONFIG_SLOTS}
        kwargs.update(changes)
        return type(self)(**kwargs)

    def __repr__(self) -> str:
        field_strs = [f"{slot}={getattr(self, slot)!r}" for slot in SESSION_CONFIG_SLOTS]
        return f"{type(self).__name__}({', '.join(field_strs)})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return all(getattr(self, slot) == getattr(other, slot) for slot in SESSION_CONFIG_SLOTS)

    def __hash__(self) -> int:
        return hash(tuple(getattr(self, slot) for slot in SESSION_CONFIG_SLOTS))
