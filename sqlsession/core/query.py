"""Query values and named-parameter extraction.

Named placeholders use the ``:name`` form. They are rewritten to positional
``?`` markers in :attr:`Query.clean_statement` and their positions are kept in
:attr:`Query.replacement_map` so that one value can fill every slot where its
name appears.
"""

import re
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Final, Optional

__all__ = ("PLACEHOLDER_REGEX", "Query", "iter_placeholders", "query_of")

# Literals and comments are matched first so their contents are never read as placeholders.
PLACEHOLDER_REGEX: Final = re.compile(
    r"""
    (?P<dquote>"(?:[^"\\]|\\.)*") |
    (?P<squote>'(?:[^'\\]|\\.)*') |
    (?P<dollar_quoted_string>\$(?P<dollar_quote_tag_inner>\w*)?\$[\s\S]*?\$(?P=dollar_quote_tag_inner)\$) |
    (?P<line_comment>--[^\r\n]*) |
    (?P<block_comment>/\*(?:[^*]|\*(?!/))*\*/) |
    (?P<pg_q_operator>\?\?|\?\||\?&) |
    (?P<pg_cast>::\w+) |
    (?P<named_colon>(?<![:\w]):(?P<colon_name>[A-Za-z_]\w*)) |
    (?P<qmark>\?)
    """,
    re.VERBOSE | re.MULTILINE | re.DOTALL,
)


def iter_placeholders(sql: str) -> "Iterator[re.Match[str]]":
    """Yield ``named_colon`` and ``qmark`` matches in ``sql``, skipping literals and comments."""
    for match in PLACEHOLDER_REGEX.finditer(sql):
        if match.group("named_colon") or match.group("qmark"):
            yield match


class Query:
    """A statement with its parameters, ready to bind.

    Args:
        statement: Raw SQL text, possibly with ``:name`` placeholders.
        params: Positional values for ``?`` placeholders.
        param_map: Values for named placeholders.
    """

    __slots__ = ("_clean_statement", "_replacement_map", "param_map", "params", "statement")

    def __init__(
        self,
        statement: str,
        params: "Sequence[Any]" = (),
        param_map: "Optional[Mapping[str, Any]]" = None,
    ) -> None:
        self.statement = statement
        self.params: tuple[Any, ...] = tuple(params)
        self.param_map: dict[str, Any] = dict(param_map or {})
        self._clean_statement, self._replacement_map = self._parse(statement)

    @staticmethod
    def _parse(statement: str) -> "tuple[str, dict[str, list[int]]]":
        parts: list[str] = []
        replacement_map: dict[str, list[int]] = {}
        position = 0
        ordinal = 0
        for match in iter_placeholders(statement):
            name = match.group("colon_name")
            if name is None:
                continue
            parts.append(statement[position : match.start()])
            parts.append("?")
            replacement_map.setdefault(name, []).append(ordinal)
            ordinal += 1
            position = match.end()
        parts.append(statement[position:])
        return "".join(parts), replacement_map

    @classmethod
    def extract_named_params_indexed(cls, statement: str) -> "dict[str, list[int]]":
        """Return name -> zero-based occurrence indices for the named placeholders in ``statement``."""
        return cls._parse(statement)[1]

    @property
    def clean_statement(self) -> str:
        """Statement text with named placeholders replaced by ``?``."""
        return self._clean_statement

    @property
    def replacement_map(self) -> "dict[str, list[int]]":
        """Name -> ordered occurrence indices within :attr:`clean_statement`."""
        return self._replacement_map

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self.statement == other.statement and self.params == other.params and self.param_map == other.param_map

    def __hash__(self) -> int:
        return hash((self.statement, repr(self.params), repr(sorted(self.param_map.items()))))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(statement={self.statement!r}, params={self.params!r}, param_map={self.param_map!r})"
        )


def query_of(statement: str, *params: Any, **named: Any) -> Query:
    """Build a :class:`Query`.

    Positional values fill ``?`` placeholders; a single mapping argument or
    keyword arguments fill ``:name`` placeholders.

    Example:
        >>> query_of("select * from members where id = ?", 1)
        >>> query_of("select * from members where name = :name", name="Alice")
    """
    if len(params) == 1 and isinstance(params[0], Mapping) and not named:
        return Query(statement, param_map=params[0])
    if params and named:
        msg = "query_of() accepts positional or named parameters, not both"
        raise TypeError(msg)
    return Query(statement, params=params, param_map=named)
