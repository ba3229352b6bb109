"""Dialect capabilities negotiated from a connection's driver name."""

from enum import Enum
from typing import Final

__all__ = ("Dialect",)


class Dialect(str, Enum):
    """Database families with behavior the session has to know about."""

    GENERIC = "generic"
    SQLITE = "sqlite"
    POSTGRES = "postgres"
    MYSQL = "mysql"
    ORACLE = "oracle"
    DUCKDB = "duckdb"

    def __str__(self) -> str:
        return self.value

    @property
    def requires_key_columns(self) -> bool:
        """Generated keys can only be retrieved by naming the key columns."""
        return self in _KEY_COLUMN_DIALECTS

    @classmethod
    def from_driver_name(cls, driver_name: str) -> "Dialect":
        """Resolve a driver name (module or class path) to a dialect.

        Unknown drivers resolve to :attr:`GENERIC`.
        """
        normalized = driver_name.strip().lower()
        if normalized in _DRIVER_DIALECTS:
            return _DRIVER_DIALECTS[normalized]
        for prefix, dialect in _DRIVER_DIALECTS.items():
            if normalized.startswith((f"{prefix}.", f"{prefix}:")):
                return dialect
        return cls.GENERIC


_DRIVER_DIALECTS: Final = {
    "sqlite3": Dialect.SQLITE,
    "pysqlite2": Dialect.SQLITE,
    "psycopg": Dialect.POSTGRES,
    "psycopg2": Dialect.POSTGRES,
    "pg8000": Dialect.POSTGRES,
    "oracledb": Dialect.ORACLE,
    "cx_oracle": Dialect.ORACLE,
    "pymysql": Dialect.MYSQL,
    "mysqldb": Dialect.MYSQL,
    "mysql": Dialect.MYSQL,
    "mariadb": Dialect.MYSQL,
    "duckdb": Dialect.DUCKDB,
}

_KEY_COLUMN_DIALECTS: Final = frozenset({Dialect.ORACLE, Dialect.POSTGRES})
