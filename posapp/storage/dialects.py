"""
SQL text fragments that differ between the supported dialects.

These are pure values: nothing here touches a connection, so the SQL builder
can depend on them without doing I/O.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence


def quote_identifier(name: str) -> str:
    """Bracket-quote an identifier. Both SQL Server and SQLite accept [name]."""
    return "[" + name.replace("]", "]]") + "]"


@dataclass(frozen=True)
class SqlDialect(ABC):
    name: str
    now_sql: str

    @abstractmethod
    def date_sql(self, column: str) -> str:
        """Expression truncating a datetime column to its date."""

    @abstractmethod
    def select_first(self, select_list: str, rest: str) -> str:
        """SELECT exactly one row; `rest` holds FROM/WHERE/ORDER BY."""

    @abstractmethod
    def insert_returning(self, table: str, columns: Sequence[str], values: Sequence[str], id_column: str) -> str:
        """INSERT that yields the generated id as a single scalar row."""

    @abstractmethod
    def insert_ignore(self, table: str, columns: Sequence[str], values: Sequence[str]) -> str:
        """
        INSERT for link rows. Callers pass distinct rows; only SQLite also
        skips a row that already exists.
        """


@dataclass(frozen=True)
class SqliteDialect(SqlDialect):
    name: str = "sqlite"
    now_sql: str = "CURRENT_TIMESTAMP"

    def date_sql(self, column: str) -> str:
        return f"date({column})"

    def select_first(self, select_list: str, rest: str) -> str:
        return f"SELECT {select_list} {rest} LIMIT 1"

    def insert_returning(self, table, columns, values, id_column):
        return (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({', '.join(values)}) RETURNING {id_column}"
        )

    def insert_ignore(self, table, columns, values):
        return f"INSERT OR IGNORE INTO {table} ({', '.join(columns)}) VALUES ({', '.join(values)})"


@dataclass(frozen=True)
class MssqlDialect(SqlDialect):
    name: str = "mssql"
    now_sql: str = "SYSUTCDATETIME()"

    def date_sql(self, column: str) -> str:
        return f"CAST({column} AS date)"

    def select_first(self, select_list: str, rest: str) -> str:
        return f"SELECT TOP 1 {select_list} {rest}"

    def insert_returning(self, table, columns, values, id_column):
        return (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"OUTPUT INSERTED.{id_column} VALUES ({', '.join(values)})"
        )

    def insert_ignore(self, table, columns, values):
        return f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join(values)})"


SQLITE = SqliteDialect()
MSSQL = MssqlDialect()
