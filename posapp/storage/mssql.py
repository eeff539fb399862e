"""Microsoft SQL Server storage adapter (externally managed schema)."""

import logging
import re
from typing import Dict, Set

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from posapp.exceptions import SchemaProbeError
from posapp.storage.base import StorageAdapter
from posapp.storage.dialects import MSSQL
from posapp.storage.errors import ErrorKind

logger = logging.getLogger(__name__)

# 2601: duplicate key row in unique index, 2627: UNIQUE/PRIMARY KEY constraint
MSSQL_UNIQUE_NUMBERS = {2601, 2627}
# 207: invalid column name, 208: invalid object name
MSSQL_NOT_FOUND_NUMBERS = {207, 208}

# pyodbc messages end with "... (2627) (SQLExecDirectW)"
_NATIVE_NUMBER = re.compile(r"\((\d+)\)\s*\(SQL\w*\)")


def native_error_numbers(orig: BaseException) -> Set[int]:
    """Extract SQL Server native error numbers from a pyodbc error."""
    numbers = set()
    for arg in getattr(orig, "args", ()):
        if isinstance(arg, str):
            numbers.update(int(n) for n in _NATIVE_NUMBER.findall(arg))
    number = getattr(orig, "number", None)
    if isinstance(number, int):
        numbers.add(number)
    return numbers


class MssqlStorage(StorageAdapter):
    """Microsoft SQL Server storage adapter."""

    sql = MSSQL

    def fetch_columns(self, conn: Connection, table: str) -> Dict[str, str]:
        query = text("""
            SELECT COLUMN_NAME
            FROM INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_NAME = :table AND TABLE_SCHEMA = SCHEMA_NAME()
        """)
        try:
            rows = conn.execute(query, {"table": table}).fetchall()
        except SQLAlchemyError as e:
            logger.error(f"Schema probe failed for table {table}: {str(e)}")
            raise SchemaProbeError(table, e) from e
        return {row[0].lower(): row[0] for row in rows}

    def classify_error(self, exc: BaseException) -> ErrorKind:
        orig = getattr(exc, "orig", None) or exc
        numbers = native_error_numbers(orig)
        if numbers & MSSQL_UNIQUE_NUMBERS:
            return ErrorKind.UNIQUE_VIOLATION
        if numbers & MSSQL_NOT_FOUND_NUMBERS:
            return ErrorKind.NOT_FOUND
        return ErrorKind.OTHER
