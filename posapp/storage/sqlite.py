"""SQLite storage adapter (the locally owned schema)."""

import logging
import sqlite3
from typing import Dict

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from posapp.exceptions import SchemaProbeError
from posapp.storage.base import StorageAdapter
from posapp.storage.dialects import SQLITE
from posapp.storage.errors import ErrorKind

logger = logging.getLogger(__name__)

# Extended result codes: SQLITE_CONSTRAINT_UNIQUE, SQLITE_CONSTRAINT_PRIMARYKEY
SQLITE_UNIQUE_CODES = (2067, 1555)


class SqliteStorage(StorageAdapter):
    """SQLite storage adapter."""

    sql = SQLITE

    def fetch_columns(self, conn: Connection, table: str) -> Dict[str, str]:
        try:
            rows = conn.execute(
                text("SELECT name FROM pragma_table_info(:table)"),
                {"table": table},
            ).fetchall()
        except SQLAlchemyError as e:
            logger.error(f"Schema probe failed for table {table}: {str(e)}")
            raise SchemaProbeError(table, e) from e
        return {row[0].lower(): row[0] for row in rows}

    def classify_error(self, exc: BaseException) -> ErrorKind:
        orig = getattr(exc, "orig", None) or exc
        if isinstance(orig, sqlite3.IntegrityError):
            code = getattr(orig, "sqlite_errorcode", None)
            if code in SQLITE_UNIQUE_CODES:
                return ErrorKind.UNIQUE_VIOLATION
            if code is None and str(orig).startswith("UNIQUE constraint failed"):
                return ErrorKind.UNIQUE_VIOLATION
            return ErrorKind.OTHER
        if isinstance(orig, sqlite3.OperationalError):
            message = str(orig)
            if message.startswith("no such table") or message.startswith("no such column"):
                return ErrorKind.NOT_FOUND
        return ErrorKind.OTHER
