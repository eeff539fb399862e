"""
Storage adapter base class for the two supported databases.

Each adapter owns its connection handling, catalog probing strategy and
driver error classification, so services never branch on the dialect.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterator

from sqlalchemy.engine import Connection, Engine

from posapp.storage.dialects import SqlDialect, quote_identifier
from posapp.storage.errors import ErrorKind

logger = logging.getLogger(__name__)


class StorageAdapter(ABC):
    """
    Abstract base for database storage adapters.

    Calls take no cancellation token; a stuck query is bounded only by the
    driver's own connect and query timeouts.
    """

    sql: SqlDialect

    def __init__(self, engine: Engine):
        self.engine = engine

    @property
    def dialect(self) -> str:
        return self.sql.name

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Connection for read-only work, released on exit."""
        with self.engine.connect() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Connection inside a transaction: committed on success, rolled back on any exception."""
        with self.engine.connect() as conn:
            trans = conn.begin()
            try:
                yield conn
                trans.commit()
            except Exception:
                trans.rollback()
                raise

    def quote_identifier(self, name: str) -> str:
        return quote_identifier(name)

    @abstractmethod
    def fetch_columns(self, conn: Connection, table: str) -> Dict[str, str]:
        """
        Return {lower-cased column name: actual column name} for a table.

        An empty dict means the table does not exist. Raises SchemaProbeError
        when the catalog query itself fails.
        """

    @abstractmethod
    def classify_error(self, exc: BaseException) -> ErrorKind:
        """Map a driver error to UNIQUE_VIOLATION, NOT_FOUND or OTHER."""

    def is_unique_violation(self, exc: BaseException) -> bool:
        return self.classify_error(exc) is ErrorKind.UNIQUE_VIOLATION
