import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from posapp.config import get_settings
from posapp.exceptions import ConfigurationError
from posapp.storage.base import StorageAdapter
from posapp.storage.mssql import MssqlStorage
from posapp.storage.sqlite import SqliteStorage

logger = logging.getLogger(__name__)

# Adapter per driver name of the URL, decided once per engine
STORAGE_ADAPTERS = {
    "sqlite": SqliteStorage,
    "mssql": MssqlStorage,
}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str) -> Engine:
    """Create an engine for a sqlite:// or mssql+pyodbc:// URL."""
    if database_url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        db_engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
            echo=False,
        )
        event.listen(db_engine, "connect", _enable_sqlite_foreign_keys)
        return db_engine
    return create_engine(database_url, pool_pre_ping=True, echo=False)


def build_storage(db_engine: Engine) -> StorageAdapter:
    """Pick the storage adapter from the engine's dialect."""
    adapter_class = STORAGE_ADAPTERS.get(db_engine.dialect.name)
    if adapter_class is None:
        raise ConfigurationError(
            f"Unsupported database dialect '{db_engine.dialect.name}'. Use sqlite or mssql."
        )
    logger.info(f"Using {db_engine.dialect.name} storage adapter")
    return adapter_class(db_engine)


# Create database engine
engine = create_db_engine(get_settings().database_url)

# Create declarative base
Base = declarative_base()

_storage = None


# Dependency for the storage adapter
def get_storage() -> StorageAdapter:
    global _storage
    if _storage is None:
        _storage = build_storage(engine)
    return _storage
