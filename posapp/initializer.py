"""
Database initialization for the locally owned SQLite schema.
Creates all tables and seeds reference data and the first administrator.
Safe to run repeatedly. Never issues DDL against SQL Server, whose schema is
managed elsewhere.
"""
import logging
from typing import Optional

from sqlalchemy import text

from posapp.config import Settings, get_settings
from posapp.database import Base
from posapp.schemas.users import UserCreateForm
from posapp.services.users import UserService
from posapp.storage.base import StorageAdapter

import posapp.models  # noqa: F401  register models on Base.metadata

logger = logging.getLogger(__name__)

ADMIN_ROLE = "Administrator"

DEFAULT_ROLES = [
    (ADMIN_ROLE, "users:full,inventory:full,sales:full"),
    ("Cashier", "sales:read,sales:create"),
]
DEFAULT_CATEGORIES = [
    ("Coffee", "#f06292"),
    ("Bakery", "#f48fb1"),
    ("Retail", "#f8bbd0"),
]
DEFAULT_PARTY_TYPES = ["Customer", "Vendor", "Both"]
DEFAULT_PARTY_CATEGORIES = ["Retail", "Wholesale", "Distributor", "Other"]
DEFAULT_PRODUCT_TYPES = ["Goods", "Service"]
DEFAULT_UNITS = [
    ("Pieces", "PCS"),
    ("Kilogram", "KG"),
    ("Litre", "LTR"),
    ("Box", "BOX"),
]
DEFAULT_GST_RATES = [
    (0, "Exempt"),
    (5, "GST 5%"),
    (12, "GST 12%"),
    (18, "GST 18%"),
    (28, "GST 28%"),
]


def _seed(conn, storage: StorageAdapter, table: str, columns: list, rows: list) -> None:
    q = storage.quote_identifier
    statement = text(storage.sql.insert_ignore(
        q(table), [q(c) for c in columns], [f":p{i}" for i in range(len(columns))]
    ))
    for row in rows:
        values = row if isinstance(row, tuple) else (row,)
        conn.execute(statement, {f"p{i}": value for i, value in enumerate(values)})


def seed_reference_data(storage: StorageAdapter) -> None:
    with storage.transaction() as conn:
        _seed(conn, storage, "Roles", ["RoleName", "Permissions"], DEFAULT_ROLES)
        _seed(conn, storage, "Categories", ["CategoryName", "Color"], DEFAULT_CATEGORIES)
        _seed(conn, storage, "PartyTypes", ["PartyTypeName"], DEFAULT_PARTY_TYPES)
        _seed(conn, storage, "PartyCategories", ["PartyCategoryName"], DEFAULT_PARTY_CATEGORIES)
        _seed(conn, storage, "ProductTypes", ["ProductTypeName"], DEFAULT_PRODUCT_TYPES)
        _seed(conn, storage, "Units", ["UnitName", "UnitCode"], DEFAULT_UNITS)
        _seed(conn, storage, "GstRates", ["Rate", "Description"], DEFAULT_GST_RATES)
    logger.info("Reference data seeded")


def seed_admin_user(storage: StorageAdapter, settings: Settings) -> Optional[int]:
    """Create the administrator account unless a user with that e-mail exists."""
    with storage.connect() as conn:
        existing = conn.execute(
            text("SELECT COUNT(1) FROM [Users] WHERE [Email] = :email"), {"email": settings.admin_email}
        ).scalar_one()
        role_id = conn.execute(
            text("SELECT [RoleId] FROM [Roles] WHERE [RoleName] = :name"), {"name": ADMIN_ROLE}
        ).scalar_one()
    if existing:
        return None

    form = UserCreateForm(
        full_name="Super Admin",
        email=settings.admin_email,
        role_id=role_id,
        password=settings.admin_password,
    )
    user_id = UserService(storage).create(form, actor_id=0)
    logger.warning(f"Seeded administrator {settings.admin_email}. Change the password immediately.")
    return user_id


def init_db(storage: StorageAdapter, settings: Optional[Settings] = None) -> None:
    """Initialize database with all tables and seed data"""
    settings = settings or get_settings()
    if storage.dialect != "sqlite":
        logger.info(f"Skipping schema creation for externally managed {storage.dialect} database")
        return
    try:
        logger.info("Creating all database tables...")
        Base.metadata.create_all(bind=storage.engine)
        seed_reference_data(storage)
        seed_admin_user(storage, settings)
        logger.info("Database initialization complete")
    except Exception as e:
        logger.error(f"Error initializing database: {str(e)}")
        raise


if __name__ == "__main__":
    from posapp.database import get_storage

    logging.basicConfig(level=logging.INFO)
    init_db(get_storage())
