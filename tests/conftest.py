import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from posapp.config import Settings
from posapp.database import build_storage, create_db_engine, get_storage
from posapp.initializer import init_db

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "changeme"

JSON_HEADERS = {"Accept": "application/json"}


@pytest.fixture
def settings():
    return Settings(admin_email=ADMIN_EMAIL, admin_password=ADMIN_PASSWORD)


@pytest.fixture
def storage(tmp_path, settings):
    """SQLite storage on a temporary file with the owned schema and seed data."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'pos.db'}")
    sqlite_storage = build_storage(engine)
    init_db(sqlite_storage, settings)
    yield sqlite_storage
    engine.dispose()


@pytest.fixture
def client(storage):
    from main import app

    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Sign `client` in and return the response."""

    def _login(identifier: str = ADMIN_EMAIL, password: str = ADMIN_PASSWORD, **extra):
        data = {"identifier": identifier, "password": password, **extra}
        return client.post("/api/account/login", data=data, headers=JSON_HEADERS)

    return _login


@pytest.fixture
def admin_client(client, login):
    """TestClient holding the seeded administrator's session cookie."""
    response = login()
    assert response.status_code == 200, response.text
    return client


LEGACY_BUSINESS_DDL = """
    CREATE TABLE Businesses (
        BusinessId INTEGER PRIMARY KEY AUTOINCREMENT,
        BusinessName TEXT NOT NULL,
        CompanyPhoneNumber TEXT,
        CompanyEmail TEXT,
        IsGstRegistered INTEGER,
        GstNumber TEXT,
        PanNumber TEXT,
        IndustryTypeId INTEGER,
        RegistrationTypeId INTEGER,
        website TEXT,
        Address TEXT,
        PinCode TEXT,
        Logo BLOB
    )
"""


@pytest.fixture
def legacy_storage(tmp_path):
    """A database shaped like an older install: inline address, single logo blob."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as conn:
        conn.execute(text(LEGACY_BUSINESS_DDL))
    yield build_storage(engine)
    engine.dispose()
