import pytest
from sqlalchemy import text

from posapp.config import get_settings
from posapp.core.security import (
    create_password_hash,
    create_session_token,
    decode_session_token,
    hash_password,
    verify_password,
)
from posapp.database import build_storage, create_db_engine
from posapp.schemas.users import UserCreateForm, UserForm
from posapp.services.auth import INVALID_CREDENTIALS, AuthService
from posapp.services.users import UserService

JSON_HEADERS = {"Accept": "application/json"}

LEGACY_USERS_DDL = (
    "CREATE TABLE Users (Id TEXT PRIMARY KEY, Username TEXT, DisplayName TEXT, Email TEXT, IsActive INTEGER)",
    "CREATE TABLE UserAuth (UserId TEXT, PasswordHash TEXT, PasswordSalt TEXT)",
    "CREATE TABLE Roles (Id TEXT PRIMARY KEY, Name TEXT)",
    "CREATE TABLE UserRoles (UserId TEXT, RoleId TEXT)",
)


def _role_id(storage, name):
    with storage.connect() as conn:
        return conn.execute(text("SELECT [RoleId] FROM [Roles] WHERE [RoleName] = :name"), {"name": name}).scalar_one()


def _create_cashier(storage, email="cashier@example.com", password="secret1"):
    form = UserCreateForm(
        full_name="Asha Cashier",
        email=email,
        mobile_number="9000000001",
        role_id=_role_id(storage, "Cashier"),
        password=password,
    )
    return UserService(storage).create(form, actor_id=1)


def test_password_hash_format():
    """Upper-case hex PBKDF2 key and salt; the same salt gives the same key."""
    stored = create_password_hash("changeme")

    assert len(stored.hash) == 64
    assert len(stored.salt) == 32
    assert stored.hash == stored.hash.upper()
    assert hash_password("changeme", stored.salt) == stored.hash
    assert verify_password("changeme", stored.hash, stored.salt)
    assert verify_password("changeme", stored.hash.lower(), stored.salt)
    assert not verify_password("changeMe", stored.hash, stored.salt)


def test_verify_password_with_bad_stored_values():
    assert not verify_password("changeme", None, None)
    assert not verify_password("changeme", "ABCD", "not-hex")


def test_empty_password_is_rejected():
    with pytest.raises(ValueError):
        create_password_hash("   ")


def test_session_token_round_trip():
    token = create_session_token({"sub": "1", "name": "Super Admin", "email": "admin@example.com"})

    claims = decode_session_token(token)
    assert claims["sub"] == "1"
    assert "exp" in claims
    assert decode_session_token(token + "x") is None
    assert decode_session_token(None) is None


def test_seeded_admin_authenticates(storage):
    user = AuthService(storage).authenticate("admin@example.com", "changeme")

    assert user.id == "1"
    assert user.name == "Super Admin"
    assert user.role == "Administrator"
    assert user.claims()["role"] == "Administrator"


def test_login_by_mobile_number(storage):
    _create_cashier(storage)

    user = AuthService(storage).authenticate("9000000001", "secret1")
    assert user.email == "cashier@example.com"
    assert user.role == "Cashier"


def test_user_without_role_has_no_role_claim(storage):
    user_id = _create_cashier(storage)
    with storage.transaction() as conn:
        conn.execute(text("DELETE FROM [UserRoles] WHERE [UserId] = :id"), {"id": user_id})

    user = AuthService(storage).authenticate("cashier@example.com", "secret1")
    assert user.role is None
    assert "role" not in user.claims()


def test_inactive_user_cannot_sign_in(storage):
    user_id = _create_cashier(storage)
    UserService(storage).set_active(user_id, False, actor_id=1)

    assert AuthService(storage).authenticate("cashier@example.com", "secret1") is None


def test_legacy_user_tables_are_used_as_fallback(tmp_path):
    """Text ids, username login and DisplayName from older installs still sign in."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'legacy-users.db'}")
    stored = create_password_hash("legacy-pass")
    with engine.begin() as conn:
        for ddl in LEGACY_USERS_DDL:
            conn.execute(text(ddl))
        conn.execute(text("INSERT INTO Users VALUES ('u-1', 'ravi', 'Ravi K', 'ravi@example.com', 1)"))
        conn.execute(text("INSERT INTO UserAuth VALUES ('u-1', :h, :s)"), {"h": stored.hash, "s": stored.salt})
        conn.execute(text("INSERT INTO Roles VALUES ('r-1', 'Manager')"))
        conn.execute(text("INSERT INTO UserRoles VALUES ('u-1', 'r-1')"))

    try:
        user = AuthService(build_storage(engine)).authenticate("ravi", "legacy-pass")
    finally:
        engine.dispose()

    assert user.id == "u-1"
    assert user.name == "Ravi K"
    assert user.role == "Manager"


def test_login_sets_session_cookie(client, login):
    response = login()

    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "Welcome back, Super Admin."}
    claims = decode_session_token(client.cookies.get(get_settings().session_cookie))
    assert claims["sub"] == "1"
    assert claims["role"] == "Administrator"

    me = client.get("/api/account/me").json()
    assert me == {"id": "1", "name": "Super Admin", "email": "admin@example.com", "role": "Administrator"}


def test_remember_me_sets_persistent_cookie(client, login):
    response = login(remember_me="true")

    assert "max-age" in response.headers["set-cookie"].lower()


def test_browser_login_redirects_to_local_return_url(client):
    data = {"identifier": "admin@example.com", "password": "changeme"}

    local = client.post("/api/account/login", data={**data, "return_url": "/api/items"}, follow_redirects=False)
    assert local.status_code == 303
    assert local.headers["location"] == "/api/items"

    external = client.post(
        "/api/account/login", data={**data, "return_url": "https://evil.example/"}, follow_redirects=False
    )
    assert external.headers["location"] == "/api/dashboard"


def test_wrong_password_and_unknown_user_look_the_same(client, login):
    wrong = login(password="not-it")
    unknown = login(identifier="nobody@example.com", password="not-it")

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"ok": False, "message": INVALID_CREDENTIALS}


def test_logout_clears_session(admin_client):
    assert admin_client.get("/api/account/me").status_code == 200

    response = admin_client.post("/api/account/logout", headers=JSON_HEADERS)
    assert response.json()["ok"] is True
    assert admin_client.get("/api/account/me").status_code == 401


def test_user_admin_requires_administrator(storage, client, login):
    _create_cashier(storage)
    assert login("cashier@example.com", "secret1").status_code == 200

    assert client.get("/api/dashboard").status_code == 200
    assert client.get("/api/users").status_code == 403
    assert client.get("/api/roles").status_code == 403


def test_create_user_and_duplicate_email(admin_client, storage):
    data = {
        "full_name": "Meena",
        "email": "meena@example.com",
        "mobile_number": "9000000002",
        "role_id": str(_role_id(storage, "Cashier")),
        "password": "secret1",
    }
    created = admin_client.post("/api/users", data=data, headers=JSON_HEADERS)
    assert created.status_code == 200

    users = admin_client.get("/api/users").json()["items"]
    assert users[0]["email"] == "meena@example.com"
    assert users[0]["role_name"] == "Cashier"

    duplicate = admin_client.post("/api/users", data=data, headers=JSON_HEADERS)
    assert duplicate.status_code == 409
    assert duplicate.json()["errors"] == {"email": ["A user with this e-mail already exists."]}


def test_create_user_validation(admin_client):
    response = admin_client.post(
        "/api/users",
        data={"full_name": "X", "email": "not-an-email", "mobile_number": "98-76", "role_id": "0", "password": "abc"},
        headers=JSON_HEADERS,
    )
    assert response.status_code == 400
    assert set(response.json()["errors"]) == {"email", "mobile_number", "role_id", "password"}


def test_update_without_password_keeps_it(storage):
    user_id = _create_cashier(storage)
    service = UserService(storage)
    form = UserForm(
        full_name="Asha K",
        email="asha@example.com",
        role_id=_role_id(storage, "Administrator"),
    )
    assert service.update(user_id, form, actor_id=1)

    user = AuthService(storage).authenticate("asha@example.com", "secret1")
    assert user.name == "Asha K"
    assert user.role == "Administrator"


def test_update_with_password_replaces_it(storage):
    user_id = _create_cashier(storage)
    form = UserForm(
        full_name="Asha Cashier",
        email="cashier@example.com",
        role_id=_role_id(storage, "Cashier"),
        password="newpass1",
    )
    UserService(storage).update(user_id, form, actor_id=1)

    auth = AuthService(storage)
    assert auth.authenticate("cashier@example.com", "secret1") is None
    assert auth.authenticate("cashier@example.com", "newpass1") is not None


def test_update_of_missing_user(storage):
    form = UserForm(full_name="Ghost", email="ghost@example.com", role_id=1)
    assert UserService(storage).update(404, form, actor_id=1) is False
