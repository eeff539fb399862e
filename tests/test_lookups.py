from urllib.parse import unquote

from posapp.core.responses import FLASH_COOKIE, field_errors

JSON_HEADERS = {"Accept": "application/json"}


def test_lookup_routes_require_session(client):
    assert client.get("/api/business-types").status_code == 401
    assert client.post("/api/states", data={"name": "Goa"}).status_code == 401


def test_create_and_list_lookup(admin_client):
    """A created item shows up in the list with its audit columns."""
    response = admin_client.post("/api/industry-types", data={"name": "  Hospitality "}, headers=JSON_HEADERS)
    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "Industry type created successfully."}

    items = admin_client.get("/api/industry-types").json()["items"]
    assert len(items) == 1
    assert items[0]["name"] == "Hospitality"
    assert items[0]["is_active"] is True
    assert items[0]["created_by"] == 1
    assert items[0]["created_on"] is not None


def test_duplicate_name_is_a_field_error(admin_client):
    admin_client.post("/api/states", data={"name": "Telangana"}, headers=JSON_HEADERS)
    response = admin_client.post("/api/states", data={"name": "Telangana"}, headers=JSON_HEADERS)

    assert response.status_code == 409
    assert response.json() == {
        "ok": False,
        "message": "State already exists.",
        "errors": {"name": ["State already exists."]},
    }


def test_duplicate_name_on_update(admin_client):
    admin_client.post("/api/registration-types", data={"name": "Proprietorship"}, headers=JSON_HEADERS)
    admin_client.post("/api/registration-types", data={"name": "Partnership"}, headers=JSON_HEADERS)
    items = admin_client.get("/api/registration-types").json()["items"]
    partnership = next(item for item in items if item["name"] == "Partnership")

    response = admin_client.post(
        f"/api/registration-types/{partnership['id']}", data={"name": "Proprietorship"}, headers=JSON_HEADERS
    )
    assert response.status_code == 409
    assert response.json()["errors"] == {"name": ["Registration type already exists."]}


def test_blank_name_is_rejected(admin_client):
    response = admin_client.post("/api/business-types", data={"name": "   "}, headers=JSON_HEADERS)

    assert response.status_code == 400
    body = response.json()
    assert body["ok"] is False
    assert "name" in body["errors"]


def test_form_post_redirects_with_flash(admin_client):
    """Browser posts get a 303 and the message is shown once on the list."""
    response = admin_client.post("/api/business-types", data={"name": "Retail"}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/api/business-types"
    assert unquote(response.cookies[FLASH_COOKIE]) == "Business type created successfully."

    assert admin_client.get("/api/business-types").json()["flash"] == "Business type created successfully."
    assert admin_client.get("/api/business-types").json()["flash"] is None


def test_toggle_and_missing_ids(admin_client):
    admin_client.post("/api/categories", data={"name": "Snacks", "color": "#ffcc00"}, headers=JSON_HEADERS)
    snacks = next(c for c in admin_client.get("/api/categories").json()["items"] if c["name"] == "Snacks")
    assert snacks["color"] == "#ffcc00"

    response = admin_client.post(f"/api/categories/{snacks['id']}/toggle", data={"activate": "false"}, headers=JSON_HEADERS)
    assert response.json()["message"] == "Category deactivated successfully."
    assert admin_client.get(f"/api/categories/{snacks['id']}").json()["is_active"] is False

    missing = admin_client.post("/api/categories/9999/toggle", data={"activate": "true"}, headers=JSON_HEADERS)
    assert missing.status_code == 404
    assert missing.json() == {"ok": False, "message": "Category not found."}
    assert admin_client.get("/api/categories/9999").status_code == 404
    assert admin_client.post("/api/categories/9999", data={"name": "Ghost"}, headers=JSON_HEADERS).status_code == 404


def test_role_delete_refused_while_assigned(admin_client):
    roles = admin_client.get("/api/roles").json()["items"]
    admin = next(role for role in roles if role["name"] == "Administrator")
    assert admin["assigned_users"] == 1

    response = admin_client.post(f"/api/roles/{admin['id']}/delete", headers=JSON_HEADERS)
    assert response.status_code == 409
    assert response.json()["ok"] is False


def test_role_create_update_delete(admin_client):
    response = admin_client.post(
        "/api/roles", data={"name": "Auditor", "permissions": "reports:read"}, headers=JSON_HEADERS
    )
    assert response.status_code == 200
    auditor = next(role for role in admin_client.get("/api/roles").json()["items"] if role["name"] == "Auditor")
    assert auditor["permissions"] == "reports:read"
    assert auditor["assigned_users"] == 0

    admin_client.post(
        f"/api/roles/{auditor['id']}", data={"name": "Auditor", "permissions": "reports:full"}, headers=JSON_HEADERS
    )
    assert admin_client.get(f"/api/roles/{auditor['id']}").json()["permissions"] == "reports:full"

    assert admin_client.post(f"/api/roles/{auditor['id']}/delete", headers=JSON_HEADERS).status_code == 200
    assert admin_client.post(f"/api/roles/{auditor['id']}/delete", headers=JSON_HEADERS).status_code == 404


def test_duplicate_role_name(admin_client):
    response = admin_client.post("/api/roles", data={"name": "Cashier"}, headers=JSON_HEADERS)

    assert response.status_code == 409
    assert response.json()["errors"] == {"name": ["Role already exists."]}


def test_field_errors_strip_value_error_prefix():
    errors = field_errors([
        {"loc": ("body", "website"), "msg": "Value error, Website must start with http:// or https://"},
        {"loc": ("body", "name"), "msg": "Field required"},
        {"loc": (), "msg": "Bad form"},
    ])
    assert errors == {
        "website": ["Website must start with http:// or https://"],
        "name": ["Field required"],
        "__all__": ["Bad form"],
    }
