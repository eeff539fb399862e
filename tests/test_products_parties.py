from datetime import date

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from posapp.schemas.parties import PartyForm
from posapp.schemas.products import ItemForm
from posapp.services.parties import PartyService
from posapp.services.products import ProductService

JSON_HEADERS = {"Accept": "application/json"}


def _count(storage, table):
    with storage.connect() as conn:
        return conn.execute(text(f"SELECT COUNT(1) FROM [{table}]")).scalar_one()


def test_items_require_session(client):
    assert client.get("/api/items").status_code == 401


def test_item_options_list_seeded_reference_data(admin_client):
    options = admin_client.get("/api/items/options").json()

    assert [t["name"] for t in options["product_types"]] == ["Goods", "Service"]
    assert {u["code"] for u in options["units"]} == {"PCS", "KG", "LTR", "BOX"}
    assert [g["rate"] for g in options["gst_rates"]] == [0, 5, 12, 18, 28]
    assert {c["name"] for c in options["categories"]} == {"Coffee", "Bakery", "Retail"}


def test_create_item_with_pricing_and_stock(admin_client):
    options = admin_client.get("/api/items/options").json()
    response = admin_client.post(
        "/api/items",
        data={
            "product_type_id": str(options["product_types"][0]["id"]),
            "category_id": str(options["categories"][0]["id"]),
            "item_name": "Filter Coffee",
            "item_code": "FC-001",
            "sales_price": "40.456",
            "gst_rate_id": str(options["gst_rates"][1]["id"]),
            "opening_stock": "25",
            "unit_id": str(options["units"][0]["id"]),
            "as_of_date": "2026-10-01",
            "description": "",
        },
        headers=JSON_HEADERS,
    )
    assert response.status_code == 200, response.text

    items = admin_client.get("/api/items").json()["items"]
    assert len(items) == 1
    item = admin_client.get(f"/api/items/{items[0]['id']}").json()
    assert item["item_name"] == "Filter Coffee"
    assert item["sales_price"] == 40.46
    assert item["gst_rate"] == 5
    assert item["opening_stock"] == 25
    assert item["current_stock"] == 25
    assert item["as_of_date"] == "2026-10-01"
    assert item["description"] is None
    assert item["is_active"] is True


def test_duplicate_item_code(admin_client):
    data = {"product_type_id": "1", "item_name": "Croissant", "item_code": "BK-01"}
    assert admin_client.post("/api/items", data=data, headers=JSON_HEADERS).status_code == 200

    response = admin_client.post("/api/items", data={**data, "item_name": "Other"}, headers=JSON_HEADERS)
    assert response.status_code == 409
    assert response.json()["errors"] == {"item_code": ["An item with this code already exists."]}


def test_items_without_code_are_not_duplicates(admin_client):
    data = {"product_type_id": "1", "item_name": "Loose Tea", "item_code": ""}
    assert admin_client.post("/api/items", data=data, headers=JSON_HEADERS).status_code == 200
    assert admin_client.post("/api/items", data=data, headers=JSON_HEADERS).status_code == 200


def test_stock_date_defaults_to_today(storage):
    service = ProductService(storage)
    form = ItemForm(product_type_id=1, item_name="Muffin", opening_stock=10)
    product_id = service.create(form, actor_id=1, today=date(2026, 10, 18))

    item = service.get_by_id(product_id)
    assert item.as_of_date == date(2026, 10, 18)
    assert item.current_stock == 10
    assert item.sales_price is None


def test_item_without_stock_fields_has_no_stock_row(storage):
    service = ProductService(storage)
    product_id = service.create(ItemForm(product_type_id=2, item_name="Delivery"), actor_id=1)

    item = service.get_by_id(product_id)
    assert item.product_type_name == "Service"
    assert item.as_of_date is None
    assert item.unit_id is None


def test_toggle_item(admin_client):
    admin_client.post("/api/items", data={"product_type_id": "1", "item_name": "Bun"}, headers=JSON_HEADERS)
    item_id = admin_client.get("/api/items").json()["items"][0]["id"]

    response = admin_client.post(f"/api/items/{item_id}/toggle", data={"activate": "false"}, headers=JSON_HEADERS)
    assert response.json()["message"] == "Item deactivated successfully."
    assert admin_client.get(f"/api/items/{item_id}").json()["is_active"] is False
    assert admin_client.post("/api/items/999/toggle", data={"activate": "true"}).status_code == 404


def test_create_party_with_all_sections(admin_client):
    response = admin_client.post(
        "/api/parties",
        data={
            "party_name": "Sri Traders",
            "mobile_number": "9123456780",
            "email": "accounts@sritraders.example",
            "gstin": "36ABCDE1234F1Z5",
            "party_type_id": "2",
            "billing_address": "4 Market Road",
            "same_as_billing": "true",
            "credit_period_days": "30",
            "credit_limit": "50000",
            "contact_person_name": "Srinivas",
            "date_of_birth": "1980-05-17",
            "bank_account_number": "001122334455",
            "re_enter_account_number": "001122334455",
            "ifsc_code": "SBIN0000001",
            "account_holder_name": "Sri Traders",
        },
        headers=JSON_HEADERS,
    )
    assert response.status_code == 200, response.text
    assert response.json()["message"] == "Party 'Sri Traders' saved successfully."

    parties = admin_client.get("/api/parties").json()["items"]
    party = admin_client.get(f"/api/parties/{parties[0]['id']}").json()
    assert party["party_type_name"] == "Vendor"
    assert party["party_category_name"] == "Retail"
    assert party["billing_address"] == "4 Market Road"
    assert party["shipping_address"] == "4 Market Road"
    assert party["credit_period_days"] == 30
    assert party["contact_person_name"] == "Srinivas"
    assert party["date_of_birth"] == "1980-05-17"
    assert party["bank_account_number"] == "001122334455"
    assert party["upi_id"] is None


def test_minimal_party(admin_client):
    response = admin_client.post("/api/parties", data={"party_name": "Walk-in"}, headers=JSON_HEADERS)
    assert response.status_code == 200

    party = admin_client.get("/api/parties").json()["items"][0]
    assert party["party_type_name"] == "Customer"
    assert party["billing_address"] is None
    assert party["bank_account_number"] is None


def test_save_and_new_redirects_to_blank_form(admin_client):
    response = admin_client.post(
        "/api/parties",
        data={"party_name": "Walk-in", "submit_action": "save-new"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/api/parties/options"


def test_party_cross_field_rules(admin_client):
    response = admin_client.post(
        "/api/parties",
        data={
            "party_name": "Bad Data Co",
            "gstin": "36ABC",
            "bank_account_number": "111",
            "re_enter_account_number": "112",
        },
        headers=JSON_HEADERS,
    )
    assert response.status_code == 400
    assert response.json()["errors"] == {
        "gstin": ["GSTIN must be exactly 15 characters."],
        "re_enter_account_number": ["Account numbers do not match."],
    }


def test_party_field_validation(admin_client):
    response = admin_client.post(
        "/api/parties",
        data={"party_name": "X", "mobile_number": "98x", "credit_period_days": "5000"},
        headers=JSON_HEADERS,
    )
    assert response.status_code == 400
    assert set(response.json()["errors"]) == {"mobile_number", "credit_period_days"}
    assert admin_client.get("/api/parties/12345").status_code == 404


def test_failed_stock_insert_rolls_back_item(storage):
    """An unknown unit fails the stock row; no product or pricing row is left behind."""
    form = ItemForm(product_type_id=1, item_name="Ghost Item", item_code="GH-01", sales_price=10, unit_id=9999, opening_stock=5)

    with pytest.raises(IntegrityError):
        ProductService(storage).create(form, actor_id=1)

    assert _count(storage, "Products") == 0
    assert _count(storage, "ProductPricing") == 0
    assert _count(storage, "ProductStock") == 0


def test_failed_bank_insert_rolls_back_party(storage):
    """A failing bank-detail insert undoes the party, its addresses and its contact."""
    with storage.transaction() as conn:
        conn.execute(text("DROP TABLE [PartyBankDetails]"))
    form = PartyForm(
        party_name="Half Saved",
        billing_address="1 Lake View",
        same_as_billing=True,
        contact_person_name="Ravi",
        bank_account_number="998877",
        re_enter_account_number="998877",
    )

    with pytest.raises(SQLAlchemyError):
        PartyService(storage).create(form, actor_id=1)

    assert _count(storage, "Parties") == 0
    assert _count(storage, "PartyAddresses") == 0
    assert _count(storage, "PartyContacts") == 0
