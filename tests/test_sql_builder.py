from posapp.storage import sql_builder
from posapp.storage.dialects import MSSQL, SQLITE
from posapp.storage.schema import describe_business_schema
from posapp.storage.sql_builder import FilePayload

OWNED_BUSINESS = (
    "BusinessId", "BusinessName", "CompanyPhoneNumber", "CompanyEmail", "IsGstRegistered", "GstNumber",
    "PanNumber", "IndustryTypeId", "RegistrationTypeId", "MsmeNumber", "Website", "AdditionalInfo",
    "TenantId", "IsCurrent", "LogoFileName", "LogoContentType", "LogoData", "SignatureFileName",
    "SignatureContentType", "SignatureData", "CreatedBy", "CreatedOn", "UpdatedBy", "UpdatedOn",
)
OWNED_ADDRESS = (
    "BusinessAddressId", "BusinessId", "BillingAddress", "City", "Pincode", "StateId",
    "CreatedBy", "CreatedOn", "UpdatedBy", "UpdatedOn",
)

VALUES = {
    "business_name": "Radhira Cafe",
    "company_phone_number": "9876543210",
    "company_email": "hello@radhira.example",
    "is_gst_registered": 0,
    "gst_number": None,
    "pan_number": None,
    "industry_type_id": None,
    "registration_type_id": None,
    "msme_number": None,
    "website": "https://radhira.example",
    "additional_info": None,
    "billing_address": "12 MG Road",
    "city": "Hyderabad",
    "pincode": "500001",
    "state_id": 1,
}


def _columns(names):
    return {name.lower(): name for name in names}


def _owned(dialect=SQLITE):
    return describe_business_schema(dialect, _columns(OWNED_BUSINESS), _columns(OWNED_ADDRESS), {"businessid": "BusinessId"})


def test_statements_are_deterministic():
    """Same descriptor and inputs give identical SQL and parameters."""
    first = sql_builder.insert_business(_owned(), VALUES, actor_id=1, tenant_id=3)
    second = sql_builder.insert_business(_owned(), VALUES, actor_id=1, tenant_id=3)

    assert first.sql == second.sql
    assert first.params == second.params


def test_insert_column_order():
    """Required, optional, binary, current flag, tenant, audit."""
    statement = sql_builder.insert_business(_owned(), VALUES, actor_id=5, tenant_id=3)
    sql = statement.sql

    positions = [sql.index(f"[{name}]") for name in (
        "BusinessName", "RegistrationTypeId", "MsmeNumber", "AdditionalInfo",
        "LogoFileName", "SignatureData", "IsCurrent", "TenantId", "CreatedBy", "UpdatedOn",
    )]
    assert positions == sorted(positions)
    assert sql.endswith("RETURNING [BusinessId]")
    assert statement.params["tenant_id"] == 3
    assert statement.params["actor_id"] == 5
    # Address lives in its own table
    assert "[BillingAddress]" not in sql


def test_insert_without_files_writes_null_binary_columns():
    """A new profile without uploads still lists the binary columns, with null values."""
    statement = sql_builder.insert_business(_owned(), VALUES, actor_id=1)

    assert "[LogoData]" in statement.sql
    assert statement.params["logo_data"] is None
    assert statement.params["logo_content_type"] is None
    assert "tenant_id" not in statement.params


def test_update_leaves_stored_files_alone_without_upload():
    """Binary columns only appear in the UPDATE when a new file was supplied."""
    schema = _owned()
    without = sql_builder.update_business(schema, 7, VALUES, actor_id=1)
    with_logo = sql_builder.update_business(
        schema, 7, VALUES, actor_id=1, logo=FilePayload("logo.png", "image/png", b"\x89PNG")
    )

    assert "[LogoData]" not in without.sql
    assert "[SignatureData]" not in without.sql
    assert "[LogoData] = :logo_data" in with_logo.sql
    assert "[SignatureData]" not in with_logo.sql
    assert with_logo.params["logo_file_name"] == "logo.png"
    assert with_logo.params["business_id"] == 7
    assert "[CreatedOn]" not in with_logo.sql


def test_select_latest_orders_by_current_flag_then_id():
    """The flagged row wins; ties fall back to the highest id."""
    statement = sql_builder.select_latest_business(_owned(), tenant_id=4)

    assert "WHERE [TenantId] = :tenant_id" in statement.sql
    assert "ORDER BY [IsCurrent] DESC, [BusinessId] DESC LIMIT 1" in statement.sql
    assert "CASE WHEN [LogoData] IS NULL THEN 0 ELSE 1 END AS [HasLogo]" in statement.sql
    assert statement.params == {"tenant_id": 4}


def test_select_latest_on_mssql_uses_top():
    """The dialect decides how a single row is selected."""
    statement = sql_builder.select_latest_business(_owned(MSSQL))

    assert statement.sql.startswith("SELECT TOP 1 ")
    assert "LIMIT" not in statement.sql
    assert "WHERE" not in statement.sql


def test_legacy_shape_quotes_and_aliases_columns():
    """Resolved legacy names are bracket-quoted and aliased to the canonical names."""
    business = _columns((
        "BusinessId", "BusinessName", "CompanyPhoneNumber", "CompanyEmail", "IsGstRegistered", "GstNumber",
        "PanNumber", "IndustryTypeId", "RegistrationTypeId", "website", "Address", "Logo",
    ))
    schema = describe_business_schema(SQLITE, business, {}, {})

    select = sql_builder.select_latest_business(schema, tenant_id=9)
    assert "[website] AS [Website]" in select.sql
    assert "[Address] AS [BillingAddress]" in select.sql
    assert "ORDER BY [BusinessId] DESC" in select.sql
    # No tenant column, so no filter even when a tenant is configured
    assert "TenantId" not in select.sql

    insert = sql_builder.insert_business(schema, VALUES, actor_id=1, tenant_id=9)
    assert "[Address]" in insert.sql
    assert "[Logo]" in insert.sql
    assert "[IsCurrent]" not in insert.sql
    assert "[CreatedBy]" not in insert.sql
    assert insert.params["billing_address"] == "12 MG Road"

    assert sql_builder.clear_current_flag(schema) is None
    assert sql_builder.select_address(schema, 1) is None
    assert sql_builder.count_address(schema, 1) is None
    assert sql_builder.delete_type_links(schema, 1) is None
    assert "NULL AS [ContentType]" in sql_builder.select_binary(schema, "logo", 1).sql
    assert sql_builder.select_binary(schema, "signature", 1) is None


def test_clear_current_flag_scoped_to_tenant():
    statement = sql_builder.clear_current_flag(_owned(), tenant_id=2)

    assert statement.sql.startswith("UPDATE [Businesses] SET [IsCurrent] = 0")
    assert statement.sql.endswith("AND [TenantId] = :tenant_id")


def test_address_statements_for_separate_table():
    schema = _owned()

    insert = sql_builder.insert_address(schema, 3, VALUES, actor_id=2)
    assert insert.sql.startswith("INSERT INTO [BusinessAddresses] ([BusinessId], [BillingAddress], [City]")
    assert insert.params["state_id"] == 1

    update = sql_builder.update_address(schema, 3, VALUES, actor_id=2)
    assert "[UpdatedBy] = :actor_id" in update.sql
    assert update.sql.endswith("WHERE [BusinessId] = :business_id")


def test_type_link_insert_ignores_duplicates_on_sqlite():
    statement = sql_builder.insert_type_link(_owned(), 1, 2)

    assert statement.sql.startswith("INSERT OR IGNORE INTO [BusinessBusinessTypes]")
    assert statement.params == {"business_id": 1, "business_type_id": 2}


def test_update_and_binary_reads_scoped_to_tenant():
    update = sql_builder.update_business(_owned(), 7, VALUES, actor_id=1, tenant_id=2)
    logo = sql_builder.select_binary(_owned(), "logo", 7, tenant_id=2)

    assert update.sql.endswith("WHERE [BusinessId] = :business_id AND [TenantId] = :tenant_id")
    assert update.params["tenant_id"] == 2
    assert logo.sql.endswith("WHERE [BusinessId] = :business_id AND [TenantId] = :tenant_id")
    assert logo.params == {"business_id": 7, "tenant_id": 2}
    assert "TenantId" not in sql_builder.select_binary(_owned(), "logo", 7).sql
