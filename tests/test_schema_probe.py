from posapp.storage.dialects import SQLITE
from posapp.storage.schema import (
    ADDRESS_TABLE,
    BINARY_DETAILED,
    BINARY_LEGACY,
    BINARY_NONE,
    BUSINESS_TABLE,
    describe_business_schema,
    probe_business_schema,
)


def test_probe_owned_schema(storage):
    """The locally created schema has every optional feature."""
    with storage.connect() as conn:
        schema = probe_business_schema(storage, conn)

    assert schema.dialect is SQLITE
    assert schema.optional_columns == ("MsmeNumber", "Website", "AdditionalInfo")
    assert schema.has_audit
    assert schema.has_tenant
    assert schema.has_current_flag
    assert schema.has_type_links
    assert schema.logo.mode == BINARY_DETAILED
    assert schema.logo.data == "LogoData"
    assert schema.signature.file_name == "SignatureFileName"
    assert schema.address.table == ADDRESS_TABLE
    assert not schema.address.inline
    assert schema.address.has_audit


def test_probe_legacy_schema(legacy_storage):
    """Missing tables and columns are detected and aliases are resolved to their actual names."""
    with legacy_storage.connect() as conn:
        schema = probe_business_schema(legacy_storage, conn)

    assert schema.optional_columns == ("website",)
    assert not schema.has_audit
    assert not schema.has_tenant
    assert not schema.has_current_flag
    assert not schema.has_type_links
    assert schema.logo.mode == BINARY_LEGACY
    assert schema.logo.data == "Logo"
    assert schema.signature.mode == BINARY_NONE
    assert schema.address.inline
    assert schema.address.billing_address == "Address"
    assert schema.address.pincode == "PinCode"
    assert schema.address.city is None
    assert schema.address.assignments() == (("Address", "billing_address"), ("PinCode", "pincode"))


def test_describe_without_address_columns():
    """No address anywhere gives no address descriptor."""
    business = {name.lower(): name for name in ("BusinessId", "BusinessName")}
    schema = describe_business_schema(SQLITE, business, {}, {})

    assert schema.address is None
    assert schema.logo.mode == BINARY_NONE


def test_describe_prefers_detailed_binary_columns():
    """The filename/content-type/data triple wins over a legacy blob column."""
    names = ("BusinessId", "Logo", "LogoFileName", "LogoContentType", "LogoData")
    schema = describe_business_schema(SQLITE, {n.lower(): n for n in names}, {}, {})

    assert schema.logo.mode == BINARY_DETAILED
    assert schema.logo.data == "LogoData"


def test_describe_partial_triple_falls_back_to_legacy():
    """An incomplete triple is not used."""
    names = ("BusinessId", "BusinessLogo", "LogoData")
    schema = describe_business_schema(SQLITE, {n.lower(): n for n in names}, {}, {})

    assert schema.logo.mode == BINARY_LEGACY
    assert schema.logo.data == "BusinessLogo"


def test_separate_address_table_wins_over_inline_columns():
    """When the address table exists the inline columns are ignored."""
    business = {n.lower(): n for n in ("BusinessId", "Address")}
    address = {n.lower(): n for n in ("BusinessAddressId", "BusinessId", "Billing_address", "State_Id")}
    schema = describe_business_schema(SQLITE, business, address, {})

    assert schema.address.table == ADDRESS_TABLE
    assert schema.address.billing_address == "Billing_address"
    assert schema.address.state_id == "State_Id"
    assert not schema.address.has_audit
    assert schema.address.table != BUSINESS_TABLE
