"""
Runtime probing of the business-profile tables.

The SQL Server deployment points at a schema this application does not own,
so before building business-profile SQL we read the catalog and record which
optional columns and tables exist. The result is an immutable BusinessSchema
that the SQL builder consumes without touching the database.

Probing issues one catalog query per table and runs on the caller's
connection, so it enlists in an already open transaction. Results are not
cached: every operation probes again.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from sqlalchemy.engine import Connection

from posapp.storage.base import StorageAdapter
from posapp.storage.dialects import SqlDialect

logger = logging.getLogger(__name__)

BUSINESS_TABLE = "Businesses"
ADDRESS_TABLE = "BusinessAddresses"
TYPE_LINK_TABLE = "BusinessBusinessTypes"

BUSINESS_ID = "BusinessId"

# Always present; order is the column order used in every statement.
REQUIRED_BUSINESS_COLUMNS = (
    "BusinessName",
    "CompanyPhoneNumber",
    "CompanyEmail",
    "IsGstRegistered",
    "GstNumber",
    "PanNumber",
    "IndustryTypeId",
    "RegistrationTypeId",
)

OPTIONAL_BUSINESS_COLUMNS = ("MsmeNumber", "Website", "AdditionalInfo")
AUDIT_COLUMNS = ("CreatedBy", "CreatedOn", "UpdatedBy", "UpdatedOn")
TENANT_COLUMN = "TenantId"
CURRENT_FLAG_COLUMN = "IsCurrent"

# Candidate names, preferred first.
BILLING_ADDRESS_ALIASES = ("BillingAddress", "Billing_address", "Address")
CITY_ALIASES = ("City",)
PINCODE_ALIASES = ("Pincode", "PinCode", "PostalCode")
STATE_ID_ALIASES = ("StateId", "State_Id")

LOGO_DETAILED = ("LogoFileName", "LogoContentType", "LogoData")
LOGO_LEGACY_ALIASES = ("Logo", "BusinessLogo")
SIGNATURE_DETAILED = ("SignatureFileName", "SignatureContentType", "SignatureData")
SIGNATURE_LEGACY_ALIASES = ("Signature", "SignatureImage")

BINARY_DETAILED = "detailed"
BINARY_LEGACY = "legacy"
BINARY_NONE = "none"


@dataclass(frozen=True)
class BinaryColumns:
    mode: str = BINARY_NONE
    data: Optional[str] = None
    content_type: Optional[str] = None
    file_name: Optional[str] = None

    @property
    def present(self) -> bool:
        return self.mode != BINARY_NONE


@dataclass(frozen=True)
class AddressColumns:
    """Resolved address column names; None where the column is missing."""

    table: str
    billing_address: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    state_id: Optional[str] = None
    has_audit: bool = False

    @property
    def inline(self) -> bool:
        return self.table == BUSINESS_TABLE

    def assignments(self) -> Tuple[Tuple[str, str], ...]:
        """(column, parameter name) pairs for the columns that exist."""
        pairs = (
            (self.billing_address, "billing_address"),
            (self.city, "city"),
            (self.pincode, "pincode"),
            (self.state_id, "state_id"),
        )
        return tuple((column, param) for column, param in pairs if column)


@dataclass(frozen=True)
class BusinessSchema:
    dialect: SqlDialect
    optional_columns: Tuple[str, ...] = ()
    has_audit: bool = False
    has_tenant: bool = False
    has_current_flag: bool = False
    logo: BinaryColumns = BinaryColumns()
    signature: BinaryColumns = BinaryColumns()
    address: Optional[AddressColumns] = None
    has_type_links: bool = False


def resolve_column(columns: Dict[str, str], aliases: Sequence[str]) -> Optional[str]:
    """Return the actual name of the first alias present in `columns`."""
    for alias in aliases:
        actual = columns.get(alias.lower())
        if actual:
            return actual
    return None


def _has_all(columns: Dict[str, str], names: Sequence[str]) -> bool:
    return all(name.lower() in columns for name in names)


def resolve_binary(columns: Dict[str, str], detailed: Sequence[str], legacy: Sequence[str]) -> BinaryColumns:
    """Prefer the filename/content-type/data triple; fall back to a single blob."""
    if _has_all(columns, detailed):
        file_name, content_type, data = (columns[name.lower()] for name in detailed)
        return BinaryColumns(BINARY_DETAILED, data=data, content_type=content_type, file_name=file_name)
    legacy_column = resolve_column(columns, legacy)
    if legacy_column:
        return BinaryColumns(BINARY_LEGACY, data=legacy_column)
    return BinaryColumns()


def resolve_address(columns: Dict[str, str], table: str) -> Optional[AddressColumns]:
    address = AddressColumns(
        table=table,
        billing_address=resolve_column(columns, BILLING_ADDRESS_ALIASES),
        city=resolve_column(columns, CITY_ALIASES),
        pincode=resolve_column(columns, PINCODE_ALIASES),
        state_id=resolve_column(columns, STATE_ID_ALIASES),
        has_audit=_has_all(columns, AUDIT_COLUMNS),
    )
    if not address.assignments():
        return None
    return address


def describe_business_schema(
    dialect: SqlDialect,
    business_columns: Dict[str, str],
    address_columns: Dict[str, str],
    type_link_columns: Dict[str, str],
) -> BusinessSchema:
    """Build the descriptor from already fetched column maps."""
    optional = tuple(
        business_columns[name.lower()]
        for name in OPTIONAL_BUSINESS_COLUMNS
        if name.lower() in business_columns
    )

    if address_columns:
        address = resolve_address(address_columns, ADDRESS_TABLE)
    else:
        address = resolve_address(business_columns, BUSINESS_TABLE)

    return BusinessSchema(
        dialect=dialect,
        optional_columns=optional,
        has_audit=_has_all(business_columns, AUDIT_COLUMNS),
        has_tenant=TENANT_COLUMN.lower() in business_columns,
        has_current_flag=CURRENT_FLAG_COLUMN.lower() in business_columns,
        logo=resolve_binary(business_columns, LOGO_DETAILED, LOGO_LEGACY_ALIASES),
        signature=resolve_binary(business_columns, SIGNATURE_DETAILED, SIGNATURE_LEGACY_ALIASES),
        address=address,
        has_type_links=bool(type_link_columns),
    )


def probe_business_schema(storage: StorageAdapter, conn: Connection) -> BusinessSchema:
    """Probe the catalog for the business-profile tables on `conn`."""
    business_columns = storage.fetch_columns(conn, BUSINESS_TABLE)
    address_columns = storage.fetch_columns(conn, ADDRESS_TABLE)
    type_link_columns = storage.fetch_columns(conn, TYPE_LINK_TABLE)

    schema = describe_business_schema(storage.sql, business_columns, address_columns, type_link_columns)
    logger.debug(f"Probed business schema: {schema}")
    return schema
