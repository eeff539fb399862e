"""
Business-profile SQL assembled from a probed BusinessSchema.

Every function is pure: given the same descriptor and inputs it returns the
same SQL text with the same column order and placeholder names. Columns are
always bracket-quoted because resolved legacy names may be reserved words.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from posapp.storage.dialects import quote_identifier as q
from posapp.storage.schema import (
    ADDRESS_TABLE,
    AUDIT_COLUMNS,
    BINARY_DETAILED,
    BUSINESS_ID,
    BUSINESS_TABLE,
    CURRENT_FLAG_COLUMN,
    REQUIRED_BUSINESS_COLUMNS,
    TENANT_COLUMN,
    TYPE_LINK_TABLE,
    BinaryColumns,
    BusinessSchema,
)

BUSINESS_TYPE_ID = "BusinessTypeId"

# Parameter name for each logical business column.
COLUMN_PARAMS = {
    "BusinessName": "business_name",
    "CompanyPhoneNumber": "company_phone_number",
    "CompanyEmail": "company_email",
    "IsGstRegistered": "is_gst_registered",
    "GstNumber": "gst_number",
    "PanNumber": "pan_number",
    "IndustryTypeId": "industry_type_id",
    "RegistrationTypeId": "registration_type_id",
    "MsmeNumber": "msme_number",
    "Website": "website",
    "AdditionalInfo": "additional_info",
}

ADDRESS_ALIASES = {
    "billing_address": "BillingAddress",
    "city": "City",
    "pincode": "Pincode",
    "state_id": "StateId",
}


@dataclass(frozen=True)
class FilePayload:
    """An uploaded file ready to be stored."""

    file_name: Optional[str]
    content_type: Optional[str]
    data: bytes


@dataclass
class Statement:
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)


def _canonical(schema_column: str) -> str:
    for name in COLUMN_PARAMS:
        if name.lower() == schema_column.lower():
            return name
    return schema_column


def _profile_columns(schema: BusinessSchema) -> List[Tuple[str, str]]:
    """(actual column, parameter) pairs for required then optional columns."""
    pairs = [(column, COLUMN_PARAMS[column]) for column in REQUIRED_BUSINESS_COLUMNS]
    pairs.extend((column, COLUMN_PARAMS[_canonical(column)]) for column in schema.optional_columns)
    return pairs


def _binary_pairs(binary: BinaryColumns, prefix: str) -> List[Tuple[str, str]]:
    if not binary.present:
        return []
    if binary.mode == BINARY_DETAILED:
        return [
            (binary.file_name, f"{prefix}_file_name"),
            (binary.content_type, f"{prefix}_content_type"),
            (binary.data, f"{prefix}_data"),
        ]
    return [(binary.data, f"{prefix}_data")]


def _binary_params(prefix: str, payload: Optional[FilePayload]) -> Dict[str, Any]:
    return {
        f"{prefix}_file_name": payload.file_name if payload else None,
        f"{prefix}_content_type": payload.content_type if payload else None,
        f"{prefix}_data": payload.data if payload else None,
    }


def _tenant_filter(schema: BusinessSchema, tenant_id: Optional[int]) -> bool:
    return schema.has_tenant and tenant_id is not None


def select_latest_business(schema: BusinessSchema, tenant_id: Optional[int] = None) -> Statement:
    """The current profile: flagged row first when IsCurrent exists, then highest id."""
    select_list = [f"{q(BUSINESS_ID)} AS {q(BUSINESS_ID)}"]
    for column, _ in _profile_columns(schema):
        select_list.append(f"{q(column)} AS {q(_canonical(column))}")

    address = schema.address
    if address is not None and address.inline:
        for column, param in address.assignments():
            select_list.append(f"{q(column)} AS {q(ADDRESS_ALIASES[param])}")

    for binary, alias in ((schema.logo, "HasLogo"), (schema.signature, "HasSignature")):
        if binary.present:
            select_list.append(f"CASE WHEN {q(binary.data)} IS NULL THEN 0 ELSE 1 END AS {q(alias)}")

    params: Dict[str, Any] = {}
    rest = f"FROM {q(BUSINESS_TABLE)}"
    if _tenant_filter(schema, tenant_id):
        rest += f" WHERE {q(TENANT_COLUMN)} = :tenant_id"
        params["tenant_id"] = tenant_id

    order = [f"{q(BUSINESS_ID)} DESC"]
    if schema.has_current_flag:
        order.insert(0, f"{q(CURRENT_FLAG_COLUMN)} DESC")
    rest += " ORDER BY " + ", ".join(order)

    return Statement(schema.dialect.select_first(", ".join(select_list), rest), params)


def clear_current_flag(schema: BusinessSchema, tenant_id: Optional[int] = None) -> Optional[Statement]:
    if not schema.has_current_flag:
        return None
    sql = f"UPDATE {q(BUSINESS_TABLE)} SET {q(CURRENT_FLAG_COLUMN)} = 0 WHERE {q(CURRENT_FLAG_COLUMN)} = 1"
    params: Dict[str, Any] = {}
    if _tenant_filter(schema, tenant_id):
        sql += f" AND {q(TENANT_COLUMN)} = :tenant_id"
        params["tenant_id"] = tenant_id
    return Statement(sql, params)


def insert_business(
    schema: BusinessSchema,
    values: Mapping[str, Any],
    actor_id: int,
    tenant_id: Optional[int] = None,
    logo: Optional[FilePayload] = None,
    signature: Optional[FilePayload] = None,
) -> Statement:
    """INSERT returning the new BusinessId."""
    now = schema.dialect.now_sql
    columns: List[str] = []
    placeholders: List[str] = []
    params: Dict[str, Any] = {}

    for column, param in _profile_columns(schema):
        columns.append(q(column))
        placeholders.append(f":{param}")
        params[param] = values.get(param)

    address = schema.address
    if address is not None and address.inline:
        for column, param in address.assignments():
            columns.append(q(column))
            placeholders.append(f":{param}")
            params[param] = values.get(param)

    for binary, prefix, payload in ((schema.logo, "logo", logo), (schema.signature, "signature", signature)):
        payload_params = _binary_params(prefix, payload)
        for column, param in _binary_pairs(binary, prefix):
            columns.append(q(column))
            placeholders.append(f":{param}")
            params[param] = payload_params[param]

    if schema.has_current_flag:
        columns.append(q(CURRENT_FLAG_COLUMN))
        placeholders.append("1")

    if _tenant_filter(schema, tenant_id):
        columns.append(q(TENANT_COLUMN))
        placeholders.append(":tenant_id")
        params["tenant_id"] = tenant_id

    if schema.has_audit:
        columns.extend(q(column) for column in AUDIT_COLUMNS)
        placeholders.extend([":actor_id", now, ":actor_id", now])
        params["actor_id"] = actor_id

    sql = schema.dialect.insert_returning(q(BUSINESS_TABLE), columns, placeholders, q(BUSINESS_ID))
    return Statement(sql, params)


def update_business(
    schema: BusinessSchema,
    business_id: int,
    values: Mapping[str, Any],
    actor_id: int,
    logo: Optional[FilePayload] = None,
    signature: Optional[FilePayload] = None,
    tenant_id: Optional[int] = None,
) -> Statement:
    """
    UPDATE by id; stored files are only replaced when a new one was supplied.

    With a tenant the row must also belong to it, so a foreign id updates
    nothing.
    """
    assignments: List[str] = []
    params: Dict[str, Any] = {}

    for column, param in _profile_columns(schema):
        assignments.append(f"{q(column)} = :{param}")
        params[param] = values.get(param)

    address = schema.address
    if address is not None and address.inline:
        for column, param in address.assignments():
            assignments.append(f"{q(column)} = :{param}")
            params[param] = values.get(param)

    for binary, prefix, payload in ((schema.logo, "logo", logo), (schema.signature, "signature", signature)):
        if payload is None:
            continue
        payload_params = _binary_params(prefix, payload)
        for column, param in _binary_pairs(binary, prefix):
            assignments.append(f"{q(column)} = :{param}")
            params[param] = payload_params[param]

    if schema.has_audit:
        assignments.append(f"{q('UpdatedBy')} = :actor_id")
        assignments.append(f"{q('UpdatedOn')} = {schema.dialect.now_sql}")
        params["actor_id"] = actor_id

    params["business_id"] = business_id
    sql = (
        f"UPDATE {q(BUSINESS_TABLE)} SET {', '.join(assignments)} "
        f"WHERE {q(BUSINESS_ID)} = :business_id"
    )
    if _tenant_filter(schema, tenant_id):
        sql += f" AND {q(TENANT_COLUMN)} = :tenant_id"
        params["tenant_id"] = tenant_id
    return Statement(sql, params)


def select_address(schema: BusinessSchema, business_id: int) -> Optional[Statement]:
    address = schema.address
    if address is None or address.inline:
        return None
    select_list = ", ".join(
        f"{q(column)} AS {q(ADDRESS_ALIASES[param])}" for column, param in address.assignments()
    )
    return Statement(
        schema.dialect.select_first(
            select_list,
            f"FROM {q(ADDRESS_TABLE)} WHERE {q(BUSINESS_ID)} = :business_id ORDER BY {q(BUSINESS_ID)}",
        ),
        {"business_id": business_id},
    )


def count_address(schema: BusinessSchema, business_id: int) -> Optional[Statement]:
    address = schema.address
    if address is None or address.inline:
        return None
    return Statement(
        f"SELECT COUNT(1) FROM {q(ADDRESS_TABLE)} WHERE {q(BUSINESS_ID)} = :business_id",
        {"business_id": business_id},
    )


def insert_address(schema: BusinessSchema, business_id: int, values: Mapping[str, Any], actor_id: int) -> Statement:
    address = schema.address
    columns = [q(BUSINESS_ID)]
    placeholders = [":business_id"]
    params: Dict[str, Any] = {"business_id": business_id}
    for column, param in address.assignments():
        columns.append(q(column))
        placeholders.append(f":{param}")
        params[param] = values.get(param)
    if address.has_audit:
        now = schema.dialect.now_sql
        columns.extend(q(column) for column in AUDIT_COLUMNS)
        placeholders.extend([":actor_id", now, ":actor_id", now])
        params["actor_id"] = actor_id
    sql = f"INSERT INTO {q(ADDRESS_TABLE)} ({', '.join(columns)}) VALUES ({', '.join(placeholders)})"
    return Statement(sql, params)


def update_address(schema: BusinessSchema, business_id: int, values: Mapping[str, Any], actor_id: int) -> Statement:
    address = schema.address
    assignments = []
    params: Dict[str, Any] = {}
    for column, param in address.assignments():
        assignments.append(f"{q(column)} = :{param}")
        params[param] = values.get(param)
    if address.has_audit:
        assignments.append(f"{q('UpdatedBy')} = :actor_id")
        assignments.append(f"{q('UpdatedOn')} = {schema.dialect.now_sql}")
        params["actor_id"] = actor_id
    params["business_id"] = business_id
    sql = (
        f"UPDATE {q(ADDRESS_TABLE)} SET {', '.join(assignments)} "
        f"WHERE {q(BUSINESS_ID)} = :business_id"
    )
    return Statement(sql, params)


def select_type_links(schema: BusinessSchema, business_id: int) -> Optional[Statement]:
    if not schema.has_type_links:
        return None
    return Statement(
        f"SELECT {q(BUSINESS_TYPE_ID)} FROM {q(TYPE_LINK_TABLE)} "
        f"WHERE {q(BUSINESS_ID)} = :business_id ORDER BY {q(BUSINESS_TYPE_ID)}",
        {"business_id": business_id},
    )


def delete_type_links(schema: BusinessSchema, business_id: int) -> Optional[Statement]:
    if not schema.has_type_links:
        return None
    return Statement(
        f"DELETE FROM {q(TYPE_LINK_TABLE)} WHERE {q(BUSINESS_ID)} = :business_id",
        {"business_id": business_id},
    )


def insert_type_link(schema: BusinessSchema, business_id: int, business_type_id: int) -> Statement:
    sql = schema.dialect.insert_ignore(
        q(TYPE_LINK_TABLE),
        [q(BUSINESS_ID), q(BUSINESS_TYPE_ID)],
        [":business_id", ":business_type_id"],
    )
    return Statement(sql, {"business_id": business_id, "business_type_id": business_type_id})


def select_binary(
    schema: BusinessSchema, kind: str, business_id: int, tenant_id: Optional[int] = None
) -> Optional[Statement]:
    """Stored file for `kind` ("logo" or "signature"); None when the schema has no such column."""
    binary = schema.logo if kind == "logo" else schema.signature
    if not binary.present:
        return None
    if binary.mode == BINARY_DETAILED:
        select_list = (
            f"{q(binary.content_type)} AS {q('ContentType')}, "
            f"{q(binary.data)} AS {q('Data')}, "
            f"{q(binary.file_name)} AS {q('FileName')}"
        )
    else:
        select_list = f"NULL AS {q('ContentType')}, {q(binary.data)} AS {q('Data')}, NULL AS {q('FileName')}"
    sql = f"SELECT {select_list} FROM {q(BUSINESS_TABLE)} WHERE {q(BUSINESS_ID)} = :business_id"
    params: Dict[str, Any] = {"business_id": business_id}
    if _tenant_filter(schema, tenant_id):
        sql += f" AND {q(TENANT_COLUMN)} = :tenant_id"
        params["tenant_id"] = tenant_id
    return Statement(sql, params)
