"""
Business profile persistence.

The profile is written to whatever shape the connected database has: every
operation probes the schema first (on its own connection or inside its
transaction) and builds its SQL from the resulting descriptor. A save touches
the profile row, its address row and its business-type links in a single
transaction.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from posapp.schemas.business_profile import BinaryPayload, BusinessProfile, BusinessProfileForm
from posapp.storage import sql_builder
from posapp.storage.base import StorageAdapter
from posapp.storage.schema import BUSINESS_ID, BusinessSchema, probe_business_schema
from posapp.storage.sql_builder import ADDRESS_ALIASES, COLUMN_PARAMS, FilePayload, Statement
from posapp.utils.content_type import resolve_content_type

logger = logging.getLogger(__name__)

LOGO = "logo"
SIGNATURE = "signature"

ADDRESS_FIELDS = tuple(ADDRESS_ALIASES)


def distinct_positive_ids(ids: Iterable[int]) -> List[int]:
    """Drop non-positive ids and duplicates, keeping first-seen order."""
    seen = []
    for value in ids:
        if value is not None and value > 0 and value not in seen:
            seen.append(value)
    return seen


def _execute(conn: Connection, statement: Statement):
    return conn.execute(text(statement.sql), statement.params)


class BusinessProfileService:
    def __init__(self, storage: StorageAdapter, tenant_id: Optional[int] = None):
        self.storage = storage
        self.tenant_id = tenant_id

    def _form_values(self, form: BusinessProfileForm) -> Dict[str, Any]:
        values = {
            "business_name": form.business_name.strip(),
            "company_phone_number": form.company_phone_number,
            "company_email": str(form.company_email) if form.company_email else None,
            "is_gst_registered": None if form.is_gst_registered is None else int(form.is_gst_registered),
            "gst_number": form.gst_number,
            "pan_number": form.pan_number,
            "industry_type_id": form.industry_type_id,
            "registration_type_id": form.registration_type_id,
            "msme_number": form.msme_number,
            "website": form.website,
            "additional_info": form.additional_info,
            "billing_address": form.billing_address,
            "city": form.city,
            "pincode": form.pincode,
            "state_id": form.state_id,
        }
        return {key: value.strip() if isinstance(value, str) else value for key, value in values.items()}

    def _read_address(self, conn: Connection, schema: BusinessSchema, row: Dict[str, Any], business_id: int) -> Dict[str, Any]:
        if schema.address is None:
            return {}
        if schema.address.inline:
            source = row
        else:
            source = _execute(conn, sql_builder.select_address(schema, business_id)).mappings().first() or {}
        return {field: source.get(alias) for field, alias in ADDRESS_ALIASES.items()}

    def _read_type_ids(self, conn: Connection, schema: BusinessSchema, business_id: int) -> List[int]:
        statement = sql_builder.select_type_links(schema, business_id)
        if statement is None:
            return []
        return [row[0] for row in _execute(conn, statement).fetchall()]

    def get_latest(self) -> Optional[BusinessProfile]:
        """The current profile with its address and business types, or None."""
        with self.storage.connect() as conn:
            schema = probe_business_schema(self.storage, conn)
            row = _execute(conn, sql_builder.select_latest_business(schema, self.tenant_id)).mappings().first()
            if row is None:
                return None
            row = dict(row)
            business_id = row[BUSINESS_ID]
            address = self._read_address(conn, schema, row, business_id)
            type_ids = self._read_type_ids(conn, schema, business_id)

        data = {param: row.get(column) for column, param in COLUMN_PARAMS.items()}
        if data["is_gst_registered"] is not None:
            data["is_gst_registered"] = bool(data["is_gst_registered"])
        data.update(address)
        return BusinessProfile(
            id=business_id,
            business_type_ids=type_ids,
            has_logo=bool(row.get("HasLogo")),
            has_signature=bool(row.get("HasSignature")),
            **data,
        )

    def save(
        self,
        form: BusinessProfileForm,
        actor_id: int,
        logo: Optional[FilePayload] = None,
        signature: Optional[FilePayload] = None,
    ) -> int:
        """
        Insert (no id) or update (id given) the profile, upsert its address and
        replace its business-type links, all in one transaction.

        Raises LookupError when updating an id that does not exist. Concurrent
        saves of the same id are not coordinated: the last commit wins.
        """
        values = self._form_values(form)
        type_ids = distinct_positive_ids(form.business_type_ids)

        try:
            with self.storage.transaction() as conn:
                schema = probe_business_schema(self.storage, conn)

                if form.id is None:
                    clear = sql_builder.clear_current_flag(schema, self.tenant_id)
                    if clear is not None:
                        _execute(conn, clear)
                    statement = sql_builder.insert_business(
                        schema, values, actor_id, self.tenant_id, logo=logo, signature=signature
                    )
                    business_id = _execute(conn, statement).scalar_one()
                else:
                    business_id = form.id
                    statement = sql_builder.update_business(
                        schema,
                        business_id,
                        values,
                        actor_id,
                        logo=logo,
                        signature=signature,
                        tenant_id=self.tenant_id,
                    )
                    # Address and type links are only touched once the row is known to be ours
                    if _execute(conn, statement).rowcount == 0:
                        raise LookupError(f"Business profile {business_id} not found")

                self._upsert_address(conn, schema, business_id, values, actor_id)
                self._replace_type_links(conn, schema, business_id, type_ids)
        except SQLAlchemyError as e:
            logger.error(f"Error saving business profile: {str(e)}", exc_info=True)
            raise

        action = "created" if form.id is None else "updated"
        logger.info(f"Business profile {business_id} {action} by user {actor_id}")
        return business_id

    def _upsert_address(
        self,
        conn: Connection,
        schema: BusinessSchema,
        business_id: int,
        values: Dict[str, Any],
        actor_id: int,
    ) -> None:
        # Inline address columns were written with the profile row
        count = sql_builder.count_address(schema, business_id)
        if count is None:
            return
        exists = _execute(conn, count).scalar_one() > 0
        if exists:
            _execute(conn, sql_builder.update_address(schema, business_id, values, actor_id))
        elif any(values.get(field) is not None for field in ADDRESS_FIELDS):
            _execute(conn, sql_builder.insert_address(schema, business_id, values, actor_id))

    def _replace_type_links(self, conn: Connection, schema: BusinessSchema, business_id: int, type_ids: List[int]) -> None:
        delete = sql_builder.delete_type_links(schema, business_id)
        if delete is None:
            if type_ids:
                logger.warning("Business type links table is missing; selected business types were not saved")
            return
        _execute(conn, delete)
        for business_type_id in type_ids:
            _execute(conn, sql_builder.insert_type_link(schema, business_id, business_type_id))

    def _get_binary(self, kind: str, business_id: int) -> Optional[BinaryPayload]:
        with self.storage.connect() as conn:
            schema = probe_business_schema(self.storage, conn)
            statement = sql_builder.select_binary(schema, kind, business_id, self.tenant_id)
            if statement is None:
                return None
            row = _execute(conn, statement).mappings().first()

        if row is None or not row["Data"]:
            return None
        data = bytes(row["Data"])
        return BinaryPayload(
            content_type=resolve_content_type(row["ContentType"], data),
            data=data,
            file_name=row["FileName"],
        )

    def get_logo(self, business_id: int) -> Optional[BinaryPayload]:
        return self._get_binary(LOGO, business_id)

    def get_signature(self, business_id: int) -> Optional[BinaryPayload]:
        return self._get_binary(SIGNATURE, business_id)
