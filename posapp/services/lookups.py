"""
Generic CRUD for the name + active-flag master tables.

Business types, industry types, registration types, states and categories
share the same shape and differ only in table and column names, so one
service parameterized by a LookupTable serves all five.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from posapp.exceptions import DuplicateValueError
from posapp.schemas.lookups import LookupForm, LookupResponse
from posapp.storage.base import StorageAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupTable:
    table: str
    id_column: str
    name_column: str
    label: str  # e.g. "Industry type", used in messages
    has_color: bool = False


BUSINESS_TYPES = LookupTable("BusinessTypes", "BusinessTypeId", "BusinessTypeName", "Business type")
INDUSTRY_TYPES = LookupTable("IndustryTypes", "IndustryTypeId", "IndustryTypeName", "Industry type")
REGISTRATION_TYPES = LookupTable("RegistrationTypes", "RegistrationTypeId", "RegistrationTypeName", "Registration type")
STATES = LookupTable("States", "StateId", "StateName", "State")
CATEGORIES = LookupTable("Categories", "CategoryId", "CategoryName", "Category", has_color=True)


class LookupService:
    def __init__(self, storage: StorageAdapter, lookup: LookupTable):
        self.storage = storage
        self.lookup = lookup

    def _select_list(self) -> str:
        t = self.lookup
        q = self.storage.quote_identifier
        columns = [
            f"{q(t.id_column)} AS id",
            f"{q(t.name_column)} AS name",
            f"{q('Color')} AS color" if t.has_color else "NULL AS color",
            f"{q('IsActive')} AS is_active",
            f"{q('CreatedBy')} AS created_by",
            f"{q('CreatedOn')} AS created_on",
            f"{q('UpdatedBy')} AS updated_by",
            f"{q('UpdatedOn')} AS updated_on",
        ]
        return ", ".join(columns)

    def _duplicate(self, name: str) -> DuplicateValueError:
        logger.warning(f"{self.lookup.label} '{name}' already exists")
        return DuplicateValueError("name", f"{self.lookup.label} already exists.")

    def list(self) -> List[LookupResponse]:
        t = self.lookup
        q = self.storage.quote_identifier
        query = text(f"SELECT {self._select_list()} FROM {q(t.table)} ORDER BY {q(t.name_column)}")
        with self.storage.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [LookupResponse(**row) for row in rows]

    def get_by_id(self, item_id: int) -> Optional[LookupResponse]:
        t = self.lookup
        q = self.storage.quote_identifier
        query = text(f"SELECT {self._select_list()} FROM {q(t.table)} WHERE {q(t.id_column)} = :id")
        with self.storage.connect() as conn:
            row = conn.execute(query, {"id": item_id}).mappings().first()
        return LookupResponse(**row) if row else None

    def create(self, form: LookupForm, actor_id: int) -> int:
        t = self.lookup
        q = self.storage.quote_identifier
        sql = self.storage.sql
        columns = [q(t.name_column), q("IsActive"), q("CreatedBy"), q("CreatedOn")]
        values = [":name", "1", ":actor_id", sql.now_sql]
        params = {"name": form.name.strip(), "actor_id": actor_id}
        if t.has_color:
            columns.append(q("Color"))
            values.append(":color")
            params["color"] = getattr(form, "color", None)

        statement = text(sql.insert_returning(q(t.table), columns, values, q(t.id_column)))
        try:
            with self.storage.transaction() as conn:
                new_id = conn.execute(statement, params).scalar_one()
        except SQLAlchemyError as e:
            if self.storage.is_unique_violation(e):
                raise self._duplicate(params["name"]) from e
            logger.error(f"Error creating {t.label.lower()}: {str(e)}", exc_info=True)
            raise

        logger.info(f"{t.label} {new_id} created by user {actor_id}")
        return new_id

    def update(self, item_id: int, form: LookupForm, actor_id: int) -> bool:
        t = self.lookup
        q = self.storage.quote_identifier
        assignments = [f"{q(t.name_column)} = :name"]
        params = {"id": item_id, "name": form.name.strip(), "actor_id": actor_id}
        if t.has_color:
            assignments.append(f"{q('Color')} = :color")
            params["color"] = getattr(form, "color", None)
        assignments.append(f"{q('UpdatedBy')} = :actor_id")
        assignments.append(f"{q('UpdatedOn')} = {self.storage.sql.now_sql}")

        statement = text(
            f"UPDATE {q(t.table)} SET {', '.join(assignments)} WHERE {q(t.id_column)} = :id"
        )
        try:
            with self.storage.transaction() as conn:
                affected = conn.execute(statement, params).rowcount
        except SQLAlchemyError as e:
            if self.storage.is_unique_violation(e):
                raise self._duplicate(params["name"]) from e
            logger.error(f"Error updating {t.label.lower()} {item_id}: {str(e)}", exc_info=True)
            raise

        if affected:
            logger.info(f"{t.label} {item_id} updated by user {actor_id}")
        return affected > 0

    def set_active(self, item_id: int, active: bool, actor_id: int) -> bool:
        t = self.lookup
        q = self.storage.quote_identifier
        statement = text(
            f"UPDATE {q(t.table)} SET {q('IsActive')} = :active, {q('UpdatedBy')} = :actor_id, "
            f"{q('UpdatedOn')} = {self.storage.sql.now_sql} WHERE {q(t.id_column)} = :id"
        )
        with self.storage.transaction() as conn:
            affected = conn.execute(
                statement, {"id": item_id, "active": 1 if active else 0, "actor_id": actor_id}
            ).rowcount
        if affected:
            state = "activated" if active else "deactivated"
            logger.info(f"{t.label} {item_id} {state} by user {actor_id}")
        return affected > 0

