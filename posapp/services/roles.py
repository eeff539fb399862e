import logging
from enum import Enum
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from posapp.exceptions import DuplicateValueError
from posapp.schemas.roles import RoleForm, RoleResponse
from posapp.services.lookups import LookupService, LookupTable
from posapp.storage.base import StorageAdapter

logger = logging.getLogger(__name__)

ROLES = LookupTable("Roles", "RoleId", "RoleName", "Role")


class RoleDeleteResult(str, Enum):
    SUCCESS = "success"
    IN_USE = "in_use"
    NOT_FOUND = "not_found"


class RoleService(LookupService):
    """Roles behave like a lookup with permissions, and may be hard-deleted while unassigned."""

    def __init__(self, storage: StorageAdapter):
        super().__init__(storage, ROLES)

    def list(self) -> List[RoleResponse]:
        query = text("""
            SELECT r.[RoleId] AS id,
                   r.[RoleName] AS name,
                   COALESCE(r.[Permissions], '') AS permissions,
                   r.[IsActive] AS is_active,
                   r.[CreatedOn] AS created_on,
                   (SELECT COUNT(*) FROM [UserRoles] ur WHERE ur.[RoleId] = r.[RoleId]) AS assigned_users
            FROM [Roles] r
            ORDER BY r.[RoleName]
        """)
        with self.storage.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [RoleResponse(**row) for row in rows]

    def get_by_id(self, role_id: int) -> Optional[RoleResponse]:
        query = text("""
            SELECT r.[RoleId] AS id,
                   r.[RoleName] AS name,
                   COALESCE(r.[Permissions], '') AS permissions,
                   r.[IsActive] AS is_active,
                   r.[CreatedOn] AS created_on,
                   (SELECT COUNT(*) FROM [UserRoles] ur WHERE ur.[RoleId] = r.[RoleId]) AS assigned_users
            FROM [Roles] r
            WHERE r.[RoleId] = :id
        """)
        with self.storage.connect() as conn:
            row = conn.execute(query, {"id": role_id}).mappings().first()
        return RoleResponse(**row) if row else None

    def create(self, form: RoleForm, actor_id: int) -> int:
        statement = text(self.storage.sql.insert_returning(
            "[Roles]",
            ["[RoleName]", "[Permissions]", "[IsActive]", "[CreatedBy]", "[CreatedOn]"],
            [":name", ":permissions", "1", ":actor_id", self.storage.sql.now_sql],
            "[RoleId]",
        ))
        params = {"name": form.name.strip(), "permissions": (form.permissions or "").strip(), "actor_id": actor_id}
        try:
            with self.storage.transaction() as conn:
                role_id = conn.execute(statement, params).scalar_one()
        except SQLAlchemyError as e:
            if self.storage.is_unique_violation(e):
                logger.warning(f"Role '{params['name']}' already exists")
                raise DuplicateValueError("name", "Role already exists.") from e
            logger.error(f"Error creating role: {str(e)}", exc_info=True)
            raise
        logger.info(f"Role {role_id} created by user {actor_id}")
        return role_id

    def update(self, role_id: int, form: RoleForm, actor_id: int) -> bool:
        statement = text(f"""
            UPDATE [Roles]
            SET [RoleName] = :name,
                [Permissions] = :permissions,
                [UpdatedBy] = :actor_id,
                [UpdatedOn] = {self.storage.sql.now_sql}
            WHERE [RoleId] = :id
        """)
        params = {
            "id": role_id,
            "name": form.name.strip(),
            "permissions": (form.permissions or "").strip(),
            "actor_id": actor_id,
        }
        try:
            with self.storage.transaction() as conn:
                affected = conn.execute(statement, params).rowcount
        except SQLAlchemyError as e:
            if self.storage.is_unique_violation(e):
                logger.warning(f"Role '{params['name']}' already exists")
                raise DuplicateValueError("name", "Role already exists.") from e
            logger.error(f"Error updating role {role_id}: {str(e)}", exc_info=True)
            raise
        if affected:
            logger.info(f"Role {role_id} updated by user {actor_id}")
        return affected > 0

    def delete(self, role_id: int) -> RoleDeleteResult:
        """Hard delete, refused while any user still holds the role."""
        with self.storage.transaction() as conn:
            exists = conn.execute(
                text("SELECT COUNT(*) FROM [Roles] WHERE [RoleId] = :id"), {"id": role_id}
            ).scalar_one()
            if not exists:
                return RoleDeleteResult.NOT_FOUND

            assigned = conn.execute(
                text("SELECT COUNT(*) FROM [UserRoles] WHERE [RoleId] = :id"), {"id": role_id}
            ).scalar_one()
            if assigned:
                logger.info(f"Role {role_id} not deleted: assigned to {assigned} user(s)")
                return RoleDeleteResult.IN_USE

            conn.execute(text("DELETE FROM [Roles] WHERE [RoleId] = :id"), {"id": role_id})

        logger.info(f"Role {role_id} deleted")
        return RoleDeleteResult.SUCCESS
