import logging
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from posapp.core.security import create_password_hash
from posapp.exceptions import DuplicateValueError
from posapp.schemas.common import OptionItem
from posapp.schemas.users import UserCreateForm, UserForm, UserResponse
from posapp.storage.base import StorageAdapter

logger = logging.getLogger(__name__)

USER_SELECT = """
    SELECT u.[UserId] AS id,
           u.[FullName] AS full_name,
           u.[Email] AS email,
           u.[MobileNumber] AS mobile_number,
           ur.[RoleId] AS role_id,
           r.[RoleName] AS role_name,
           u.[IsActive] AS is_active,
           u.[CreatedOn] AS created_on
    FROM [Users] u
    LEFT JOIN [UserRoles] ur ON ur.[UserId] = u.[UserId]
    LEFT JOIN [Roles] r ON r.[RoleId] = ur.[RoleId]
"""


class UserService:
    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    def list(self) -> List[UserResponse]:
        query = text(USER_SELECT + " ORDER BY u.[CreatedOn] DESC, u.[UserId] DESC")
        with self.storage.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [UserResponse(**row) for row in rows]

    def role_options(self) -> List[OptionItem]:
        query = text("SELECT [RoleId] AS id, [RoleName] AS name FROM [Roles] WHERE [IsActive] = 1 ORDER BY [RoleName]")
        with self.storage.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [OptionItem(**row) for row in rows]

    def get_by_id(self, user_id: int) -> Optional[UserResponse]:
        query = text(USER_SELECT + " WHERE u.[UserId] = :id")
        with self.storage.connect() as conn:
            row = conn.execute(query, {"id": user_id}).mappings().first()
        return UserResponse(**row) if row else None

    def _duplicate_email(self, e: SQLAlchemyError, email: str) -> None:
        if self.storage.is_unique_violation(e):
            logger.warning(f"User e-mail '{email}' already exists")
            raise DuplicateValueError("email", "A user with this e-mail already exists.") from e

    def _replace_role(self, conn: Connection, user_id: int, role_id: int) -> None:
        conn.execute(text("DELETE FROM [UserRoles] WHERE [UserId] = :user_id"), {"user_id": user_id})
        conn.execute(
            text("INSERT INTO [UserRoles] ([UserId], [RoleId]) VALUES (:user_id, :role_id)"),
            {"user_id": user_id, "role_id": role_id},
        )

    def create(self, form: UserCreateForm, actor_id: int) -> int:
        """Insert the user, its credentials and its role link in one transaction."""
        if not form.password or not form.password.strip():
            raise ValueError("Password is required when creating a user.")
        password = create_password_hash(form.password.strip())
        sql = self.storage.sql
        insert_user = text(sql.insert_returning(
            "[Users]",
            ["[FullName]", "[Email]", "[MobileNumber]", "[IsActive]", "[CreatedBy]", "[CreatedOn]", "[UpdatedOn]"],
            [":full_name", ":email", ":mobile_number", "1", ":actor_id", sql.now_sql, sql.now_sql],
            "[UserId]",
        ))
        insert_auth = text("""
            INSERT INTO [UserAuth] ([UserId], [PasswordHash], [PasswordSalt], [EmailVerified], [MobileVerified])
            VALUES (:user_id, :password_hash, :password_salt, 0, 0)
        """)
        email = str(form.email).strip()
        try:
            with self.storage.transaction() as conn:
                user_id = conn.execute(insert_user, {
                    "full_name": form.full_name.strip(),
                    "email": email,
                    "mobile_number": form.mobile_number,
                    "actor_id": actor_id,
                }).scalar_one()
                conn.execute(insert_auth, {
                    "user_id": user_id,
                    "password_hash": password.hash,
                    "password_salt": password.salt,
                })
                self._replace_role(conn, user_id, form.role_id)
        except SQLAlchemyError as e:
            self._duplicate_email(e, email)
            logger.error(f"Error creating user: {str(e)}", exc_info=True)
            raise

        logger.info(f"User {user_id} created by user {actor_id}")
        return user_id

    def update(self, user_id: int, form: UserForm, actor_id: int) -> bool:
        """Update profile and role; the password only changes when a new one is given."""
        sql = self.storage.sql
        update_user = text(f"""
            UPDATE [Users]
            SET [FullName] = :full_name,
                [Email] = :email,
                [MobileNumber] = :mobile_number,
                [UpdatedBy] = :actor_id,
                [UpdatedOn] = {sql.now_sql}
            WHERE [UserId] = :user_id
        """)
        email = str(form.email).strip()
        try:
            with self.storage.transaction() as conn:
                affected = conn.execute(update_user, {
                    "user_id": user_id,
                    "full_name": form.full_name.strip(),
                    "email": email,
                    "mobile_number": form.mobile_number,
                    "actor_id": actor_id,
                }).rowcount
                if not affected:
                    return False

                if form.password:
                    password = create_password_hash(form.password.strip())
                    params = {"user_id": user_id, "password_hash": password.hash, "password_salt": password.salt}
                    updated = conn.execute(text("""
                        UPDATE [UserAuth]
                        SET [PasswordHash] = :password_hash, [PasswordSalt] = :password_salt
                        WHERE [UserId] = :user_id
                    """), params).rowcount
                    if not updated:
                        conn.execute(text("""
                            INSERT INTO [UserAuth] ([UserId], [PasswordHash], [PasswordSalt], [EmailVerified], [MobileVerified])
                            VALUES (:user_id, :password_hash, :password_salt, 0, 0)
                        """), params)
                    logger.info(f"Password changed for user {user_id} by user {actor_id}")

                self._replace_role(conn, user_id, form.role_id)
        except SQLAlchemyError as e:
            self._duplicate_email(e, email)
            logger.error(f"Error updating user {user_id}: {str(e)}", exc_info=True)
            raise

        logger.info(f"User {user_id} updated by user {actor_id}")
        return True

    def set_active(self, user_id: int, active: bool, actor_id: int) -> bool:
        statement = text(f"""
            UPDATE [Users]
            SET [IsActive] = :active, [UpdatedBy] = :actor_id, [UpdatedOn] = {self.storage.sql.now_sql}
            WHERE [UserId] = :user_id
        """)
        with self.storage.transaction() as conn:
            affected = conn.execute(
                statement, {"user_id": user_id, "active": 1 if active else 0, "actor_id": actor_id}
            ).rowcount
        if affected:
            logger.info(f"User {user_id} {'activated' if active else 'deactivated'} by user {actor_id}")
        return affected > 0
