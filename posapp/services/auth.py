import logging
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from posapp.core.security import verify_password
from posapp.schemas.account import SessionUser
from posapp.storage.base import StorageAdapter

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username/email or password."

# Integer ids; users sign in with e-mail or mobile number.
PRIMARY_LOGIN_SELECT = """
    u.[UserId] AS user_id,
    u.[FullName] AS full_name,
    u.[Email] AS email,
    u.[IsActive] AS is_active,
    COALESCE(r.[RoleName], '') AS role_name,
    a.[PasswordHash] AS password_hash,
    a.[PasswordSalt] AS password_salt
"""
PRIMARY_LOGIN_FROM = """
    FROM [Users] u
    INNER JOIN [UserAuth] a ON a.[UserId] = u.[UserId]
    LEFT JOIN [UserRoles] ur ON ur.[UserId] = u.[UserId]
    LEFT JOIN [Roles] r ON r.[RoleId] = ur.[RoleId]
    WHERE (u.[Email] = :identifier OR u.[MobileNumber] = :identifier)
    ORDER BY u.[UserId]
"""

# Older installs: text ids, username login, DisplayName.
LEGACY_LOGIN_SELECT = """
    u.[Id] AS user_id,
    u.[DisplayName] AS full_name,
    u.[Email] AS email,
    u.[IsActive] AS is_active,
    COALESCE(r.[Name], '') AS role_name,
    a.[PasswordHash] AS password_hash,
    a.[PasswordSalt] AS password_salt
"""
LEGACY_LOGIN_FROM = """
    FROM [Users] u
    INNER JOIN [UserAuth] a ON a.[UserId] = u.[Id]
    LEFT JOIN [UserRoles] ur ON ur.[UserId] = u.[Id]
    LEFT JOIN [Roles] r ON r.[Id] = ur.[RoleId]
    WHERE (u.[Username] = :identifier OR u.[Email] = :identifier)
    ORDER BY u.[Id]
"""


class AuthService:
    def __init__(self, storage: StorageAdapter):
        self.storage = storage

    def _find(self, select_list: str, rest: str, identifier: str) -> Optional[Dict[str, Any]]:
        """Run one login lookup; any database error counts as 'not found'."""
        query = text(self.storage.sql.select_first(select_list, rest))
        try:
            with self.storage.connect() as conn:
                row = conn.execute(query, {"identifier": identifier}).mappings().first()
        except SQLAlchemyError as e:
            logger.debug(f"Login lookup failed, treating as not found: {str(e)}")
            return None
        return dict(row) if row else None

    def find_login_row(self, identifier: str) -> Optional[Dict[str, Any]]:
        row = self._find(PRIMARY_LOGIN_SELECT, PRIMARY_LOGIN_FROM, identifier)
        if row is None:
            row = self._find(LEGACY_LOGIN_SELECT, LEGACY_LOGIN_FROM, identifier)
        return row

    def authenticate(self, identifier: str, password: str) -> Optional[SessionUser]:
        """
        Return the session user for a valid identifier/password pair.
        Unknown, inactive and wrong-password attempts all return None.
        """
        identifier = (identifier or "").strip()
        if not identifier or not password:
            return None

        row = self.find_login_row(identifier)
        if row is None:
            logger.info("Login failed: unknown identifier")
            return None
        if not row["is_active"]:
            logger.info(f"Login failed: user {row['user_id']} is inactive")
            return None
        if not verify_password(password, row["password_hash"], row["password_salt"]):
            logger.info(f"Login failed: wrong password for user {row['user_id']}")
            return None

        logger.info(f"User {row['user_id']} signed in")
        return SessionUser(
            id=str(row["user_id"]),
            name=row["full_name"] or "",
            email=row["email"],
            role=row["role_name"] or None,
        )
