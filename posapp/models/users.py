from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint, text

from posapp.database import Base
from posapp.models.audit import AuditColumns


class Role(AuditColumns, Base):
    __tablename__ = "Roles"

    id = Column("RoleId", Integer, primary_key=True, autoincrement=True)
    name = Column("RoleName", String(100), unique=True, nullable=False)
    permissions = Column("Permissions", Text, nullable=True)  # comma separated, e.g. "sales:read,sales:create"
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))


class User(AuditColumns, Base):
    __tablename__ = "Users"

    id = Column("UserId", Integer, primary_key=True, autoincrement=True)
    full_name = Column("FullName", String(150), nullable=False)
    email = Column("Email", String(200), unique=True, nullable=False)
    mobile_number = Column("MobileNumber", String(20), nullable=True)
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))


class UserAuth(Base):
    """Password hash and salt kept apart from the profile row."""

    __tablename__ = "UserAuth"

    id = Column("AuthId", Integer, primary_key=True, autoincrement=True)
    user_id = Column("UserId", Integer, ForeignKey("Users.UserId"), unique=True, nullable=False)
    password_hash = Column("PasswordHash", String(128), nullable=False)  # PBKDF2-SHA256, hex
    password_salt = Column("PasswordSalt", String(64), nullable=False)  # 16 random bytes, hex
    email_verified = Column("EmailVerified", Boolean, nullable=False, server_default=text("0"))
    mobile_verified = Column("MobileVerified", Boolean, nullable=False, server_default=text("0"))


class UserRole(Base):
    __tablename__ = "UserRoles"

    id = Column("UserRoleId", Integer, primary_key=True, autoincrement=True)
    user_id = Column("UserId", Integer, ForeignKey("Users.UserId"), nullable=False)
    role_id = Column("RoleId", Integer, ForeignKey("Roles.RoleId"), nullable=False)

    __table_args__ = (
        UniqueConstraint("UserId", "RoleId", name="uq_user_role"),
    )
