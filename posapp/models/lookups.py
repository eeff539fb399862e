from sqlalchemy import Boolean, Column, Integer, String, text

from posapp.database import Base
from posapp.models.audit import AuditColumns


class BusinessType(AuditColumns, Base):
    __tablename__ = "BusinessTypes"

    id = Column("BusinessTypeId", Integer, primary_key=True, autoincrement=True)
    name = Column("BusinessTypeName", String(150), unique=True, nullable=False)
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))


class IndustryType(AuditColumns, Base):
    __tablename__ = "IndustryTypes"

    id = Column("IndustryTypeId", Integer, primary_key=True, autoincrement=True)
    name = Column("IndustryTypeName", String(150), unique=True, nullable=False)
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))


class RegistrationType(AuditColumns, Base):
    __tablename__ = "RegistrationTypes"

    id = Column("RegistrationTypeId", Integer, primary_key=True, autoincrement=True)
    name = Column("RegistrationTypeName", String(150), unique=True, nullable=False)
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))


class State(AuditColumns, Base):
    __tablename__ = "States"

    id = Column("StateId", Integer, primary_key=True, autoincrement=True)
    name = Column("StateName", String(150), unique=True, nullable=False)
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))


class Category(AuditColumns, Base):
    """Product category; Color is a CSS colour used by the till buttons."""

    __tablename__ = "Categories"

    id = Column("CategoryId", Integer, primary_key=True, autoincrement=True)
    name = Column("CategoryName", String(150), unique=True, nullable=False)
    color = Column("Color", String(20), nullable=True)  # e.g. "#f06292"
    is_active = Column("IsActive", Boolean, nullable=False, server_default=text("1"))
