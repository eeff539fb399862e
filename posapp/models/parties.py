from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String, Text

from posapp.database import Base
from posapp.models.audit import AuditColumns


class PartyType(Base):
    __tablename__ = "PartyTypes"

    id = Column("PartyTypeId", Integer, primary_key=True, autoincrement=True)
    name = Column("PartyTypeName", String(50), unique=True, nullable=False)  # Customer / Vendor / Both


class PartyCategory(Base):
    __tablename__ = "PartyCategories"

    id = Column("PartyCategoryId", Integer, primary_key=True, autoincrement=True)
    name = Column("PartyCategoryName", String(50), unique=True, nullable=False)


class Party(AuditColumns, Base):
    __tablename__ = "Parties"

    id = Column("PartyId", Integer, primary_key=True, autoincrement=True)
    party_name = Column("PartyName", String(200), nullable=False)
    mobile_number = Column("MobileNumber", String(20), nullable=True)
    email = Column("Email", String(200), nullable=True)
    opening_balance = Column("OpeningBalance", Numeric(14, 2), nullable=True)
    gstin = Column("GSTIN", String(15), nullable=True)
    pan_number = Column("PANNumber", String(20), nullable=True)
    party_type_id = Column("PartyTypeId", Integer, ForeignKey("PartyTypes.PartyTypeId"), nullable=False)
    party_category_id = Column("PartyCategoryId", Integer, ForeignKey("PartyCategories.PartyCategoryId"), nullable=False)


class PartyAddress(Base):
    __tablename__ = "PartyAddresses"

    id = Column("PartyAddressId", Integer, primary_key=True, autoincrement=True)
    party_id = Column("PartyId", Integer, ForeignKey("Parties.PartyId"), nullable=False)
    address_type = Column("AddressType", String(20), nullable=False)  # Billing / Shipping
    address = Column("Address", Text, nullable=True)
    credit_period = Column("CreditPeriod", Integer, nullable=True)  # days
    credit_limit = Column("CreditLimit", Numeric(14, 2), nullable=True)


class PartyContact(Base):
    __tablename__ = "PartyContacts"

    id = Column("PartyContactId", Integer, primary_key=True, autoincrement=True)
    party_id = Column("PartyId", Integer, ForeignKey("Parties.PartyId"), nullable=False)
    contact_person_name = Column("ContactPersonName", String(150), nullable=True)
    date_of_birth = Column("DateOfBirth", Date, nullable=True)


class PartyBankDetail(Base):
    __tablename__ = "PartyBankDetails"

    id = Column("PartyBankDetailId", Integer, primary_key=True, autoincrement=True)
    party_id = Column("PartyId", Integer, ForeignKey("Parties.PartyId"), nullable=False)
    account_number = Column("AccountNumber", String(50), nullable=True)
    ifsc = Column("IFSC", String(20), nullable=True)
    branch_name = Column("BranchName", String(150), nullable=True)
    account_holder_name = Column("AccountHolderName", String(150), nullable=True)
    upi = Column("UPI", String(100), nullable=True)
