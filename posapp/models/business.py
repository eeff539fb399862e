from sqlalchemy import Boolean, Column, ForeignKey, Integer, LargeBinary, String, text

from posapp.database import Base
from posapp.models.audit import AuditColumns


class Business(AuditColumns, Base):
    """
    Business profile. Only the row flagged IsCurrent is in use; older rows are
    kept for history. The SQL Server deployment may lack any of the optional
    columns, so the profile service never queries this model directly.
    """
    __tablename__ = "Businesses"

    id = Column("BusinessId", Integer, primary_key=True, autoincrement=True)
    business_name = Column("BusinessName", String(200), nullable=False)
    company_phone_number = Column("CompanyPhoneNumber", String(30), nullable=True)
    company_email = Column("CompanyEmail", String(200), nullable=True)
    is_gst_registered = Column("IsGstRegistered", Boolean, nullable=True)
    gst_number = Column("GstNumber", String(30), nullable=True)
    pan_number = Column("PanNumber", String(20), nullable=True)
    industry_type_id = Column("IndustryTypeId", Integer, ForeignKey("IndustryTypes.IndustryTypeId"), nullable=True)
    registration_type_id = Column("RegistrationTypeId", Integer, ForeignKey("RegistrationTypes.RegistrationTypeId"), nullable=True)
    msme_number = Column("MsmeNumber", String(50), nullable=True)
    website = Column("Website", String(200), nullable=True)
    additional_info = Column("AdditionalInfo", String(800), nullable=True)
    tenant_id = Column("TenantId", Integer, nullable=True)
    is_current = Column("IsCurrent", Boolean, nullable=False, server_default=text("0"))

    # Uploaded images, stored in the database
    logo_file_name = Column("LogoFileName", String(255), nullable=True)
    logo_content_type = Column("LogoContentType", String(100), nullable=True)
    logo_data = Column("LogoData", LargeBinary, nullable=True)
    signature_file_name = Column("SignatureFileName", String(255), nullable=True)
    signature_content_type = Column("SignatureContentType", String(100), nullable=True)
    signature_data = Column("SignatureData", LargeBinary, nullable=True)


class BusinessAddress(AuditColumns, Base):
    __tablename__ = "BusinessAddresses"

    id = Column("BusinessAddressId", Integer, primary_key=True, autoincrement=True)
    business_id = Column("BusinessId", Integer, ForeignKey("Businesses.BusinessId"), unique=True, nullable=False)
    billing_address = Column("BillingAddress", String(500), nullable=True)
    city = Column("City", String(120), nullable=True)
    pincode = Column("Pincode", String(12), nullable=True)
    state_id = Column("StateId", Integer, ForeignKey("States.StateId"), nullable=True)


class BusinessBusinessType(Base):
    """Many-to-many link; replaced wholesale on every profile save."""

    __tablename__ = "BusinessBusinessTypes"

    business_id = Column("BusinessId", Integer, ForeignKey("Businesses.BusinessId"), primary_key=True)
    business_type_id = Column("BusinessTypeId", Integer, ForeignKey("BusinessTypes.BusinessTypeId"), primary_key=True)
