from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class BusinessProfileForm(BaseModel):
    id: Optional[int] = Field(None, description="Existing profile id; omitted on first save")
    business_name: str = Field(..., min_length=1, max_length=200, description="Business name (required)")
    company_phone_number: Optional[str] = Field(None, max_length=30)
    company_email: Optional[EmailStr] = Field(None, description="Company e-mail (optional)")
    billing_address: Optional[str] = Field(None, max_length=500)
    state_id: Optional[int] = None
    pincode: Optional[str] = Field(None, max_length=12)
    city: Optional[str] = Field(None, max_length=120)
    is_gst_registered: Optional[bool] = Field(None, description="Are you GST registered?")
    gst_number: Optional[str] = Field(None, max_length=30)
    pan_number: Optional[str] = Field(None, max_length=20)
    business_type_ids: List[int] = Field(default_factory=list, description="Selected business types")
    industry_type_id: Optional[int] = None
    registration_type_id: Optional[int] = None
    msme_number: Optional[str] = Field(None, max_length=50)
    website: Optional[str] = Field(None, max_length=200)
    additional_info: Optional[str] = Field(None, max_length=800)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("business_type_ids", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return [] if v is None else v

    @field_validator("business_name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace only")
        return v.strip()

    @field_validator("website")
    @classmethod
    def validate_website(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError("Website must start with http:// or https://")
        return v

    def cross_field_errors(self) -> Dict[str, List[str]]:
        errors: Dict[str, List[str]] = {}
        if self.is_gst_registered and not (self.gst_number and self.gst_number.strip()):
            errors["gst_number"] = ["GST number is required when GST registration is Yes."]
        return errors


class BusinessProfile(BaseModel):
    id: int
    business_name: str
    company_phone_number: Optional[str] = None
    company_email: Optional[str] = None
    billing_address: Optional[str] = None
    state_id: Optional[int] = None
    pincode: Optional[str] = None
    city: Optional[str] = None
    is_gst_registered: Optional[bool] = None
    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    business_type_ids: List[int] = Field(default_factory=list)
    industry_type_id: Optional[int] = None
    registration_type_id: Optional[int] = None
    msme_number: Optional[str] = None
    website: Optional[str] = None
    additional_info: Optional[str] = None
    has_logo: bool = False
    has_signature: bool = False


@dataclass(frozen=True)
class BinaryPayload:
    content_type: str
    data: bytes
    file_name: Optional[str] = None
