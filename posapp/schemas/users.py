from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from posapp.schemas.common import FormModel

MIN_PASSWORD_LENGTH = 6


class UserForm(FormModel):
    full_name: str = Field(..., min_length=1, max_length=150, description="Full name (required)")
    email: EmailStr = Field(..., description="Login e-mail (required, unique)")
    mobile_number: Optional[str] = Field(None, max_length=20, description="Mobile number, digits only")
    role_id: int = Field(..., gt=0, description="Role assigned to the user")
    password: Optional[str] = Field(None, max_length=128, description="Leave blank to keep the current password")

    @field_validator("full_name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace only")
        return v.strip()

    @field_validator("mobile_number")
    @classmethod
    def validate_mobile(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v.isdigit():
            raise ValueError("Mobile number must contain digits only.")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        return v


class UserCreateForm(UserForm):
    password: str = Field(..., max_length=128, description="Initial password (required)")


class UserResponse(BaseModel):
    id: int
    full_name: str
    email: str
    mobile_number: Optional[str] = None
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    is_active: bool
    created_on: Optional[datetime] = None

    class Config:
        from_attributes = True
