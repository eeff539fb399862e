from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from posapp.schemas.common import FormModel


class LookupForm(FormModel):
    name: str = Field(..., min_length=1, max_length=150, description="Display name (required, unique)")

    @field_validator("name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace only")
        return v.strip()


class CategoryForm(LookupForm):
    color: Optional[str] = Field(None, max_length=20, description="CSS colour (optional), e.g. #f06292")

    @field_validator("color")
    @classmethod
    def strip_color(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else None


class LookupResponse(BaseModel):
    id: int
    name: str
    color: Optional[str] = None
    is_active: bool
    created_by: Optional[int] = None
    created_on: Optional[datetime] = None
    updated_by: Optional[int] = None
    updated_on: Optional[datetime] = None

    class Config:
        from_attributes = True
