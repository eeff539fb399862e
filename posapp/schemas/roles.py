from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from posapp.schemas.lookups import LookupForm


class RoleForm(LookupForm):
    name: str = Field(..., min_length=1, max_length=100, description="Role name (required, unique)")
    permissions: Optional[str] = Field(None, max_length=1000, description="Comma separated permission keys")


class RoleResponse(BaseModel):
    id: int
    name: str
    permissions: str = ""
    is_active: bool = True
    assigned_users: int = 0
    created_on: Optional[datetime] = None

    class Config:
        from_attributes = True
