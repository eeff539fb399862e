from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class FormModel(BaseModel):
    """Base for posted forms: blank optional inputs arrive as empty strings."""

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class OptionItem(BaseModel):
    id: int
    name: str


class ListResponse(BaseModel):
    """List payload plus the flash message left by the previous redirect."""

    items: List[Any]
    flash: Optional[str] = None


class ToggleForm(FormModel):
    activate: bool = Field(..., description="true to activate, false to deactivate")


class Envelope(BaseModel):
    ok: bool
    message: str
    errors: Optional[Dict[str, List[str]]] = None
