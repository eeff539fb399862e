from typing import Optional

from pydantic import BaseModel, Field

from posapp.schemas.common import FormModel


class LoginForm(FormModel):
    identifier: str = Field(..., min_length=1, max_length=200, description="E-mail, mobile number or username")
    password: str = Field(..., min_length=1, max_length=128)
    remember_me: bool = False
    return_url: Optional[str] = None


class SessionUser(BaseModel):
    """The authenticated user as carried in the session cookie."""

    id: str
    name: str
    email: Optional[str] = None
    role: Optional[str] = None

    def claims(self) -> dict:
        claims = {"sub": self.id, "name": self.name, "email": self.email or ""}
        if self.role:
            claims["role"] = self.role
        return claims
