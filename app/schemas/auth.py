"""Pydantic schemas for registration, login and the per-request session context."""
from pydantic import BaseModel, Field


class RegisterSchema(BaseModel):
    email: str
    password: str
    full_name: str = ""
    department: str | None = None


class LoginSchema(BaseModel):
    email: str
    password: str


class NavItemSchema(BaseModel):
    path: str
    label: str


class SessionContextSchema(BaseModel):
    """Who is calling and what they may see; passed explicitly to handlers."""

    user_id: int
    email: str
    full_name: str = ""
    role: str
    nav: list[NavItemSchema] = Field(default_factory=list)

    def has_role(self, *roles: str) -> bool:
        return self.role in roles
