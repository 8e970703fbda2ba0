"""Pydantic schemas for user administration."""
from datetime import datetime

from pydantic import BaseModel, field_validator

from app.models.user import ROLES


class UserOutSchema(BaseModel):
    id: int
    email: str
    full_name: str = ""
    department: str | None = None
    role: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class RoleUpdateSchema(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def known_role(cls, value: str) -> str:
        if value not in ROLES:
            raise ValueError(f"role must be one of {', '.join(ROLES)}")
        return value
