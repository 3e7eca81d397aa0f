"""
User Domain Models
"""
from pydantic import BaseModel, Field, ConfigDict, EmailStr, field_validator
from typing import Optional
from datetime import datetime

from invenhub.domain.catalog import UserRole


class User(BaseModel):
    """Store user. The password hash never leaves the repository layer."""
    id: int
    name: str
    email: str
    role: UserRole = UserRole.STAFF
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, value):
        return value.lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, value):
        return value.lower()


class RoleUpdate(BaseModel):
    role: UserRole


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
