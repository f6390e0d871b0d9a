"""User Schemas — registration input and the password-free public view."""

from dataclasses import asdict
from datetime import datetime

from pydantic import Field, field_validator

from fintrack.core.domain_types import User
from fintrack.schemas.transaction import CamelModel


class UserCreate(CamelModel):
    """Registration — all four fields required, trimmed, non-empty."""
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=255)
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")

    @field_validator("username", "name", "email")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty or whitespace")
        return v


class UserResponse(CamelModel):
    id: int
    username: str
    name: str
    email: str
    created_at: datetime

    @classmethod
    def from_record(cls, user: User) -> "UserResponse":
        data = asdict(user)
        data.pop("password", None)
        return cls(**data)
