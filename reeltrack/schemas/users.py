"""Request/response schemas for user resources."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from reeltrack.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from reeltrack.models import UserRole
from reeltrack.schemas.common import lower_email


class UserResponse(BaseModel):
    """Public view of a user (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime
    is_banned: bool


class CreateUserRequest(BaseModel):
    """Admin-side user creation."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: EmailStr = Field(..., description="Login email; unique")
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: UserRole = Field(default=UserRole.USER)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Username must not be blank.")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return lower_email(v)


class UpdateUserRequest(BaseModel):
    """
    Full replacement of a user's mutable fields. password is optional; omit it to
    keep the current one. role and is_banned are ignored for non-admin callers.
    """

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: EmailStr
    password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )
    role: UserRole = Field(..., description="Kept as stored for non-admin callers")
    is_banned: bool = False

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Username must not be blank.")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return lower_email(v)
