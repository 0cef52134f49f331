"""Request/response schemas for auth, profile and user endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from taskboard.core.security import (
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)
from taskboard.schemas.common import RoleSummary


def _clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name must not be blank.")
    return v


class RegisterRequest(BaseModel):
    """Self-service registration; the account gets the default 'user' role."""

    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class CurrentUser(BaseModel):
    """Authenticated caller resolved by the auth adapter (opaque id plus display fields)."""

    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """User as returned by auth, profile and user management endpoints."""

    id: int
    name: str
    email: str
    profile_picture: str | None = None
    role: RoleSummary | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """JWT access token returned after successful login or registration."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserResponse


class UserCreate(BaseModel):
    """Admin-side account creation (requires the 'write' permission)."""

    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role_id: int | None = Field(default=None, description="Global role; defaults to 'user'.")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class UserUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: EmailStr | None = None
    profile_picture: str | None = Field(default=None, max_length=2048)


class ProfileUpdate(BaseModel):
    """Caller's own profile edit: name and/or picture URL."""

    name: str | None = Field(default=None, min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    profile_picture: str | None = Field(default=None, max_length=2048)


class UsersListResponse(BaseModel):
    count: int
    data: list[UserResponse]
