"""Request/response schemas for global role management."""

from datetime import datetime

from pydantic import BaseModel, Field

from taskboard.models.enums import GlobalRoleName, Permission
from taskboard.schemas.auth import UserResponse


class RoleCreate(BaseModel):
    name: GlobalRoleName
    permissions: list[Permission] = Field(..., description="Subset of read, write, delete.")
    description: str | None = Field(default=None, max_length=1000)


class RoleUpdate(BaseModel):
    permissions: list[Permission] | None = None
    description: str | None = Field(default=None, max_length=1000)


class RoleResponse(BaseModel):
    id: int
    name: GlobalRoleName
    permissions: list[str]
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RolesListResponse(BaseModel):
    count: int
    data: list[RoleResponse]


class RoleAssignmentResponse(BaseModel):
    """Result of assigning a global role to a user."""

    message: str
    user: UserResponse
