"""Request/response schemas for projects and project membership."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from taskboard.models.enums import ProjectRoleName
from taskboard.models.project import PROJECT_KEY_MAX_LEN
from taskboard.schemas.common import UserSummary

PROJECT_KEY_PATTERN = re.compile(r"^[A-Z0-9]+$")


def normalize_project_key(key: str) -> str:
    """Uppercase and trim a project key; raise ValueError unless it is 1-10 alphanumerics."""
    normalized = (key or "").strip().upper()
    if not normalized:
        raise ValueError("Project key is required.")
    if len(normalized) > PROJECT_KEY_MAX_LEN:
        raise ValueError(f"Project key must be {PROJECT_KEY_MAX_LEN} characters or less.")
    if not PROJECT_KEY_PATTERN.match(normalized):
        raise ValueError("Project key must contain only letters and numbers.")
    return normalized


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    key: str = Field(..., min_length=1, max_length=PROJECT_KEY_MAX_LEN)
    description: str | None = Field(default=None, max_length=10_000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project name must not be blank.")
        return v

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        return normalize_project_key(v)


class ProjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10_000)
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Project name must not be blank.")
        return v


class ProjectResponse(BaseModel):
    id: int
    name: str
    key: str
    description: str | None = None
    is_active: bool
    created_by: UserSummary | None = None
    created_at: datetime
    updated_at: datetime
    user_role: ProjectRoleName | None = Field(
        default=None, description="The caller's role in this project."
    )


class ProjectsListResponse(BaseModel):
    count: int
    data: list[ProjectResponse]


class MemberAdd(BaseModel):
    user_id: int
    role: ProjectRoleName


class MemberRoleUpdate(BaseModel):
    role: ProjectRoleName


class MemberResponse(BaseModel):
    user: UserSummary
    role: ProjectRoleName
    joined_at: datetime


class MembersListResponse(BaseModel):
    count: int
    data: list[MemberResponse]
