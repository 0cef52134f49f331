"""Shared response fragments: display-friendly user and role summaries."""

from pydantic import BaseModel, Field

from taskboard.models.enums import GlobalRoleName


class UserSummary(BaseModel):
    """Display-friendly user reference (never includes credential fields)."""

    id: int
    name: str
    email: str
    profile_picture: str | None = None

    class Config:
        from_attributes = True


class RoleSummary(BaseModel):
    """Global role name and permission set as shown on a user."""

    name: GlobalRoleName
    permissions: list[str] = Field(default_factory=list)

    class Config:
        from_attributes = True
