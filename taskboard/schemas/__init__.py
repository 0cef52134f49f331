"""Pydantic request/response schemas."""

from taskboard.schemas.activity import ActivityListResponse, ActivityResponse
from taskboard.schemas.auth import (
    CurrentUser,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
    UsersListResponse,
    UserUpdate,
)
from taskboard.schemas.common import RoleSummary, UserSummary
from taskboard.schemas.health import HealthResponse
from taskboard.schemas.projects import (
    MemberAdd,
    MemberResponse,
    MemberRoleUpdate,
    MembersListResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectsListResponse,
    ProjectUpdate,
)
from taskboard.schemas.tasks import (
    SubtaskCompletion,
    SubtaskIn,
    TaskCreate,
    TaskMove,
    TaskResponse,
    TasksListResponse,
    TaskUpdate,
)

__all__ = [
    "ActivityListResponse",
    "ActivityResponse",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MemberAdd",
    "MemberResponse",
    "MemberRoleUpdate",
    "MembersListResponse",
    "ProfileUpdate",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectsListResponse",
    "ProjectUpdate",
    "RegisterRequest",
    "RoleSummary",
    "SubtaskCompletion",
    "SubtaskIn",
    "TaskCreate",
    "TaskMove",
    "TaskResponse",
    "TasksListResponse",
    "TaskUpdate",
    "TokenResponse",
    "UserCreate",
    "UserResponse",
    "UsersListResponse",
    "UserSummary",
    "UserUpdate",
]
