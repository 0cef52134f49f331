"""Request/response schemas for tasks, subtasks and Kanban moves."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from taskboard.models.enums import TaskPriority, TaskStatus
from taskboard.schemas.common import UserSummary

TITLE_MAX_LENGTH = 500
DESCRIPTION_MAX_LENGTH = 100_000
MAX_TAGS = 50
TAG_MAX_LENGTH = 64
MAX_SUBTASKS = 200


def _clean_title(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Title is required.")
    return v


def _clean_tags(v: list[str] | None) -> list[str] | None:
    """Trim tags, drop empty ones and de-duplicate keeping the first occurrence."""
    if v is None:
        return None
    seen: list[str] = []
    for raw in v:
        tag = raw.strip()
        if not tag:
            continue
        if len(tag) > TAG_MAX_LENGTH:
            raise ValueError(f"Tags must be at most {TAG_MAX_LENGTH} characters.")
        if tag not in seen:
            seen.append(tag)
    return seen


class SubtaskIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    completed: bool = False

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)


class SubtaskResponse(BaseModel):
    id: int
    title: str
    completed: bool

    class Config:
        from_attributes = True


class SubtaskCompletion(BaseModel):
    completed: bool


class TaskCreate(BaseModel):
    """New task. Only title is required; the rest fall back to the documented defaults."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: int | None = None
    due_date: datetime | None = None
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    subtasks: list[SubtaskIn] = Field(default_factory=list, max_length=MAX_SUBTASKS)
    project_id: int | None = Field(
        default=None, description="Optional; the project is normally taken from the path."
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)


class TaskUpdate(BaseModel):
    """Partial update. Only fields present in the request body are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assigned_to: int | None = None
    due_date: datetime | None = None
    tags: list[str] | None = Field(default=None, max_length=MAX_TAGS)
    subtasks: list[SubtaskIn] | None = Field(default=None, max_length=MAX_SUBTASKS)
    order: int | None = Field(default=None, ge=0)
    project_id: int | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        return None if v is None else _clean_title(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)


class TaskMove(BaseModel):
    """Kanban drag: destination column and, optionally, the slot to insert at."""

    status: TaskStatus
    order: int | None = Field(default=None, ge=0)
    project_id: int | None = None


class TaskResponse(BaseModel):
    id: int
    project_id: int
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    assigned_to: UserSummary | None = None
    created_by: UserSummary | None = None
    due_date: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    subtasks: list[SubtaskResponse] = Field(default_factory=list)
    order: int
    created_at: datetime
    updated_at: datetime


class TasksListResponse(BaseModel):
    count: int
    data: list[TaskResponse]
