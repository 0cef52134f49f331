"""Response schemas for dashboard summaries."""

from datetime import datetime

from pydantic import BaseModel, Field

from taskboard.models.enums import TaskPriority, TaskStatus


class ProjectBrief(BaseModel):
    id: int
    name: str
    key: str


class DeadlineTask(BaseModel):
    """Task reference shown in upcoming/overdue lists."""

    id: int
    title: str
    due_date: datetime
    priority: TaskPriority
    status: TaskStatus
    project: ProjectBrief | None = None
    days_overdue: int | None = None


class OverviewResponse(BaseModel):
    """Caller-centric summary of assigned tasks across all their projects."""

    total_assigned_tasks: int
    tasks_by_status: dict[str, int]
    upcoming_deadlines: list[DeadlineTask] = Field(default_factory=list)
    overdue_tasks: list[DeadlineTask] = Field(default_factory=list)
    total_projects: int


class SubtaskProgress(BaseModel):
    total: int
    completed: int
    completion_percentage: int


class ProjectProgressResponse(BaseModel):
    total_tasks: int
    completed_tasks: int
    completion_percentage: int
    status_breakdown: dict[str, int]
    priority_breakdown: dict[str, int]
    subtasks: SubtaskProgress
    upcoming_deadlines: list[DeadlineTask] = Field(default_factory=list)
    overdue_tasks: list[DeadlineTask] = Field(default_factory=list)
