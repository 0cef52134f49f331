"""Dashboard summaries: caller overview, assigned tasks and per-project progress."""

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session, joinedload, selectinload

from taskboard.core.config import get_settings
from taskboard.models import ProjectRole, Task
from taskboard.models.enums import TaskPriority, TaskStatus
from taskboard.schemas.dashboard import (
    DeadlineTask,
    OverviewResponse,
    ProjectBrief,
    ProjectProgressResponse,
    SubtaskProgress,
)
from taskboard.services.authorization import (
    ALL_PROJECT_ROLES,
    ProjectContext,
    require_project_role,
)

if TYPE_CHECKING:
    from taskboard.core.config import Settings


def _as_utc(value: datetime) -> datetime:
    """Some backends hand back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _percentage(part: int, total: int) -> int:
    """Half-up rounded percentage; 0 when there is nothing to count."""
    return int(part * 100 / total + 0.5) if total else 0


def _due_sort_key(task: Task) -> tuple:
    """Due date ascending with undated tasks last, then newest first."""
    due = _as_utc(task.due_date) if task.due_date else None
    created = _as_utc(task.created_at).timestamp() if task.created_at else 0.0
    return (due is None, due or datetime.min.replace(tzinfo=timezone.utc), -created, -task.id)


def _member_project_ids(db: Session, user_id: int) -> list[int]:
    return [
        row.project_id
        for row in db.query(ProjectRole.project_id).filter(ProjectRole.user_id == user_id)
    ]


def _is_upcoming(task: Task, now: datetime, horizon: datetime) -> bool:
    return task.due_date is not None and now <= _as_utc(task.due_date) <= horizon


def _is_overdue(task: Task, now: datetime) -> bool:
    return (
        task.due_date is not None
        and _as_utc(task.due_date) < now
        and task.status != TaskStatus.DONE
    )


def _deadline(
    task: Task, with_project: bool = False, now: datetime | None = None
) -> DeadlineTask:
    days_overdue = None
    if now is not None:
        days_overdue = (now - _as_utc(task.due_date)).days
    project = None
    if with_project and task.project is not None:
        project = ProjectBrief(id=task.project.id, name=task.project.name, key=task.project.key)
    return DeadlineTask(
        id=task.id,
        title=task.title,
        due_date=_as_utc(task.due_date),
        priority=task.priority,
        status=task.status,
        project=project,
        days_overdue=days_overdue,
    )


def _status_counts(tasks: Iterable[Task]) -> dict[str, int]:
    counts = {status.value: 0 for status in TaskStatus}
    for task in tasks:
        counts[task.status.value] += 1
    return counts


def my_tasks(
    db: Session,
    user_id: int,
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
) -> list[Task]:
    """Tasks assigned to the caller in projects they still belong to."""
    project_ids = _member_project_ids(db, user_id)
    if not project_ids:
        return []
    query = (
        db.query(Task)
        .options(
            joinedload(Task.assignee),
            joinedload(Task.creator),
            joinedload(Task.project),
            selectinload(Task.subtasks),
        )
        .filter(Task.assigned_to_id == user_id, Task.project_id.in_(project_ids))
    )
    if status is not None:
        query = query.filter(Task.status == status)
    if priority is not None:
        query = query.filter(Task.priority == priority)
    return sorted(query.all(), key=_due_sort_key)


def overview(
    db: Session,
    user_id: int,
    settings: "Settings | None" = None,
    now: datetime | None = None,
) -> OverviewResponse:
    """Totals, per-status counts, upcoming and overdue lists for the caller's assigned tasks."""
    settings = settings or get_settings()
    now = now or datetime.now(timezone.utc)
    horizon = now + timedelta(days=settings.UPCOMING_DEADLINE_DAYS)
    limit = settings.DASHBOARD_LIST_LIMIT

    tasks = my_tasks(db, user_id)
    upcoming = [t for t in tasks if _is_upcoming(t, now, horizon)]
    overdue = [t for t in tasks if _is_overdue(t, now)]

    return OverviewResponse(
        total_assigned_tasks=len(tasks),
        tasks_by_status=_status_counts(tasks),
        upcoming_deadlines=[_deadline(t, with_project=True) for t in upcoming[:limit]],
        overdue_tasks=[_deadline(t, with_project=True, now=now) for t in overdue[:limit]],
        total_projects=len(_member_project_ids(db, user_id)),
    )


def project_progress(
    db: Session,
    context: ProjectContext,
    settings: "Settings | None" = None,
    now: datetime | None = None,
) -> ProjectProgressResponse:
    """Completion, breakdowns and deadlines for one project. Any member."""
    require_project_role(context, ALL_PROJECT_ROLES)
    settings = settings or get_settings()
    now = now or datetime.now(timezone.utc)
    horizon = now + timedelta(days=settings.UPCOMING_DEADLINE_DAYS)

    tasks = (
        db.query(Task)
        .options(selectinload(Task.subtasks))
        .filter(Task.project_id == context.project_id)
        .all()
    )
    completed = sum(1 for t in tasks if t.status == TaskStatus.DONE)

    priority_breakdown = {p.value: 0 for p in reversed(list(TaskPriority))}
    for task in tasks:
        priority_breakdown[task.priority.value] += 1

    total_subtasks = sum(len(t.subtasks) for t in tasks)
    completed_subtasks = sum(1 for t in tasks for s in t.subtasks if s.completed)

    by_due = sorted((t for t in tasks if t.due_date is not None), key=_due_sort_key)
    upcoming = [
        t for t in by_due if _is_upcoming(t, now, horizon) and t.status != TaskStatus.DONE
    ]
    overdue = [t for t in by_due if _is_overdue(t, now)]

    return ProjectProgressResponse(
        total_tasks=len(tasks),
        completed_tasks=completed,
        completion_percentage=_percentage(completed, len(tasks)),
        status_breakdown=_status_counts(tasks),
        priority_breakdown=priority_breakdown,
        subtasks=SubtaskProgress(
            total=total_subtasks,
            completed=completed_subtasks,
            completion_percentage=_percentage(completed_subtasks, total_subtasks),
        ),
        upcoming_deadlines=[_deadline(t) for t in upcoming[: settings.DASHBOARD_LIST_LIMIT]],
        overdue_tasks=[_deadline(t, now=now) for t in overdue],
    )

