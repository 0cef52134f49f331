"""Dashboard routes: caller overview, assigned tasks, project progress and activity."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from taskboard.api.v1.auth import get_current_user
from taskboard.api.v1.deps import get_project_context
from taskboard.api.v1.tasks import serialize_task
from taskboard.core.database import get_db
from taskboard.models import Activity
from taskboard.models.enums import TaskPriority, TaskStatus
from taskboard.schemas.activity import ActivityListResponse, ActivityResponse
from taskboard.schemas.auth import CurrentUser
from taskboard.schemas.common import UserSummary
from taskboard.schemas.dashboard import OverviewResponse, ProjectProgressResponse
from taskboard.schemas.tasks import TasksListResponse
from taskboard.services import activity as activity_service
from taskboard.services import dashboard as dashboard_service
from taskboard.services.authorization import ProjectContext

router = APIRouter()


def _serialize_activity(record: Activity) -> ActivityResponse:
    return ActivityResponse(
        id=record.id,
        project_id=record.project_id,
        user=UserSummary.model_validate(record.user) if record.user else None,
        action=record.action,
        description=record.description,
        entity_type=record.entity_type,
        entity_id=record.entity_id,
        metadata=dict(record.details or {}),
        created_at=record.created_at,
    )


@router.get("/overview", response_model=OverviewResponse)
def get_overview(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> OverviewResponse:
    """Counts, upcoming deadlines and overdue tasks assigned to the caller."""
    return dashboard_service.overview(db, current_user.id)


@router.get("/my-tasks", response_model=TasksListResponse)
def get_my_tasks(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
) -> TasksListResponse:
    """Tasks assigned to the caller, soonest due date first."""
    tasks = dashboard_service.my_tasks(db, current_user.id, status=status, priority=priority)
    return TasksListResponse(count=len(tasks), data=[serialize_task(t) for t in tasks])


@router.get("/projects/{project_id}/progress", response_model=ProjectProgressResponse)
def get_project_progress(
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> ProjectProgressResponse:
    return dashboard_service.project_progress(db, ctx)


@router.get("/projects/{project_id}/activity", response_model=ActivityListResponse)
def get_project_activity(
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> ActivityListResponse:
    """Newest-first activity log; limit defaults to 50 and is capped."""
    records = activity_service.list_activity(db, ctx, limit)
    return ActivityListResponse(
        count=len(records), data=[_serialize_activity(r) for r in records]
    )
