"""Task routes, mounted under /projects/{project_id}/tasks."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from taskboard.api.v1.deps import get_project_context
from taskboard.core.database import get_db
from taskboard.models import Task
from taskboard.models.enums import TaskStatus
from taskboard.schemas.common import UserSummary
from taskboard.schemas.tasks import (
    SubtaskCompletion,
    SubtaskIn,
    SubtaskResponse,
    TaskCreate,
    TaskMove,
    TaskResponse,
    TasksListResponse,
    TaskUpdate,
)
from taskboard.services import tasks as task_service
from taskboard.services.authorization import ProjectContext

router = APIRouter()


def serialize_task(task: Task) -> TaskResponse:
    """Task with assignee and creator as display summaries."""
    return TaskResponse(
        id=task.id,
        project_id=task.project_id,
        title=task.title,
        description=task.description or "",
        status=task.status,
        priority=task.priority,
        assigned_to=UserSummary.model_validate(task.assignee) if task.assignee else None,
        created_by=UserSummary.model_validate(task.creator) if task.creator else None,
        due_date=task.due_date,
        tags=list(task.tags or []),
        subtasks=[SubtaskResponse.model_validate(s) for s in task.subtasks],
        order=task.order,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


@router.get("", response_model=TasksListResponse)
def list_tasks(
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
    status_filter: Annotated[TaskStatus | None, Query(alias="status")] = None,
    assigned_to: Annotated[int | None, Query(alias="assignedTo")] = None,
) -> TasksListResponse:
    """Tasks sorted by order, then newest first. Optional status and assignee filters."""
    tasks = task_service.list_tasks(db, ctx, status=status_filter, assigned_to=assigned_to)
    return TasksListResponse(count=len(tasks), data=[serialize_task(t) for t in tasks])


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> TaskResponse:
    return serialize_task(task_service.get_task(db, ctx, task_id))


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    body: TaskCreate,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> TaskResponse:
    """Create a task at the end of its column. Admin, manager or contributor."""
    return serialize_task(task_service.create_task(db, ctx, body))


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    body: TaskUpdate,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> TaskResponse:
    """
    Partially update a task. Contributors may only update tasks assigned to them;
    viewers may not update at all.
    """
    return serialize_task(task_service.update_task(db, ctx, task_id, body))


@router.put("/{task_id}/move", response_model=TaskResponse)
def move_task(
    task_id: int,
    body: TaskMove,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> TaskResponse:
    """Kanban drag and drop: move to a column and optionally to a slot in it."""
    task = task_service.move_task(db, ctx, task_id, body.status, body.order)
    return serialize_task(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> Response:
    task_service.delete_task(db, ctx, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{task_id}/subtasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED
)
def add_subtask(
    task_id: int,
    body: SubtaskIn,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> TaskResponse:
    return serialize_task(task_service.add_subtask(db, ctx, task_id, body.title))


@router.put("/{task_id}/subtasks/{subtask_id}", response_model=TaskResponse)
def set_subtask_completed(
    task_id: int,
    subtask_id: int,
    body: SubtaskCompletion,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> TaskResponse:
    task = task_service.set_subtask_completed(db, ctx, task_id, subtask_id, body.completed)
    return serialize_task(task)
