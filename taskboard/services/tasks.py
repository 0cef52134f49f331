"""Task store: create, update (ownership rule), move, delete, list and subtasks."""

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session, joinedload, selectinload

from taskboard.core.errors import AccessDeniedError, InvalidInputError, NotFoundError
from taskboard.models import ProjectRole, Subtask, Task, User
from taskboard.models.enums import ActivityAction, EntityType, TaskStatus
from taskboard.schemas.tasks import SubtaskIn, TaskCreate, TaskUpdate
from taskboard.services.activity import log_activity
from taskboard.services.authorization import (
    ALL_PROJECT_ROLES,
    TASK_CREATE_ROLES,
    TASK_MANAGE_ROLES,
    ProjectContext,
    can_manage_tasks,
    require_project_role,
    require_task_update,
)
from taskboard.services.ordering import next_order, place_task

if TYPE_CHECKING:
    from taskboard.core.config import Settings

logger = logging.getLogger(__name__)


def _task_query(db: Session):
    return db.query(Task).options(
        joinedload(Task.assignee),
        joinedload(Task.creator),
        selectinload(Task.subtasks),
    )


def _load_task(db: Session, project_id: int, task_id: int) -> Task:
    """Fetch a task scoped to the project; a task from another project is reported as missing."""
    task = _task_query(db).filter(Task.id == task_id).first()
    if task is None or task.project_id != project_id:
        raise NotFoundError("Task not found")
    return task


def _require_member_assignee(db: Session, project_id: int, user_id: int) -> User:
    """Assignees must be members of the task's project."""
    row = (
        db.query(ProjectRole)
        .options(joinedload(ProjectRole.user))
        .filter(ProjectRole.project_id == project_id, ProjectRole.user_id == user_id)
        .first()
    )
    if row is None:
        raise InvalidInputError("Assignee must be a member of this project")
    return row.user


def _build_subtasks(items: list[SubtaskIn]) -> list[Subtask]:
    return [
        Subtask(title=item.title, completed=item.completed, position=position)
        for position, item in enumerate(items)
    ]


def list_tasks(
    db: Session,
    context: ProjectContext,
    status: TaskStatus | None = None,
    assigned_to: int | None = None,
) -> list[Task]:
    """
    Tasks of the project, optionally filtered by status and/or assignee.

    Sorted by order ascending, then creation time descending (newest first among ties).
    """
    require_project_role(context, ALL_PROJECT_ROLES)
    query = _task_query(db).filter(Task.project_id == context.project_id)
    if status is not None:
        query = query.filter(Task.status == status)
    if assigned_to is not None:
        query = query.filter(Task.assigned_to_id == assigned_to)
    return query.order_by(Task.order.asc(), Task.created_at.desc(), Task.id.desc()).all()


def get_task(db: Session, context: ProjectContext, task_id: int) -> Task:
    require_project_role(context, ALL_PROJECT_ROLES)
    return _load_task(db, context.project_id, task_id)


def create_task(
    db: Session,
    context: ProjectContext,
    data: TaskCreate,
    settings: "Settings | None" = None,
) -> Task:
    """Create a task at the end of its status column. Admin, manager or contributor."""
    require_project_role(context, TASK_CREATE_ROLES)

    if data.assigned_to is not None:
        _require_member_assignee(db, context.project_id, data.assigned_to)

    task = Task(
        project_id=context.project_id,
        title=data.title,
        description=data.description,
        status=data.status,
        priority=data.priority,
        assigned_to_id=data.assigned_to,
        created_by_id=context.user_id,
        due_date=data.due_date,
        tags=list(data.tags),
        order=next_order(db, context.project_id, data.status),
        subtasks=_build_subtasks(data.subtasks),
    )
    db.add(task)
    db.commit()
    task_id = task.id

    logger.info(
        "Task created",
        extra={"project_id": context.project_id, "task_id": task_id, "order": task.order},
    )
    log_activity(
        db,
        project_id=context.project_id,
        user_id=context.user_id,
        action=ActivityAction.TASK_CREATED,
        description=f'Created task "{task.title}"',
        entity_type=EntityType.TASK,
        entity_id=task_id,
        metadata={
            "task_title": task.title,
            "status": task.status.value,
            "priority": task.priority.value,
        },
        settings=settings,
    )
    return _load_task(db, context.project_id, task_id)


def update_task(
    db: Session,
    context: ProjectContext,
    task_id: int,
    patch: TaskUpdate,
    settings: "Settings | None" = None,
) -> Task:
    """
    Apply a partial update. Only fields present in the patch are written.

    admin/manager may update any task; a contributor only the task currently
    assigned to them, and may not hand it to somebody else. A status change
    without an explicit order appends the task to its new column.
    """
    task = _load_task(db, context.project_id, task_id)
    role = require_task_update(context, task.assigned_to_id)

    changes: dict[str, Any] = patch.model_dump(exclude_unset=True)
    changes.pop("project_id", None)

    old_status = task.status
    old_assignee_id = task.assigned_to_id

    if "title" in changes and changes["title"] is None:
        raise InvalidInputError("Title is required.")
    if "assigned_to" in changes:
        new_assignee_id = changes["assigned_to"]
        if new_assignee_id is not None:
            _require_member_assignee(db, context.project_id, new_assignee_id)
        if (
            new_assignee_id != old_assignee_id
            and new_assignee_id not in (None, context.user_id)
            and not can_manage_tasks(role)
        ):
            raise AccessDeniedError("Only admins and managers can reassign tasks to other users")
        task.assigned_to_id = new_assignee_id

    if "title" in changes:
        task.title = changes["title"]
    if "description" in changes:
        task.description = changes["description"] or ""
    if changes.get("priority") is not None:
        task.priority = changes["priority"]
    if "due_date" in changes:
        task.due_date = changes["due_date"]
    if "tags" in changes:
        task.tags = list(changes["tags"] or [])
    if "subtasks" in changes:
        task.subtasks = _build_subtasks(patch.subtasks or [])

    new_status = changes.get("status") or old_status
    explicit_order = changes.get("order")
    if new_status != old_status:
        task.status = new_status
        if explicit_order is None:
            task.order = next_order(db, task.project_id, new_status, exclude_task_id=task.id)
    if explicit_order is not None:
        task.order = explicit_order

    db.commit()
    task = _load_task(db, context.project_id, task_id)

    if new_status != old_status:
        action = ActivityAction.TASK_STATUS_CHANGED
        description = (
            f'Changed task "{task.title}" status from {old_status.value} to {new_status.value}'
        )
    elif task.assigned_to_id is not None and task.assigned_to_id != old_assignee_id:
        action = ActivityAction.TASK_ASSIGNED
        description = f'Assigned task "{task.title}" to {task.assignee.name}'
    else:
        action = ActivityAction.TASK_UPDATED
        description = f'Updated task "{task.title}"'

    log_activity(
        db,
        project_id=context.project_id,
        user_id=context.user_id,
        action=action,
        description=description,
        entity_type=EntityType.TASK,
        entity_id=task_id,
        metadata={
            "task_title": task.title,
            "changes": {
                "status": changes["status"].value if changes.get("status") else None,
                "priority": changes["priority"].value if changes.get("priority") else None,
                "assigned_to": changes.get("assigned_to"),
            },
        },
        settings=settings,
    )
    return _load_task(db, context.project_id, task_id)


def move_task(
    db: Session,
    context: ProjectContext,
    task_id: int,
    target_status: TaskStatus,
    target_order: int | None = None,
    settings: "Settings | None" = None,
) -> Task:
    """
    Move a task to a column and, optionally, a slot within it.

    The shift of the destination partition and the write of the moved task's
    order commit together.
    """
    require_project_role(context, TASK_CREATE_ROLES)
    task = _load_task(db, context.project_id, task_id)
    from_status = task.status

    place_task(db, task, target_status, target_order)
    db.commit()

    task = _load_task(db, context.project_id, task_id)
    log_activity(
        db,
        project_id=context.project_id,
        user_id=context.user_id,
        action=ActivityAction.TASK_MOVED,
        description=(
            f'Moved task "{task.title}" from {from_status.value} to {target_status.value}'
        ),
        entity_type=EntityType.TASK,
        entity_id=task_id,
        metadata={
            "task_title": task.title,
            "from_status": from_status.value,
            "to_status": target_status.value,
        },
        settings=settings,
    )
    return _load_task(db, context.project_id, task_id)


def delete_task(
    db: Session,
    context: ProjectContext,
    task_id: int,
    settings: "Settings | None" = None,
) -> None:
    """Hard delete. Admin or manager. Remaining orders are not compacted."""
    require_project_role(context, TASK_MANAGE_ROLES)
    task = _load_task(db, context.project_id, task_id)
    title = task.title

    db.delete(task)
    db.commit()

    logger.info("Task deleted", extra={"project_id": context.project_id, "task_id": task_id})
    log_activity(
        db,
        project_id=context.project_id,
        user_id=context.user_id,
        action=ActivityAction.TASK_DELETED,
        description=f'Deleted task "{title}"',
        entity_type=EntityType.TASK,
        entity_id=task_id,
        metadata={"task_title": title},
        settings=settings,
    )


def add_subtask(
    db: Session,
    context: ProjectContext,
    task_id: int,
    title: str,
    settings: "Settings | None" = None,
) -> Task:
    """Append a subtask to the checklist; same ownership rule as update."""
    task = _load_task(db, context.project_id, task_id)
    require_task_update(context, task.assigned_to_id)

    title = (title or "").strip()
    if not title:
        raise InvalidInputError("Subtask title is required")

    subtask = Subtask(title=title, completed=False, position=len(task.subtasks))
    task.subtasks.append(subtask)
    db.commit()
    subtask_id = subtask.id

    log_activity(
        db,
        project_id=context.project_id,
        user_id=context.user_id,
        action=ActivityAction.SUBTASK_CREATED,
        description=f'Added subtask "{title}" to task "{task.title}"',
        entity_type=EntityType.SUBTASK,
        entity_id=subtask_id,
        metadata={"task_title": task.title, "subtask_title": title, "task_id": task_id},
        settings=settings,
    )
    return _load_task(db, context.project_id, task_id)


def set_subtask_completed(
    db: Session,
    context: ProjectContext,
    task_id: int,
    subtask_id: int,
    completed: bool,
    settings: "Settings | None" = None,
) -> Task:
    """Tick or untick a subtask; same ownership rule as update."""
    task = _load_task(db, context.project_id, task_id)
    require_task_update(context, task.assigned_to_id)

    subtask = next((s for s in task.subtasks if s.id == subtask_id), None)
    if subtask is None:
        raise NotFoundError("Subtask not found")

    changed = subtask.completed != completed
    subtask.completed = completed
    db.commit()

    if changed:
        if completed:
            action = ActivityAction.SUBTASK_COMPLETED
            description = f'Completed subtask "{subtask.title}" in task "{task.title}"'
        else:
            action = ActivityAction.TASK_UPDATED
            description = f'Reopened subtask "{subtask.title}" in task "{task.title}"'
        log_activity(
            db,
            project_id=context.project_id,
            user_id=context.user_id,
            action=action,
            description=description,
            entity_type=EntityType.SUBTASK,
            entity_id=subtask_id,
            metadata={
                "task_title": task.title,
                "subtask_title": subtask.title,
                "task_id": task_id,
            },
            settings=settings,
        )
    return _load_task(db, context.project_id, task_id)
