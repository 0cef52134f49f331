"""Kanban ordering within a (project, status) partition."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from taskboard.models import Task
from taskboard.models.enums import TaskStatus


def next_order(
    db: Session,
    project_id: int,
    status: TaskStatus,
    exclude_task_id: int | None = None,
) -> int:
    """1 + max(order) in the partition, or 0 when the partition is empty."""
    query = db.query(func.max(Task.order)).filter(
        Task.project_id == project_id, Task.status == status
    )
    if exclude_task_id is not None:
        query = query.filter(Task.id != exclude_task_id)
    current_max = query.scalar()
    return 0 if current_max is None else current_max + 1


def make_room(
    db: Session,
    project_id: int,
    status: TaskStatus,
    at: int,
    exclude_task_id: int | None = None,
) -> int:
    """
    Shift every task in the partition with order >= at up by one.

    Runs as a single UPDATE in the caller's transaction; returns the number of rows shifted.
    """
    query = db.query(Task).filter(
        Task.project_id == project_id,
        Task.status == status,
        Task.order >= at,
    )
    if exclude_task_id is not None:
        query = query.filter(Task.id != exclude_task_id)
    return query.update({Task.order: Task.order + 1}, synchronize_session=False)


def place_task(db: Session, task: Task, status: TaskStatus, order: int | None) -> None:
    """
    Put the task at (status, order) without committing.

    With an explicit order the destination partition is shifted first, so the moved
    task ends up strictly before every task that previously held order >= order.
    Without one the task keeps its numeric order and only changes partition.
    """
    if order is not None:
        make_room(db, task.project_id, status, order, exclude_task_id=task.id)
        task.order = order
    task.status = status
