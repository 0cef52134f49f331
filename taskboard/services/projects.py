"""Projects: list/get for members, create (creator becomes admin), update and cascading delete."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from taskboard.core.errors import ConflictError, NotFoundError
from taskboard.models import Activity, Project, ProjectRole, Subtask, Task
from taskboard.models.enums import ActivityAction, EntityType, ProjectRoleName
from taskboard.schemas.projects import ProjectCreate, ProjectUpdate
from taskboard.services.activity import log_activity
from taskboard.services.authorization import (
    ALL_PROJECT_ROLES,
    PROJECT_ADMIN_ROLES,
    ProjectContext,
    require_project_role,
)

if TYPE_CHECKING:
    from taskboard.core.config import Settings

logger = logging.getLogger(__name__)

DUPLICATE_KEY_MESSAGE = "Project key already exists"


def _load_project(db: Session, project_id: int) -> Project:
    project = (
        db.query(Project)
        .options(joinedload(Project.created_by))
        .filter(Project.id == project_id)
        .first()
    )
    if project is None:
        raise NotFoundError("Project not found")
    return project


def list_projects(db: Session, user_id: int) -> list[tuple[Project, ProjectRoleName]]:
    """Projects the user belongs to, each paired with the user's role there."""
    rows = (
        db.query(ProjectRole)
        .options(joinedload(ProjectRole.project).joinedload(Project.created_by))
        .filter(ProjectRole.user_id == user_id)
        .order_by(ProjectRole.created_at.desc(), ProjectRole.id.desc())
        .all()
    )
    return [(row.project, row.role) for row in rows]


def get_project(db: Session, context: ProjectContext) -> Project:
    """A missing project is reported before the membership check."""
    project = _load_project(db, context.project_id)
    require_project_role(context, ALL_PROJECT_ROLES)
    return project


def create_project(
    db: Session,
    user_id: int,
    data: ProjectCreate,
    settings: "Settings | None" = None,
) -> Project:
    """
    Create a project and make the creator its admin in the same transaction.

    The key arrives normalized to uppercase, so uniqueness is case-insensitive.
    """
    if db.query(Project.id).filter(Project.key == data.key).first() is not None:
        raise ConflictError(DUPLICATE_KEY_MESSAGE)

    project = Project(
        name=data.name,
        key=data.key,
        description=data.description,
        created_by_id=user_id,
    )
    db.add(project)
    try:
        db.flush()
        db.add(
            ProjectRole(project_id=project.id, user_id=user_id, role=ProjectRoleName.ADMIN)
        )
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(DUPLICATE_KEY_MESSAGE) from e
    project_id = project.id

    logger.info("Project created", extra={"project_id": project_id, "key": data.key})
    log_activity(
        db,
        project_id=project_id,
        user_id=user_id,
        action=ActivityAction.PROJECT_CREATED,
        description=f'Created project "{data.name}"',
        entity_type=EntityType.PROJECT,
        entity_id=project_id,
        metadata={"project_name": data.name, "project_key": data.key},
        settings=settings,
    )
    return _load_project(db, project_id)


def update_project(
    db: Session,
    context: ProjectContext,
    data: ProjectUpdate,
    settings: "Settings | None" = None,
) -> Project:
    """Edit name, description or active flag. Project admin only."""
    project = _load_project(db, context.project_id)
    require_project_role(context, PROJECT_ADMIN_ROLES)

    fields = data.model_dump(exclude_unset=True)
    changes: dict[str, object] = {}
    if fields.get("name") is not None:
        name = fields["name"].strip()
        if name and name != project.name:
            changes["name"] = {"from": project.name, "to": name}
            project.name = name
    if "description" in fields and fields["description"] != project.description:
        changes["description"] = True
        project.description = fields["description"]
    if fields.get("is_active") is not None and fields["is_active"] != project.is_active:
        changes["is_active"] = fields["is_active"]
        project.is_active = fields["is_active"]

    db.commit()
    project = _load_project(db, context.project_id)

    log_activity(
        db,
        project_id=context.project_id,
        user_id=context.user_id,
        action=ActivityAction.PROJECT_UPDATED,
        description=f'Updated project "{project.name}"',
        entity_type=EntityType.PROJECT,
        entity_id=context.project_id,
        metadata={"project_name": project.name, "changes": changes},
        settings=settings,
    )
    return _load_project(db, context.project_id)


def delete_project(db: Session, context: ProjectContext) -> None:
    """
    Delete the project with its subtasks, tasks, memberships and activity.

    Everything is removed in one transaction: either the project and all its
    dependents are gone, or nothing is.
    """
    project = _load_project(db, context.project_id)
    require_project_role(context, PROJECT_ADMIN_ROLES)

    project_id = project.id
    task_ids = select(Task.id).where(Task.project_id == project_id)
    try:
        db.query(Subtask).filter(Subtask.task_id.in_(task_ids)).delete(
            synchronize_session=False
        )
        tasks_deleted = (
            db.query(Task).filter(Task.project_id == project_id).delete(synchronize_session=False)
        )
        members_deleted = (
            db.query(ProjectRole)
            .filter(ProjectRole.project_id == project_id)
            .delete(synchronize_session=False)
        )
        activities_deleted = (
            db.query(Activity)
            .filter(Activity.project_id == project_id)
            .delete(synchronize_session=False)
        )
        db.delete(project)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Project delete rolled back", extra={"project_id": project_id})
        raise

    logger.info(
        "Project deleted: tasks=%s, members=%s, activities=%s",
        tasks_deleted,
        members_deleted,
        activities_deleted,
        extra={"project_id": project_id},
    )
