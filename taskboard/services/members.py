"""Project membership: add, change role, remove (last-admin protected) and list."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from taskboard.core.config import get_settings
from taskboard.core.errors import ConflictError, InvariantViolationError, NotFoundError
from taskboard.models import ProjectRole, User
from taskboard.models.enums import ActivityAction, EntityType, ProjectRoleName
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

LAST_ADMIN_MESSAGE = "Cannot remove the last admin from the project"
LAST_ADMIN_DEMOTE_MESSAGE = "Cannot change the role of the last admin of the project"

def _get_membership(db: Session, project_id: int, user_id: int) -> ProjectRole | None:
    return (
        db.query(ProjectRole)
        .options(joinedload(ProjectRole.user))
        .filter(ProjectRole.project_id == project_id, ProjectRole.user_id == user_id)
        .first()
    )


def _lock_admins(db: Session, project_id: int) -> list[ProjectRole]:
    """Lock the project's admin rows for the rest of the transaction and return them."""
    return (
        db.query(ProjectRole)
        .filter(
            ProjectRole.project_id == project_id,
            ProjectRole.role == ProjectRoleName.ADMIN,
        )
        .with_for_update()
        .all()
    )


def list_members(db: Session, context: ProjectContext) -> list[ProjectRole]:
    """All members of the project, ordered by role name then join time."""
    require_project_role(context, ALL_PROJECT_ROLES)
    members = (
        db.query(ProjectRole)
        .options(joinedload(ProjectRole.user))
        .filter(ProjectRole.project_id == context.project_id)
        .order_by(ProjectRole.created_at.asc(), ProjectRole.id.asc())
        .all()
    )
    return sorted(members, key=lambda m: m.role.value)


def add_member(
    db: Session,
    context: ProjectContext,
    user_id: int,
    role: ProjectRoleName,
    settings: "Settings | None" = None,
) -> ProjectRole:
    """Grant a user a role in the project. Project admin only."""
    require_project_role(context, PROJECT_ADMIN_ROLES)

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if _get_membership(db, context.project_id, user_id) is not None:
        raise ConflictError("User is already a member of this project")

    membership = ProjectRole(project_id=context.project_id, user_id=user_id, role=role)
    db.add(membership)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("User is already a member of this project") from e
    db.refresh(membership)

    logger.info(
        "Member added",
        extra={"project_id": context.project_id, "user_id": user_id, "role": role.value},
    )
    log_activity(
        db,
        project_id=context.project_id,
        user_id=context.user_id,
        action=ActivityAction.MEMBER_ADDED,
        description=f"Added {user.name} as {role.value}",
        entity_type=EntityType.MEMBER,
        entity_id=user_id,
        metadata={"member_name": user.name, "role": role.value},
        settings=settings,
    )
    return membership


def change_role(
    db: Session,
    context: ProjectContext,
    user_id: int,
    new_role: ProjectRoleName,
    settings: "Settings | None" = None,
) -> ProjectRole:
    """
    Change a member's project role. Project admin only.

    Demoting the only admin is rejected when PROTECT_LAST_ADMIN_ON_ROLE_CHANGE is set.
    """
    settings = settings or get_settings()
    require_project_role(context, PROJECT_ADMIN_ROLES)

    membership = _get_membership(db, context.project_id, user_id)
    if membership is None:
        raise NotFoundError("Member not found")

    old_role = membership.role
    if new_role == old_role:
        return membership

    if (
        settings.PROTECT_LAST_ADMIN_ON_ROLE_CHANGE
        and old_role == ProjectRoleName.ADMIN
        and new_role != ProjectRoleName.ADMIN
    ):
        admins = _lock_admins(db, context.project_id)
        if len(admins) <= 1:
            db.rollback()
            raise InvariantViolationError(LAST_ADMIN_DEMOTE_MESSAGE)

    membership.role = new_role
    db.commit()
    db.refresh(membership)

    member_name = membership.user.name
    log_activity(
        db,
        project_id=context.project_id,
        user_id=context.user_id,
        action=ActivityAction.MEMBER_ROLE_CHANGED,
        description=f"Changed {member_name}'s role from {old_role.value} to {new_role.value}",
        entity_type=EntityType.MEMBER,
        entity_id=user_id,
        metadata={
            "member_name": member_name,
            "old_role": old_role.value,
            "new_role": new_role.value,
        },
        settings=settings,
    )
    return membership


def remove_member(
    db: Session,
    context: ProjectContext,
    user_id: int,
    settings: "Settings | None" = None,
) -> None:
    """
    Revoke a user's membership. Project admin only.

    The admin rows are locked before counting, so two concurrent removals of the
    last two admins cannot both succeed.
    """
    require_project_role(context, PROJECT_ADMIN_ROLES)

    admins = _lock_admins(db, context.project_id)
    membership = _get_membership(db, context.project_id, user_id)
    if membership is None:
        db.rollback()
        raise NotFoundError("Member not found")
    if membership.role == ProjectRoleName.ADMIN and len(admins) <= 1:
        db.rollback()
        raise InvariantViolationError(LAST_ADMIN_MESSAGE)

    member_name = membership.user.name
    db.delete(membership)
    db.commit()

    logger.info(
        "Member removed", extra={"project_id": context.project_id, "user_id": user_id}
    )
    log_activity(
        db,
        project_id=context.project_id,
        user_id=context.user_id,
        action=ActivityAction.MEMBER_REMOVED,
        description=f"Removed {member_name} from project",
        entity_type=EntityType.MEMBER,
        entity_id=user_id,
        metadata={"member_name": member_name},
        settings=settings,
    )
