"""Best-effort project activity log: writes never fail the caller's operation."""

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from taskboard.core.config import get_settings
from taskboard.models import Activity
from taskboard.models.enums import ActivityAction, EntityType
from taskboard.services.authorization import (
    ALL_PROJECT_ROLES,
    ProjectContext,
    require_project_role,
)

if TYPE_CHECKING:
    from taskboard.core.config import Settings

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    project_id: int,
    user_id: int,
    action: ActivityAction,
    description: str,
    entity_type: EntityType = EntityType.TASK,
    entity_id: int | None = None,
    metadata: dict[str, Any] | None = None,
    settings: "Settings | None" = None,
) -> Activity | None:
    """
    Append one activity record and commit it on its own.

    Call after the primary change has committed. Storage errors are logged and
    swallowed (the record is lost, the caller's result stands). Returns the stored
    record, or None when logging is disabled or failed.
    """
    settings = settings or get_settings()
    if not settings.ACTIVITY_LOG_ENABLED:
        return None

    record = Activity(
        project_id=project_id,
        user_id=user_id,
        action=action,
        description=description,
        entity_type=entity_type,
        entity_id=entity_id,
        details=dict(metadata or {}),
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "Failed to log activity",
            extra={"project_id": project_id, "user_id": user_id, "action": action.value},
        )
        return None
    return record


def clamp_limit(limit: int | None, settings: "Settings | None" = None) -> int:
    """Apply the default page size and cap it at ACTIVITY_MAX_LIMIT."""
    settings = settings or get_settings()
    if limit is None or limit < 1:
        return settings.ACTIVITY_DEFAULT_LIMIT
    return min(limit, settings.ACTIVITY_MAX_LIMIT)


def list_activity(
    db: Session,
    context: ProjectContext,
    limit: int | None = None,
    settings: "Settings | None" = None,
) -> list[Activity]:
    """Newest-first activity of a project; readable by any member."""
    require_project_role(context, ALL_PROJECT_ROLES)
    return (
        db.query(Activity)
        .options(joinedload(Activity.user))
        .filter(Activity.project_id == context.project_id)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .limit(clamp_limit(limit, settings))
        .all()
    )
