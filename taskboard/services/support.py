"""Support requests: users file them, global admins resolve or reject them."""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session, joinedload

from taskboard.core.errors import NotFoundError
from taskboard.models import SupportRequest
from taskboard.models.enums import Permission, SupportStatus
from taskboard.schemas.support import SupportRequestCreate
from taskboard.services.authorization import (
    GlobalRole,
    is_admin,
    require_admin,
    require_permission,
)

logger = logging.getLogger(__name__)

DEFAULT_RESPONSES = {
    SupportStatus.RESOLVED: "Request resolved by admin",
    SupportStatus.REJECTED: "Request rejected by admin",
}


def _scoped_query(db: Session, caller_id: int, caller_role: GlobalRole | None):
    """Admins see every request; everyone else only their own."""
    query = db.query(SupportRequest).options(
        joinedload(SupportRequest.user), joinedload(SupportRequest.resolved_by)
    )
    if not is_admin(caller_role):
        query = query.filter(SupportRequest.user_id == caller_id)
    return query


def _load_request(db: Session, request_id: int) -> SupportRequest:
    request = (
        db.query(SupportRequest)
        .options(joinedload(SupportRequest.user), joinedload(SupportRequest.resolved_by))
        .filter(SupportRequest.id == request_id)
        .first()
    )
    if request is None:
        raise NotFoundError("Support request not found")
    return request


def list_requests(
    db: Session, caller_id: int, caller_role: GlobalRole | None
) -> list[SupportRequest]:
    require_permission(caller_role, Permission.READ)
    return (
        _scoped_query(db, caller_id, caller_role)
        .order_by(SupportRequest.created_at.desc(), SupportRequest.id.desc())
        .all()
    )


def get_request(
    db: Session, caller_id: int, caller_role: GlobalRole | None, request_id: int
) -> SupportRequest:
    require_permission(caller_role, Permission.READ)
    request = (
        _scoped_query(db, caller_id, caller_role)
        .filter(SupportRequest.id == request_id)
        .first()
    )
    if request is None:
        raise NotFoundError("Support request not found")
    return request


def create_request(db: Session, caller_id: int, data: SupportRequestCreate) -> SupportRequest:
    request = SupportRequest(user_id=caller_id, subject=data.subject, message=data.message)
    db.add(request)
    db.commit()
    logger.info("Support request created", extra={"request_id": request.id})
    return _load_request(db, request.id)


def _decide(
    db: Session,
    caller_id: int,
    caller_role: GlobalRole | None,
    request_id: int,
    status: SupportStatus,
    admin_response: str | None,
) -> SupportRequest:
    require_admin(caller_role)
    request = _load_request(db, request_id)
    request.status = status
    request.admin_response = (admin_response or "").strip() or DEFAULT_RESPONSES[status]
    request.resolved_by_id = caller_id
    request.resolved_at = datetime.now(timezone.utc)
    db.commit()
    logger.info(
        "Support request %s", status.value, extra={"request_id": request_id}
    )
    return _load_request(db, request_id)


def resolve_request(
    db: Session,
    caller_id: int,
    caller_role: GlobalRole | None,
    request_id: int,
    admin_response: str | None = None,
) -> SupportRequest:
    return _decide(
        db, caller_id, caller_role, request_id, SupportStatus.RESOLVED, admin_response
    )


def reject_request(
    db: Session,
    caller_id: int,
    caller_role: GlobalRole | None,
    request_id: int,
    admin_response: str | None = None,
) -> SupportRequest:
    return _decide(
        db, caller_id, caller_role, request_id, SupportStatus.REJECTED, admin_response
    )


def delete_request(
    db: Session, caller_id: int, caller_role: GlobalRole | None, request_id: int
) -> None:
    """Owners delete their own requests; admins may delete any."""
    request = (
        _scoped_query(db, caller_id, caller_role)
        .filter(SupportRequest.id == request_id)
        .first()
    )
    if request is None:
        raise NotFoundError("Support request not found")
    db.delete(request)
    db.commit()
