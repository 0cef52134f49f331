"""Support request routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from taskboard.api.v1.auth import get_current_user
from taskboard.api.v1.deps import get_global_role
from taskboard.core.database import get_db
from taskboard.schemas.auth import CurrentUser
from taskboard.schemas.support import (
    SupportDecision,
    SupportRequestCreate,
    SupportRequestResponse,
    SupportRequestsListResponse,
)
from taskboard.services import support as support_service
from taskboard.services.authorization import GlobalRole

router = APIRouter()


@router.get("", response_model=SupportRequestsListResponse)
def list_requests(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> SupportRequestsListResponse:
    """Admins see all requests; other users see their own."""
    requests = support_service.list_requests(db, current_user.id, role)
    return SupportRequestsListResponse(
        count=len(requests),
        data=[SupportRequestResponse.model_validate(r) for r in requests],
    )


@router.get("/{request_id}", response_model=SupportRequestResponse)
def get_request(
    request_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> SupportRequestResponse:
    request = support_service.get_request(db, current_user.id, role, request_id)
    return SupportRequestResponse.model_validate(request)


@router.post("", response_model=SupportRequestResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    body: SupportRequestCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> SupportRequestResponse:
    request = support_service.create_request(db, current_user.id, body)
    return SupportRequestResponse.model_validate(request)


@router.put("/{request_id}/resolve", response_model=SupportRequestResponse)
def resolve_request(
    request_id: int,
    body: SupportDecision,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> SupportRequestResponse:
    request = support_service.resolve_request(
        db, current_user.id, role, request_id, body.admin_response
    )
    return SupportRequestResponse.model_validate(request)


@router.put("/{request_id}/reject", response_model=SupportRequestResponse)
def reject_request(
    request_id: int,
    body: SupportDecision,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> SupportRequestResponse:
    request = support_service.reject_request(
        db, current_user.id, role, request_id, body.admin_response
    )
    return SupportRequestResponse.model_validate(request)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(
    request_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> Response:
    support_service.delete_request(db, current_user.id, role, request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
