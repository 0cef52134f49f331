"""Global role registry: read with 'read', manage as admin."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from taskboard.api.v1.deps import get_global_role
from taskboard.core.database import get_db
from taskboard.schemas.auth import UserResponse
from taskboard.schemas.roles import (
    RoleAssignmentResponse,
    RoleCreate,
    RoleResponse,
    RolesListResponse,
    RoleUpdate,
)
from taskboard.services import roles as role_service
from taskboard.services.authorization import GlobalRole

router = APIRouter()


@router.get("", response_model=RolesListResponse)
def list_roles(
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> RolesListResponse:
    roles = role_service.list_roles(db, role)
    return RolesListResponse(
        count=len(roles), data=[RoleResponse.model_validate(r) for r in roles]
    )


@router.get("/{role_id}", response_model=RoleResponse)
def get_role(
    role_id: int,
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> RoleResponse:
    return RoleResponse.model_validate(role_service.get_role(db, role, role_id))


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
def create_role(
    body: RoleCreate,
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> RoleResponse:
    return RoleResponse.model_validate(role_service.create_role(db, role, body))


@router.put("/{role_id}", response_model=RoleResponse)
def update_role(
    role_id: int,
    body: RoleUpdate,
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> RoleResponse:
    return RoleResponse.model_validate(role_service.update_role(db, role, role_id, body))


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(
    role_id: int,
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> Response:
    """Delete a role. Rejected while any user still has it."""
    role_service.delete_role(db, role, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{role_id}/assign/{user_id}", response_model=RoleAssignmentResponse)
def assign_role(
    role_id: int,
    user_id: int,
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> RoleAssignmentResponse:
    """Replace the user's global role with this one."""
    assigned, user = role_service.assign_role(db, role, role_id, user_id)
    return RoleAssignmentResponse(
        message=f"Role '{assigned.name.value}' assigned to user successfully",
        user=UserResponse.model_validate(user),
    )
