"""User management gated by global permissions (read, write, delete)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from taskboard.api.v1.deps import get_global_role
from taskboard.core.database import get_db
from taskboard.schemas.auth import UserCreate, UserResponse, UsersListResponse, UserUpdate
from taskboard.services import users as user_service
from taskboard.services.authorization import GlobalRole

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> UsersListResponse:
    """List all users, newest first. Requires the 'read' permission."""
    users = user_service.list_users(db, role)
    return UsersListResponse(
        count=len(users), data=[UserResponse.model_validate(u) for u in users]
    )


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> UserResponse:
    return UserResponse.model_validate(user_service.get_user(db, role, user_id))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> UserResponse:
    """Create an account. Requires the 'write' permission."""
    return UserResponse.model_validate(user_service.create_user(db, role, body))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdate,
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> UserResponse:
    return UserResponse.model_validate(user_service.update_user(db, role, user_id, body))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Annotated[Session, Depends(get_db)],
    role: Annotated[GlobalRole | None, Depends(get_global_role)],
) -> Response:
    """Delete an account. Requires the 'delete' permission."""
    user_service.delete_user(db, role, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
