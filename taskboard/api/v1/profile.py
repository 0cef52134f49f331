"""The caller's own profile."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskboard.api.v1.auth import get_current_user
from taskboard.core.database import get_db
from taskboard.schemas.auth import CurrentUser, ProfileUpdate, UserResponse
from taskboard.services import users as user_service

router = APIRouter()


@router.get("", response_model=UserResponse)
def get_profile(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse.model_validate(user_service.get_profile(db, current_user.id))


@router.put("", response_model=UserResponse)
def update_profile(
    body: ProfileUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UserResponse:
    """Change display name and/or profile picture URL."""
    user = user_service.update_profile(db, current_user.id, body)
    return UserResponse.model_validate(user)


@router.delete("/picture", response_model=UserResponse)
def delete_profile_picture(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> UserResponse:
    user = user_service.clear_profile_picture(db, current_user.id)
    return UserResponse.model_validate(user)
