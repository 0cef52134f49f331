"""Projects and project membership routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from taskboard.api.v1.auth import get_current_user
from taskboard.api.v1.deps import get_project_context
from taskboard.core.database import get_db
from taskboard.models import Project, ProjectRole
from taskboard.models.enums import ProjectRoleName
from taskboard.schemas.auth import CurrentUser
from taskboard.schemas.common import UserSummary
from taskboard.schemas.projects import (
    MemberAdd,
    MemberResponse,
    MemberRoleUpdate,
    MembersListResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectsListResponse,
    ProjectUpdate,
)
from taskboard.services import members as member_service
from taskboard.services import projects as project_service
from taskboard.services.authorization import ProjectContext

router = APIRouter()


def _serialize_project(project: Project, user_role: ProjectRoleName | None) -> ProjectResponse:
    creator = project.created_by
    return ProjectResponse(
        id=project.id,
        name=project.name,
        key=project.key,
        description=project.description,
        is_active=project.is_active,
        created_by=UserSummary.model_validate(creator) if creator else None,
        created_at=project.created_at,
        updated_at=project.updated_at,
        user_role=user_role,
    )


def _serialize_member(membership: ProjectRole) -> MemberResponse:
    return MemberResponse(
        user=UserSummary.model_validate(membership.user),
        role=membership.role,
        joined_at=membership.created_at,
    )


@router.get("", response_model=ProjectsListResponse)
def list_projects(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ProjectsListResponse:
    """Projects the caller is a member of, each with the caller's role."""
    rows = project_service.list_projects(db, current_user.id)
    return ProjectsListResponse(
        count=len(rows),
        data=[_serialize_project(project, role) for project, role in rows],
    )


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    body: ProjectCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ProjectResponse:
    """Create a project; the caller becomes its admin. Duplicate keys return 409."""
    project = project_service.create_project(db, current_user.id, body)
    return _serialize_project(project, ProjectRoleName.ADMIN)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> ProjectResponse:
    project = project_service.get_project(db, ctx)
    return _serialize_project(project, ctx.role)


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    body: ProjectUpdate,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> ProjectResponse:
    project = project_service.update_project(db, ctx, body)
    return _serialize_project(project, ctx.role)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> Response:
    """Delete the project with all its tasks, members and activity. Project admin only."""
    project_service.delete_project(db, ctx)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/members", response_model=MembersListResponse)
def list_members(
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> MembersListResponse:
    members = member_service.list_members(db, ctx)
    return MembersListResponse(
        count=len(members), data=[_serialize_member(m) for m in members]
    )


@router.post(
    "/{project_id}/members",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_member(
    body: MemberAdd,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> MemberResponse:
    """Add a user to the project. Project admin only; existing members return 409."""
    membership = member_service.add_member(db, ctx, body.user_id, body.role)
    return _serialize_member(membership)


@router.put("/{project_id}/members/{user_id}", response_model=MemberResponse)
def change_member_role(
    user_id: int,
    body: MemberRoleUpdate,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> MemberResponse:
    membership = member_service.change_role(db, ctx, user_id, body.role)
    return _serialize_member(membership)


@router.delete("/{project_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    user_id: int,
    db: Annotated[Session, Depends(get_db)],
    ctx: Annotated[ProjectContext, Depends(get_project_context)],
) -> Response:
    """Remove a member. The last admin of a project cannot be removed (409)."""
    member_service.remove_member(db, ctx, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
