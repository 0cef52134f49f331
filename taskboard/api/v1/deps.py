"""Shared route dependencies: caller's global role and project context."""

import json
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from taskboard.api.v1.auth import get_current_user
from taskboard.core.database import get_db
from taskboard.schemas.auth import CurrentUser
from taskboard.services.authorization import (
    GlobalRole,
    ProjectContext,
    load_global_role,
    resolve_project_context,
    resolve_project_id,
)


def get_global_role(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> GlobalRole | None:
    """Dependency: the caller's current global role (None when unassigned)."""
    return load_global_role(db, current_user.id)


async def get_body_project_id(request: Request) -> object:
    """Dependency: project_id from a JSON request body, if there is one."""
    body = await request.body()
    if not body:
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    return payload.get("project_id") if isinstance(payload, dict) else None


def get_project_context(
    project_id: str,
    request: Request,
    body_project_id: Annotated[object, Depends(get_body_project_id)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProjectContext:
    """
    Dependency: resolve the project id (path, then JSON body, then query) and the
    caller's role in that project, read fresh for this request.
    """
    resolved = resolve_project_id(
        project_id,
        body_project_id,
        request.query_params.get("project_id"),
    )
    return resolve_project_context(db, current_user.id, resolved)
