"""API v1 routes."""

from fastapi import APIRouter

from taskboard.api.v1 import (
    auth,
    dashboard,
    health,
    profile,
    projects,
    roles,
    support,
    tasks,
    users,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(profile.router, prefix="/profile", tags=["profile"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(roles.router, prefix="/roles", tags=["roles"])
router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(tasks.router, prefix="/projects/{project_id}/tasks", tags=["tasks"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
router.include_router(support.router, prefix="/support", tags=["support"])
