"""Two-tier authorization: global Role/Permission gate and project-scoped role gate.

Decisions are pure functions over values resolved once per operation
(``GlobalRole`` and ``ProjectContext``). Storage is touched only by the
explicit resolvers ``load_global_role`` and ``get_project_role``, which always
read current state; nothing is cached across requests.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from taskboard.core.errors import (
    AccessDeniedError,
    DenialReason,
    InvalidInputError,
    MissingParameterError,
)
from taskboard.models import ProjectRole, Role, User
from taskboard.models.enums import GlobalRoleName, Permission, ProjectRoleName

# Project role sets used by the named policies.
ALL_PROJECT_ROLES: frozenset[ProjectRoleName] = frozenset(ProjectRoleName)
TASK_CREATE_ROLES: frozenset[ProjectRoleName] = frozenset(
    {ProjectRoleName.ADMIN, ProjectRoleName.MANAGER, ProjectRoleName.CONTRIBUTOR}
)
TASK_MANAGE_ROLES: frozenset[ProjectRoleName] = frozenset(
    {ProjectRoleName.ADMIN, ProjectRoleName.MANAGER}
)
PROJECT_ADMIN_ROLES: frozenset[ProjectRoleName] = frozenset({ProjectRoleName.ADMIN})


@dataclass(frozen=True)
class GlobalRole:
    """Snapshot of a user's global role for one operation."""

    name: str
    permissions: frozenset[str]

    @classmethod
    def from_model(cls, role: Role) -> "GlobalRole":
        name = role.name.value if isinstance(role.name, GlobalRoleName) else str(role.name)
        return cls(name=name, permissions=frozenset(role.permissions or ()))


@dataclass(frozen=True)
class ProjectContext:
    """The caller of one project-scoped request and their role there (None = not a member)."""

    project_id: int
    user_id: int
    role: ProjectRoleName | None


def _perm_value(permission: Permission | str) -> str:
    return permission.value if isinstance(permission, Permission) else permission


# ---------------------------------------------------------------------------
# Global gate
# ---------------------------------------------------------------------------


def has_permission(role: GlobalRole | None, permission: Permission | str) -> bool:
    """True iff the role carries the permission."""
    if role is None:
        return False
    return _perm_value(permission) in role.permissions


def has_any_permission(role: GlobalRole | None, permissions: Iterable[Permission | str]) -> bool:
    return any(has_permission(role, p) for p in permissions)


def has_all_permissions(role: GlobalRole | None, permissions: Iterable[Permission | str]) -> bool:
    if role is None:
        return False
    return all(has_permission(role, p) for p in permissions)


def is_admin(role: GlobalRole | None) -> bool:
    return role is not None and role.name == GlobalRoleName.ADMIN.value


def _require_role(role: GlobalRole | None) -> GlobalRole:
    if role is None:
        raise AccessDeniedError(
            "Access denied. No role assigned.", reason=DenialReason.NO_ROLE_ASSIGNED
        )
    return role


def require_permission(role: GlobalRole | None, permission: Permission | str) -> GlobalRole:
    """Raise AccessDeniedError unless the role carries the permission."""
    role = _require_role(role)
    if not has_permission(role, permission):
        raise AccessDeniedError(
            f"Access denied. Required permission: {_perm_value(permission)}",
            reason=DenialReason.FORBIDDEN,
        )
    return role


def require_any_permission(
    role: GlobalRole | None, permissions: Iterable[Permission | str]
) -> GlobalRole:
    role = _require_role(role)
    wanted = [_perm_value(p) for p in permissions]
    if not has_any_permission(role, wanted):
        raise AccessDeniedError(
            f"Access denied. Required one of: {', '.join(wanted)}",
            reason=DenialReason.FORBIDDEN,
        )
    return role


def require_all_permissions(
    role: GlobalRole | None, permissions: Iterable[Permission | str]
) -> GlobalRole:
    role = _require_role(role)
    wanted = [_perm_value(p) for p in permissions]
    if not has_all_permissions(role, wanted):
        raise AccessDeniedError(
            f"Access denied. Required all of: {', '.join(wanted)}",
            reason=DenialReason.FORBIDDEN,
        )
    return role


def require_admin(role: GlobalRole | None) -> GlobalRole:
    role = _require_role(role)
    if not is_admin(role):
        raise AccessDeniedError(
            "Access denied. Admin role required.", reason=DenialReason.FORBIDDEN
        )
    return role


def load_global_role(db: Session, user_id: int) -> GlobalRole | None:
    """Read the user's current global role. None when the user or their role is missing."""
    user = db.get(User, user_id)
    if user is None or user.role is None:
        return None
    return GlobalRole.from_model(user.role)


# ---------------------------------------------------------------------------
# Project gate
# ---------------------------------------------------------------------------


def check_project_role(
    role: ProjectRoleName | None, allowed: Iterable[ProjectRoleName]
) -> bool:
    """Generic membership-in-set check; all four roles may read."""
    return role is not None and role in frozenset(allowed)


def is_project_admin(role: ProjectRoleName | None) -> bool:
    return check_project_role(role, PROJECT_ADMIN_ROLES)


def can_manage_tasks(role: ProjectRoleName | None) -> bool:
    """Delete and destructive reassignment: admin or manager."""
    return check_project_role(role, TASK_MANAGE_ROLES)


def can_create_tasks(role: ProjectRoleName | None) -> bool:
    """Create, move and reorder: admin, manager or contributor."""
    return check_project_role(role, TASK_CREATE_ROLES)


def can_update_task(
    role: ProjectRoleName | None, caller_id: int, assignee_id: int | None
) -> bool:
    """
    Ownership rule for task updates, evaluated against the task's current assignee.

    admin/manager: always. contributor: only when they are the assignee. viewer: never.
    """
    if can_manage_tasks(role):
        return True
    if role == ProjectRoleName.CONTRIBUTOR:
        return assignee_id is not None and assignee_id == caller_id
    return False


def _describe_roles(allowed: Iterable[ProjectRoleName]) -> str:
    ordered = [r.value for r in ProjectRoleName if r in frozenset(allowed)]
    return " or ".join(ordered)


def require_project_role(
    context: ProjectContext, allowed: Iterable[ProjectRoleName]
) -> ProjectRoleName:
    """Raise AccessDeniedError unless the caller is a member with one of the allowed roles."""
    allowed = frozenset(allowed)
    if context.role is None:
        raise AccessDeniedError(
            "Access denied. You are not a member of this project.",
            reason=DenialReason.NOT_A_MEMBER,
        )
    if context.role not in allowed:
        raise AccessDeniedError(
            f"Access denied. Required role: {_describe_roles(allowed)}",
            reason=DenialReason.FORBIDDEN,
        )
    return context.role


def require_task_update(context: ProjectContext, assignee_id: int | None) -> ProjectRoleName:
    """Apply the ownership rule; distinguishes non-members, viewers and non-assignees."""
    role = require_project_role(context, TASK_CREATE_ROLES)
    if not can_update_task(role, context.user_id, assignee_id):
        raise AccessDeniedError(
            "You can only update tasks assigned to you",
            reason=DenialReason.NOT_ASSIGNEE,
        )
    return role


def get_project_role(db: Session, user_id: int, project_id: int) -> ProjectRoleName | None:
    """Read the caller's current role in the project (None when not a member)."""
    membership = (
        db.query(ProjectRole)
        .filter(ProjectRole.project_id == project_id, ProjectRole.user_id == user_id)
        .first()
    )
    return membership.role if membership else None


def resolve_project_context(db: Session, user_id: int, project_id: int) -> ProjectContext:
    return ProjectContext(
        project_id=project_id,
        user_id=user_id,
        role=get_project_role(db, user_id, project_id),
    )


def resolve_project_id(*candidates: object) -> int:
    """
    Pick the project id from request sources in precedence order (path, body, query).

    The first non-empty candidate wins. No candidate raises MissingParameterError;
    a candidate that is not an integer raises InvalidInputError.
    """
    for candidate in candidates:
        if candidate is None:
            continue
        if isinstance(candidate, str) and not candidate.strip():
            continue
        if isinstance(candidate, bool):
            raise InvalidInputError("Project ID must be an integer")
        try:
            return int(str(candidate).strip()) if isinstance(candidate, str) else int(candidate)
        except (TypeError, ValueError):
            raise InvalidInputError("Project ID must be an integer") from None
    raise MissingParameterError("Project ID is required")
