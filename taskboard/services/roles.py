"""Global role registry: CRUD, assignment to users and default seeding."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from taskboard.core.errors import ConflictError, InvariantViolationError, NotFoundError
from taskboard.models import Role, User
from taskboard.models.enums import GlobalRoleName, Permission
from taskboard.schemas.roles import RoleCreate, RoleUpdate
from taskboard.services.authorization import GlobalRole, require_admin, require_permission

logger = logging.getLogger(__name__)

DEFAULT_ROLES: tuple[dict, ...] = (
    {
        "name": GlobalRoleName.ADMIN,
        "permissions": [Permission.READ, Permission.WRITE, Permission.DELETE],
        "description": "Administrator with full access",
    },
    {
        "name": GlobalRoleName.USER,
        "permissions": [Permission.READ],
        "description": "Regular user with read-only access",
    },
)


def normalize_permissions(permissions: list[Permission | str]) -> list[str]:
    """De-duplicate and sort; values are already restricted to read/write/delete."""
    return sorted({p.value if isinstance(p, Permission) else p for p in permissions})


def _load_role(db: Session, role_id: int) -> Role:
    role = db.get(Role, role_id)
    if role is None:
        raise NotFoundError("Role not found")
    return role


def list_roles(db: Session, caller_role: GlobalRole | None) -> list[Role]:
    require_permission(caller_role, Permission.READ)
    return db.query(Role).order_by(Role.id.asc()).all()


def get_role(db: Session, caller_role: GlobalRole | None, role_id: int) -> Role:
    require_permission(caller_role, Permission.READ)
    return _load_role(db, role_id)


def create_role(db: Session, caller_role: GlobalRole | None, data: RoleCreate) -> Role:
    require_admin(caller_role)
    if db.query(Role.id).filter(Role.name == data.name).first() is not None:
        raise ConflictError("Role already exists")
    role = Role(
        name=data.name,
        permissions=normalize_permissions(data.permissions),
        description=data.description,
    )
    db.add(role)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Role already exists") from e
    db.refresh(role)
    logger.info("Role created", extra={"role": role.name.value})
    return role


def update_role(
    db: Session, caller_role: GlobalRole | None, role_id: int, data: RoleUpdate
) -> Role:
    """Replace permissions and/or description. Admin only."""
    require_admin(caller_role)
    role = _load_role(db, role_id)
    fields = data.model_dump(exclude_unset=True)
    if fields.get("permissions") is not None:
        role.permissions = normalize_permissions(fields["permissions"])
    if "description" in fields:
        role.description = fields["description"]
    db.commit()
    db.refresh(role)
    return role


def delete_role(db: Session, caller_role: GlobalRole | None, role_id: int) -> None:
    """Admin only. A role still referenced by users cannot be deleted."""
    require_admin(caller_role)
    role = _load_role(db, role_id)
    in_use = db.query(User).filter(User.role_id == role.id).count()
    if in_use > 0:
        raise InvariantViolationError(
            f"Cannot delete role. {in_use} user(s) are assigned this role."
        )
    db.delete(role)
    db.commit()
    logger.info("Role deleted", extra={"role_id": role_id})


def assign_role(
    db: Session, caller_role: GlobalRole | None, role_id: int, user_id: int
) -> tuple[Role, User]:
    """Give a user this role. The previous role is replaced, never accumulated."""
    require_admin(caller_role)
    role = _load_role(db, role_id)
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    user.role_id = role.id
    db.commit()
    user = db.query(User).options(joinedload(User.role)).filter(User.id == user_id).one()
    logger.info("Role assigned", extra={"role": role.name.value, "user_id": user_id})
    return role, user


def seed_default_roles(db: Session, reset: bool = False) -> int:
    """
    Create the 'admin' and 'user' roles when missing. Returns how many were created.

    With reset=True the permissions and description of existing default roles are
    restored as well. Roles are never dropped, since users keep references to them.
    """
    created = 0
    for default in DEFAULT_ROLES:
        role = db.query(Role).filter(Role.name == default["name"]).first()
        if role is None:
            db.add(
                Role(
                    name=default["name"],
                    permissions=normalize_permissions(default["permissions"]),
                    description=default["description"],
                )
            )
            created += 1
        elif reset:
            role.permissions = normalize_permissions(default["permissions"])
            role.description = default["description"]
    db.commit()
    if created:
        logger.info("Seeded %s default role(s)", created)
    return created
