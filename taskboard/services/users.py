"""Identity store: registration, login, own profile and permission-gated user management."""

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from taskboard.core.errors import (
    ConflictError,
    InvalidInputError,
    InvariantViolationError,
    NotFoundError,
)
from taskboard.core.security import hash_password, verify_password
from taskboard.models import Activity, Project, ProjectRole, Role, SupportRequest, Task, User
from taskboard.models.enums import GlobalRoleName, Permission, ProjectRoleName
from taskboard.schemas.auth import ProfileUpdate, RegisterRequest, UserCreate, UserUpdate
from taskboard.services.authorization import GlobalRole, require_permission

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "Email already exists"

# Rows that outlive a deleted user; the reference is cleared instead.
_USER_REFERENCES = (
    (Project, Project.created_by_id),
    (Task, Task.created_by_id),
    (Task, Task.assigned_to_id),
    (Activity, Activity.user_id),
    (SupportRequest, SupportRequest.resolved_by_id),
)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _load_user(db: Session, user_id: int) -> User:
    user = db.query(User).options(joinedload(User.role)).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


def _email_taken(db: Session, email: str, exclude_user_id: int | None = None) -> bool:
    query = db.query(User.id).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def _commit_user(db: Session, user: User) -> User:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from e
    return _load_user(db, user.id)


def _default_role(db: Session) -> Role:
    role = db.query(Role).filter(Role.name == GlobalRoleName.USER).first()
    if role is None:
        raise NotFoundError("Default user role not found. Please seed roles first.")
    return role


def register_user(db: Session, data: RegisterRequest) -> User:
    """Self-service sign up. New accounts get the 'user' global role."""
    email = normalize_email(data.email)
    if _email_taken(db, email):
        raise ConflictError("User already exists")
    user = User(
        name=data.name,
        email=email,
        password_hash=hash_password(data.password),
        role_id=_default_role(db).id,
    )
    db.add(user)
    user = _commit_user(db, user)
    logger.info("User registered", extra={"user_id": user.id})
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    """Return the user for valid credentials, else None (same outcome for unknown email)."""
    user = (
        db.query(User)
        .options(joinedload(User.role))
        .filter(User.email == normalize_email(email))
        .first()
    )
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def get_profile(db: Session, user_id: int) -> User:
    return _load_user(db, user_id)


def update_profile(db: Session, user_id: int, data: ProfileUpdate) -> User:
    """Edit the caller's own name and/or picture URL."""
    user = _load_user(db, user_id)
    fields = data.model_dump(exclude_unset=True)
    if fields.get("name") is not None:
        name = fields["name"].strip()
        if not name:
            raise InvalidInputError("Name must not be blank.")
        user.name = name
    if "profile_picture" in fields:
        user.profile_picture = fields["profile_picture"] or None
    return _commit_user(db, user)


def clear_profile_picture(db: Session, user_id: int) -> User:
    user = _load_user(db, user_id)
    user.profile_picture = None
    return _commit_user(db, user)


def list_users(db: Session, caller_role: GlobalRole | None) -> list[User]:
    """All users, newest first. Requires 'read'."""
    require_permission(caller_role, Permission.READ)
    return (
        db.query(User)
        .options(joinedload(User.role))
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )


def get_user(db: Session, caller_role: GlobalRole | None, user_id: int) -> User:
    require_permission(caller_role, Permission.READ)
    return _load_user(db, user_id)


def create_user(db: Session, caller_role: GlobalRole | None, data: UserCreate) -> User:
    """Create an account on someone's behalf. Requires 'write'."""
    require_permission(caller_role, Permission.WRITE)
    email = normalize_email(data.email)
    if _email_taken(db, email):
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
    if data.role_id is not None:
        role = db.get(Role, data.role_id)
        if role is None:
            raise NotFoundError("Role not found")
    else:
        role = _default_role(db)
    user = User(
        name=data.name,
        email=email,
        password_hash=hash_password(data.password),
        role_id=role.id,
    )
    db.add(user)
    user = _commit_user(db, user)
    logger.info("User created", extra={"user_id": user.id})
    return user


def update_user(
    db: Session, caller_role: GlobalRole | None, user_id: int, data: UserUpdate
) -> User:
    """Edit name, email or picture of any user. Requires 'write'."""
    require_permission(caller_role, Permission.WRITE)
    user = _load_user(db, user_id)
    fields = data.model_dump(exclude_unset=True)
    if fields.get("name") is not None:
        name = fields["name"].strip()
        if not name:
            raise InvalidInputError("Name must not be blank.")
        user.name = name
    if fields.get("email") is not None:
        email = normalize_email(fields["email"])
        if _email_taken(db, email, exclude_user_id=user.id):
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
        user.email = email
    if "profile_picture" in fields:
        user.profile_picture = fields["profile_picture"] or None
    return _commit_user(db, user)


def _sole_admin_projects(db: Session, user_id: int) -> list[int]:
    """Projects where this user is the only admin."""
    admin_projects = [
        row.project_id
        for row in db.query(ProjectRole.project_id).filter(
            ProjectRole.user_id == user_id, ProjectRole.role == ProjectRoleName.ADMIN
        )
    ]
    if not admin_projects:
        return []
    counts = (
        db.query(ProjectRole.project_id, func.count(ProjectRole.id))
        .filter(
            ProjectRole.project_id.in_(admin_projects),
            ProjectRole.role == ProjectRoleName.ADMIN,
        )
        .group_by(ProjectRole.project_id)
        .all()
    )
    return [project_id for project_id, count in counts if count <= 1]


def delete_user(db: Session, caller_role: GlobalRole | None, user_id: int) -> None:
    """
    Delete a user. Requires 'delete'.

    Memberships and support requests go with the account. Projects, tasks, activity
    and decided support requests stay, with their reference to the user cleared.
    A user who is the last admin of a project cannot be deleted.
    """
    require_permission(caller_role, Permission.DELETE)
    user = _load_user(db, user_id)

    blocked = _sole_admin_projects(db, user.id)
    if blocked:
        raise InvariantViolationError(
            f"User is the last admin of {len(blocked)} project(s); assign another admin first"
        )

    try:
        db.query(ProjectRole).filter(ProjectRole.user_id == user.id).delete(
            synchronize_session=False
        )
        db.query(SupportRequest).filter(SupportRequest.user_id == user.id).delete(
            synchronize_session=False
        )
        for model, column in _USER_REFERENCES:
            db.query(model).filter(column == user.id).update(
                {column: None}, synchronize_session=False
            )
        db.delete(user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("User delete rolled back", extra={"user_id": user_id})
        raise
    logger.info("User deleted", extra={"user_id": user_id})
