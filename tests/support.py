"""Shared fixtures for service and API tests: in-memory SQLite plus small factories."""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from taskboard.models import Base, Project, ProjectRole, Role, Task, User
from taskboard.models.enums import GlobalRoleName, ProjectRoleName, TaskPriority, TaskStatus
from taskboard.services.authorization import ProjectContext, resolve_project_context
from taskboard.services.roles import seed_default_roles


def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:
    # SQLite leaves foreign keys unchecked unless asked, per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with every table created; one shared connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_session() -> Session:
    db = make_session_factory()()
    seed_default_roles(db)
    return db


def make_user(
    db: Session,
    name: str,
    role: GlobalRoleName | None = GlobalRoleName.USER,
) -> User:
    role_id = None
    if role is not None:
        role_id = db.query(Role).filter(Role.name == role).one().id
    user = User(
        name=name,
        email=f"{name.lower().replace(' ', '.')}@example.com",
        password_hash="not-a-real-hash",
        role_id=role_id,
    )
    db.add(user)
    db.commit()
    return user


def make_project(db: Session, creator: User, key: str = "ABC", name: str = "Alpha") -> Project:
    project = Project(name=name, key=key, created_by_id=creator.id)
    db.add(project)
    db.flush()
    db.add(ProjectRole(project_id=project.id, user_id=creator.id, role=ProjectRoleName.ADMIN))
    db.commit()
    return project


def add_member(db: Session, project: Project, user: User, role: ProjectRoleName) -> ProjectRole:
    membership = ProjectRole(project_id=project.id, user_id=user.id, role=role)
    db.add(membership)
    db.commit()
    return membership


def make_task(
    db: Session,
    project: Project,
    creator: User,
    title: str = "Task",
    status: TaskStatus = TaskStatus.TODO,
    order: int = 0,
    assignee: User | None = None,
    priority: TaskPriority = TaskPriority.MEDIUM,
    due_date=None,
) -> Task:
    task = Task(
        project_id=project.id,
        title=title,
        status=status,
        priority=priority,
        order=order,
        created_by_id=creator.id,
        assigned_to_id=assignee.id if assignee else None,
        due_date=due_date,
    )
    db.add(task)
    db.commit()
    return task


def context(db: Session, user: User, project: Project) -> ProjectContext:
    return resolve_project_context(db, user.id, project.id)
