"""SQLAlchemy ORM models."""

from taskboard.models.activity import Activity
from taskboard.models.base import Base
from taskboard.models.project import Project
from taskboard.models.project_role import ProjectRole
from taskboard.models.role import Role
from taskboard.models.support_request import SupportRequest
from taskboard.models.task import Subtask, Task
from taskboard.models.user import User

__all__ = [
    "Activity",
    "Base",
    "Project",
    "ProjectRole",
    "Role",
    "Subtask",
    "SupportRequest",
    "Task",
    "User",
]
