"""Closed enumerations shared by models, schemas and services."""

import enum


class Permission(str, enum.Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"


class GlobalRoleName(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class ProjectRoleName(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    CONTRIBUTOR = "contributor"
    VIEWER = "viewer"


class TaskStatus(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    IN_REVIEW = "in-review"
    DONE = "done"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ActivityAction(str, enum.Enum):
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_DELETED = "task_deleted"
    TASK_ASSIGNED = "task_assigned"
    TASK_STATUS_CHANGED = "task_status_changed"
    TASK_MOVED = "task_moved"
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    MEMBER_ROLE_CHANGED = "member_role_changed"
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    SUBTASK_COMPLETED = "subtask_completed"
    SUBTASK_CREATED = "subtask_created"


class EntityType(str, enum.Enum):
    TASK = "task"
    PROJECT = "project"
    MEMBER = "member"
    SUBTASK = "subtask"


class SupportStatus(str, enum.Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"
