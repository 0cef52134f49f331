"""ORM model for project membership (one project-scoped role per user per project)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import relationship

from taskboard.models.base import Base, enum_type, utcnow
from taskboard.models.enums import ProjectRoleName


class ProjectRole(Base):
    """(project, user, role) with role in admin | manager | contributor | viewer."""

    __tablename__ = "project_roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(enum_type(ProjectRoleName), nullable=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    project = relationship("Project")
    user = relationship("User", back_populates="project_roles")

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_roles_project_user"),
    )
