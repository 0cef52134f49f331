"""ORM model for the append-only project activity log."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Text, func
from sqlalchemy.orm import relationship

from taskboard.models.base import Base, JSONType, enum_type, utcnow
from taskboard.models.enums import ActivityAction, EntityType


class Activity(Base):
    """
    Immutable audit record of a state-changing action on a project.

    Rows are only ever inserted, and removed only by the project delete cascade.
    """

    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    # Null once the acting user has been deleted.
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(enum_type(ActivityAction), nullable=False)
    description = Column(Text, nullable=False)
    entity_type = Column(enum_type(EntityType), nullable=False, default=EntityType.TASK)
    entity_id = Column(Integer, nullable=True)
    # "metadata" is reserved on declarative classes.
    details = Column("metadata", JSONType, nullable=False, default=dict)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    user = relationship("User")

    __table_args__ = (
        Index("ix_activities_project_created", "project_id", "created_at"),
        Index("ix_activities_user_created", "user_id", "created_at"),
    )
