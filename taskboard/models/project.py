"""ORM model for projects."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from taskboard.models.base import Base, utcnow

PROJECT_KEY_MAX_LEN = 10


class Project(Base):
    """
    Project with a unique uppercase alphanumeric key (<= 10 chars).

    Keys are normalized to uppercase on write, so uniqueness is case-insensitive.
    """

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    key = Column(String(PROJECT_KEY_MAX_LEN), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    created_by_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    is_active = Column(Boolean, nullable=False, default=True)
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

    created_by = relationship("User", foreign_keys=[created_by_id])
