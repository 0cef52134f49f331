"""ORM model for global roles (system-wide permission bundles)."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship

from taskboard.models.base import Base, JSONType, enum_type, utcnow
from taskboard.models.enums import GlobalRoleName


class Role(Base):
    """
    Global role: unique name ('admin' | 'user') plus a permission set.

    permissions is a JSON list of values from Permission ('read', 'write', 'delete'),
    stored de-duplicated and sorted.
    """

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(enum_type(GlobalRoleName), nullable=False, unique=True, index=True)
    permissions = Column(JSONType, nullable=False, default=list)
    description = Column(Text, nullable=True)
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

    users = relationship("User", back_populates="role")
