"""SQLAlchemy declarative Base and shared column helpers."""

import enum
from datetime import datetime, timezone

from sqlalchemy import JSON, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# JSONB on PostgreSQL, plain JSON elsewhere (e.g. SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Timezone-aware current time used as the Python-side default for timestamps."""
    return datetime.now(timezone.utc)


def enum_type(enum_cls: type[enum.Enum]) -> SQLEnum:
    """Store an enum by value in a constrained VARCHAR (no native DB enum type)."""
    return SQLEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        create_constraint=True,
        length=32,
        validate_strings=True,
        name=f"{enum_cls.__name__.lower()}_enum",
    )


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass
