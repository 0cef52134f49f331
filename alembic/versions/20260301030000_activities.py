"""Append-only project activity log.

Revision ID: 20260301030000
Revises: 20260301020000
Create Date: 2026-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "20260301030000"
down_revision: Union[str, None] = "20260301020000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIONS = (
    "task_created",
    "task_updated",
    "task_deleted",
    "task_assigned",
    "task_status_changed",
    "task_moved",
    "member_added",
    "member_removed",
    "member_role_changed",
    "project_created",
    "project_updated",
    "subtask_completed",
    "subtask_created",
)


def upgrade() -> None:
    action_list = ", ".join(f"'{a}'" for a in ACTIONS)
    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False, server_default="task"),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(f"action IN ({action_list})", name="activityaction_enum"),
        sa.CheckConstraint(
            "entity_type IN ('task', 'project', 'member', 'subtask')", name="entitytype_enum"
        ),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_activities_project_created", "activities", ["project_id", "created_at"], unique=False
    )
    op.create_index(
        "ix_activities_user_created", "activities", ["user_id", "created_at"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_activities_user_created", table_name="activities")
    op.drop_index("ix_activities_project_created", table_name="activities")
    op.drop_table("activities")
