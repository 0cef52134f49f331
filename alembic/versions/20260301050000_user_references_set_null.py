"""Keep projects, tasks and activity when the user they reference is deleted.

Revision ID: 20260301050000
Revises: 20260301040000
Create Date: 2026-03-01

"""
from typing import Sequence, Union

from alembic import op

revision: str = "20260301050000"
down_revision: Union[str, None] = "20260301040000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# (table, column, was nullable before this revision)
USER_REFERENCES = (
    ("projects", "created_by_id", False),
    ("tasks", "created_by_id", False),
    ("tasks", "assigned_to_id", True),
    ("activities", "user_id", False),
    ("support_requests", "resolved_by_id", True),
)


def _fk_name(table: str, column: str) -> str:
    # PostgreSQL's default name for the unnamed constraints of the earlier revisions.
    return f"{table}_{column}_fkey"


def upgrade() -> None:
    for table, column, _ in USER_REFERENCES:
        op.alter_column(table, column, nullable=True)
        op.drop_constraint(_fk_name(table, column), table, type_="foreignkey")
        op.create_foreign_key(
            _fk_name(table, column), table, "users", [column], ["id"], ondelete="SET NULL"
        )


def downgrade() -> None:
    for table, column, nullable in USER_REFERENCES:
        op.drop_constraint(_fk_name(table, column), table, type_="foreignkey")
        op.create_foreign_key(_fk_name(table, column), table, "users", [column], ["id"])
        if not nullable:
            op.alter_column(table, column, nullable=False)
