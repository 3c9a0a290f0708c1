"""Create todo table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "todo",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("priority", sa.String(length=16), nullable=False, server_default="medium"),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_todo_user_id"), "todo", ["user_id"], unique=False)
    op.create_index("ix_todo_user_id_created_at", "todo", ["user_id", "created_at"], unique=False)
    op.create_index("ix_todo_user_id_status", "todo", ["user_id", "status"], unique=False)
    op.create_index("ix_todo_user_id_priority", "todo", ["user_id", "priority"], unique=False)
    op.create_index("ix_todo_due_date", "todo", ["due_date"], unique=False)
    op.create_index("ix_todo_is_archived", "todo", ["is_archived"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_todo_is_archived", table_name="todo")
    op.drop_index("ix_todo_due_date", table_name="todo")
    op.drop_index("ix_todo_user_id_priority", table_name="todo")
    op.drop_index("ix_todo_user_id_status", table_name="todo")
    op.drop_index("ix_todo_user_id_created_at", table_name="todo")
    op.drop_index(op.f("ix_todo_user_id"), table_name="todo")
    op.drop_table("todo")
