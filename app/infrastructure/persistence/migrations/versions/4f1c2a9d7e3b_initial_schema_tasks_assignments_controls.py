"""Initial schema: task, task_assignment, task_visibility_control

Revision ID: 4f1c2a9d7e3b
Revises:
Create Date: 2026-10-19 09:12:41.508311

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "4f1c2a9d7e3b"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create task, task_assignment and task_visibility_control."""
    op.create_table(
        "task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("sub_category", sa.String(length=100), nullable=True),
        sa.Column("point_value", sa.Integer(), server_default="0", nullable=False),
        sa.Column("status", sa.String(length=32), server_default="pending", nullable=False),
        sa.Column("created_by", sa.String(), nullable=False),
        sa.Column("creator_role", sa.String(length=32), nullable=False),
        sa.Column("assignment_strategy", sa.String(length=32), nullable=False),
        sa.Column(
            "target_criteria",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default="{}",
            nullable=False,
        ),
        sa.Column(
            "default_visibility",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default="{}",
            nullable=False,
        ),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default="{}",
            nullable=False,
        ),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_task_category"), "task", ["category"], unique=False)
    op.create_index(op.f("ix_task_created_by"), "task", ["created_by"], unique=False)
    op.create_index(op.f("ix_task_is_deleted"), "task", ["is_deleted"], unique=False)
    op.create_index(
        "ix_task_strategy_live", "task", ["assignment_strategy", "is_deleted"], unique=False
    )
    op.create_index("ix_task_created_at", "task", ["created_at"], unique=False)
    op.create_index(
        "ix_task_target_criteria",
        "task",
        ["target_criteria"],
        unique=False,
        postgresql_using="gin",
        postgresql_ops={"target_criteria": "jsonb_path_ops"},
    )

    op.create_table(
        "task_assignment",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("student_id", sa.String(), nullable=False),
        sa.Column("assigned_by", sa.String(), nullable=False),
        sa.Column("assigned_by_role", sa.String(length=32), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("school_id", sa.String(), nullable=True),
        sa.Column("class_id", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column(
            "assigned_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("deactivated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deactivated_by", sa.String(), nullable=True),
        sa.Column("deactivation_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "task_id", "student_id", name="uq_task_assignment_task_student"
        ),
    )
    op.create_index(
        "ix_task_assignment_task_active",
        "task_assignment",
        ["task_id", "is_active"],
        unique=False,
    )
    op.create_index(
        "ix_task_assignment_student_active",
        "task_assignment",
        ["student_id", "is_active"],
        unique=False,
    )

    op.create_table(
        "task_visibility_control",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("controller_type", sa.String(length=16), nullable=False),
        sa.Column("controller_id", sa.String(), nullable=False),
        sa.Column("is_visible", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column(
            "controlled_student_ids",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default="[]",
            nullable=False,
        ),
        sa.Column("changed_by", sa.String(), nullable=False),
        sa.Column("changed_by_role", sa.String(length=32), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default="{}",
            nullable=False,
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "task_id",
            "controller_type",
            "controller_id",
            name="uq_task_visibility_control_controller",
        ),
    )
    op.create_index(
        "ix_task_visibility_control_controller",
        "task_visibility_control",
        ["controller_type", "controller_id"],
        unique=False,
    )
    op.create_index(
        "ix_task_visibility_control_students",
        "task_visibility_control",
        ["controlled_student_ids"],
        unique=False,
        postgresql_using="gin",
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("task_visibility_control")
    op.drop_table("task_assignment")
    op.drop_table("task")
