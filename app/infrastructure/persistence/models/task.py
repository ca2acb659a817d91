"""Task ORM model. Authoring data plus targeting and default visibility policy."""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AuditedModel, SoftDeleteMixin


class Task(AuditedModel, SoftDeleteMixin, Base):
    """Task targeted at students by assignment_strategy. Table: task.

    target_criteria and default_visibility are JSONB documents; candidate
    queries use containment (@>) on target_criteria.
    """

    __tablename__ = "task"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    sub_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    point_value: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="pending", server_default="pending"
    )
    created_by: Mapped[str] = mapped_column(String, nullable=False, index=True)
    creator_role: Mapped[str] = mapped_column(String(32), nullable=False)
    assignment_strategy: Mapped[str] = mapped_column(String(32), nullable=False)
    target_criteria: Mapped[dict[str, Any]] = mapped_column(
        JSONB, nullable=False, default=dict, server_default="{}"
    )
    default_visibility: Mapped[dict[str, Any]] = mapped_column(
        JSONB, nullable=False, default=dict, server_default="{}"
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    task_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONB, nullable=False, default=dict, server_default="{}"
    )

    __table_args__ = (
        Index("ix_task_strategy_live", "assignment_strategy", "is_deleted"),
        Index("ix_task_created_at", "created_at"),
        Index(
            "ix_task_target_criteria",
            "target_criteria",
            postgresql_using="gin",
            postgresql_ops={"target_criteria": "jsonb_path_ops"},
        ),
    )
