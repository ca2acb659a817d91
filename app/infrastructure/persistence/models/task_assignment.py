"""TaskAssignment ORM model. Materialized recipients of specific-strategy tasks."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AuditedModel


class TaskAssignment(AuditedModel, Base):
    """One row per (task, student). Deactivated instead of deleted; reactivated on reassign."""

    __tablename__ = "task_assignment"

    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("task.id", ondelete="CASCADE"), nullable=False
    )
    student_id: Mapped[str] = mapped_column(String, nullable=False)
    assigned_by: Mapped[str] = mapped_column(String, nullable=False)
    assigned_by_role: Mapped[str] = mapped_column(String(32), nullable=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    school_id: Mapped[str | None] = mapped_column(String, nullable=True)
    class_id: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    deactivated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    deactivated_by: Mapped[str | None] = mapped_column(String, nullable=True)
    deactivation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("task_id", "student_id", name="uq_task_assignment_task_student"),
        Index("ix_task_assignment_task_active", "task_id", "is_active"),
        Index("ix_task_assignment_student_active", "student_id", "is_active"),
    )
