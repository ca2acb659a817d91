"""TaskVisibilityControl ORM model. One override per (task, controller type, controller id)."""

from typing import Any

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint, true
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import AuditedModel


class TaskVisibilityControl(AuditedModel, Base):
    """Controller override scoped to controlled_student_ids. Table: task_visibility_control."""

    __tablename__ = "task_visibility_control"

    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("task.id", ondelete="CASCADE"), nullable=False
    )
    controller_type: Mapped[str] = mapped_column(String(16), nullable=False)
    controller_id: Mapped[str] = mapped_column(String, nullable=False)
    is_visible: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    controlled_student_ids: Mapped[list[str]] = mapped_column(
        JSONB, nullable=False, default=list, server_default="[]"
    )
    changed_by: Mapped[str] = mapped_column(String, nullable=False)
    changed_by_role: Mapped[str] = mapped_column(String(32), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    control_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONB, nullable=False, default=dict, server_default="{}"
    )

    __table_args__ = (
        UniqueConstraint(
            "task_id",
            "controller_type",
            "controller_id",
            name="uq_task_visibility_control_controller",
        ),
        Index(
            "ix_task_visibility_control_controller", "controller_type", "controller_id"
        ),
        Index(
            "ix_task_visibility_control_students",
            "controlled_student_ids",
            postgresql_using="gin",
        ),
    )
