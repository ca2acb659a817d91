"""Task assignment repository: one row per (task, student), reactivated on reassign."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from app.application.dtos.actor import Actor
from app.application.dtos.task_assignment import (
    AssignmentContext,
    AssignmentOutcome,
    TaskAssignmentResult,
)
from app.infrastructure.persistence.models.task_assignment import TaskAssignment
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


def _to_result(a: TaskAssignment) -> TaskAssignmentResult:
    """Map TaskAssignment ORM to TaskAssignmentResult DTO."""
    return TaskAssignmentResult(
        id=a.id,
        task_id=a.task_id,
        student_id=a.student_id,
        assigned_by=a.assigned_by,
        assigned_by_role=a.assigned_by_role,
        source=a.source,
        school_id=a.school_id,
        class_id=a.class_id,
        is_active=a.is_active,
        assigned_at=a.assigned_at,
        deactivated_at=a.deactivated_at,
        deactivated_by=a.deactivated_by,
        deactivation_reason=a.deactivation_reason,
    )


class TaskAssignmentRepository(BaseRepository[TaskAssignment]):
    """Task assignment repository. Implements ITaskAssignmentRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, TaskAssignment)

    async def ensure_active(
        self,
        task_id: str,
        student_id: str,
        actor: Actor,
        context: AssignmentContext,
    ) -> tuple[TaskAssignmentResult, AssignmentOutcome]:
        """Create, reuse, or reactivate the row for (task_id, student_id).

        The insert is ON CONFLICT DO NOTHING on the unique pair, so two
        concurrent assigns of the same student never produce two rows. Runs
        in a savepoint so a failure leaves the outer transaction usable.
        """
        async with self.db.begin_nested():
            return await self._ensure_active(task_id, student_id, actor, context)

    async def _ensure_active(
        self,
        task_id: str,
        student_id: str,
        actor: Actor,
        context: AssignmentContext,
    ) -> tuple[TaskAssignmentResult, AssignmentOutcome]:
        stmt = (
            insert(TaskAssignment)
            .values(
                id=generate_cuid(),
                task_id=task_id,
                student_id=student_id,
                assigned_by=actor.user_id,
                assigned_by_role=actor.role,
                source=context.source.value,
                school_id=context.school_id,
                class_id=context.class_id,
                is_active=True,
            )
            .on_conflict_do_nothing(constraint="uq_task_assignment_task_student")
            .returning(TaskAssignment.id)
        )
        inserted_id = (await self.db.execute(stmt)).scalar_one_or_none()

        result = await self.db.execute(
            select(TaskAssignment)
            .where(
                TaskAssignment.task_id == task_id,
                TaskAssignment.student_id == student_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one()
        if inserted_id is not None:
            return _to_result(row), AssignmentOutcome.CREATED
        if row.is_active:
            return _to_result(row), AssignmentOutcome.REUSED

        row.is_active = True
        row.assigned_by = actor.user_id
        row.assigned_by_role = actor.role
        row.source = context.source.value
        row.school_id = context.school_id or row.school_id
        row.class_id = context.class_id or row.class_id
        row.assigned_at = func.now()
        row.deactivated_at = None
        row.deactivated_by = None
        row.deactivation_reason = None
        await self.db.flush()
        await self.db.refresh(row)
        logger.debug("Reactivated assignment task=%s student=%s", task_id, student_id)
        return _to_result(row), AssignmentOutcome.REACTIVATED

    async def deactivate(
        self,
        task_id: str,
        student_ids: Sequence[str] | None,
        deactivated_by: str,
        reason: str,
    ) -> int:
        """Flip active rows to inactive; student_ids None means every row of the task."""
        stmt = update(TaskAssignment).where(
            TaskAssignment.task_id == task_id, TaskAssignment.is_active.is_(True)
        )
        if student_ids is not None:
            if not student_ids:
                return 0
            stmt = stmt.where(TaskAssignment.student_id.in_(list(student_ids)))
        result = await self.db.execute(
            stmt.values(
                is_active=False,
                deactivated_at=func.now(),
                deactivated_by=deactivated_by,
                deactivation_reason=reason,
                updated_at=func.now(),
            ).execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def list_for_task(
        self,
        task_id: str,
        include_inactive: bool = False,
        school_id: str | None = None,
        class_id: str | None = None,
    ) -> list[TaskAssignmentResult]:
        """Return assignment rows for a task, newest first."""
        stmt = select(TaskAssignment).where(TaskAssignment.task_id == task_id)
        if not include_inactive:
            stmt = stmt.where(TaskAssignment.is_active.is_(True))
        if school_id:
            stmt = stmt.where(TaskAssignment.school_id == school_id)
        if class_id:
            stmt = stmt.where(TaskAssignment.class_id == class_id)
        result = await self.db.execute(stmt.order_by(TaskAssignment.assigned_at.desc()))
        return [_to_result(a) for a in result.scalars().all()]

    async def list_for_student(
        self, student_id: str, include_inactive: bool = False
    ) -> list[TaskAssignmentResult]:
        """Return assignment rows for a student, newest first."""
        stmt = select(TaskAssignment).where(TaskAssignment.student_id == student_id)
        if not include_inactive:
            stmt = stmt.where(TaskAssignment.is_active.is_(True))
        result = await self.db.execute(stmt.order_by(TaskAssignment.assigned_at.desc()))
        return [_to_result(a) for a in result.scalars().all()]
