"""Assignment materializer: durable rows for explicitly enumerated recipients only.

Strategies other than ``specific`` are resolved at read time by the criteria
evaluator and never write rows here, so a global task costs no per-student
writes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from app.application.dtos.actor import Actor
from app.application.dtos.task import TaskResult
from app.application.dtos.task_assignment import (
    AssignmentContext,
    AssignmentOutcome,
    DeactivationResult,
    ItemFailure,
    MaterializationResult,
    TaskAssignmentResult,
)
from app.application.interfaces.repositories import ITaskAssignmentRepository
from app.domain.enums import AssignmentStrategy

logger = logging.getLogger(__name__)

DEFAULT_DEACTIVATION_REASON = "Manual deactivation"


class AssignmentMaterializer:
    """Create, reuse, reactivate, and deactivate assignment rows for specific tasks."""

    def __init__(self, assignment_repo: ITaskAssignmentRepository) -> None:
        self.assignment_repo = assignment_repo

    @staticmethod
    def is_materialized(task: TaskResult) -> bool:
        return task.assignment_strategy == AssignmentStrategy.SPECIFIC

    async def materialize(
        self,
        task: TaskResult,
        actor: Actor,
        context: AssignmentContext | None = None,
        student_ids: Sequence[str] | None = None,
    ) -> MaterializationResult:
        """Ensure one active row per targeted student.

        Every listed student gets a row. A failure for one student is
        recorded and the loop continues; the call is safe to retry.

        Args:
            task: Task being targeted.
            actor: Caller recorded as assigned_by.
            context: Source and school/class recorded on new rows.
            student_ids: Students to materialize; defaults to the task's specific_user_ids.

        Returns:
            MaterializationResult with per-outcome counts and failures.
        """
        if not self.is_materialized(task):
            return MaterializationResult(
                task_id=task.id,
                assignment_type="strategy-based",
                message=(
                    f"Task uses {task.assignment_strategy.value} assignment; "
                    "students are resolved dynamically"
                ),
            )

        context = context or AssignmentContext()
        requested = (
            list(student_ids)
            if student_ids is not None
            else list(task.target_criteria.specific_user_ids)
        )

        assignments: list[TaskAssignmentResult] = []
        counts = {outcome: 0 for outcome in AssignmentOutcome}
        failures: list[ItemFailure] = []
        for student_id in requested:
            try:
                row, outcome = await self.assignment_repo.ensure_active(
                    task.id, student_id, actor, context
                )
            except Exception as e:
                logger.exception(
                    "Assignment failed for task %s student %s", task.id, student_id
                )
                failures.append(ItemFailure(item_id=student_id, error=str(e)))
                continue
            assignments.append(row)
            counts[outcome] += 1

        logger.info(
            "Materialized task %s: created=%d reused=%d reactivated=%d failed=%d",
            task.id,
            counts[AssignmentOutcome.CREATED],
            counts[AssignmentOutcome.REUSED],
            counts[AssignmentOutcome.REACTIVATED],
            len(failures),
        )
        return MaterializationResult(
            task_id=task.id,
            assignment_type="specific",
            message=f"Task assigned to {len(assignments)} students",
            assignments=assignments,
            created_count=counts[AssignmentOutcome.CREATED],
            reused_count=counts[AssignmentOutcome.REUSED],
            reactivated_count=counts[AssignmentOutcome.REACTIVATED],
            failures=failures,
        )

    async def unassign(
        self,
        task: TaskResult,
        student_ids: Sequence[str] | None,
        actor: Actor,
        reason: str | None = None,
    ) -> DeactivationResult:
        """Deactivate active rows for the students (all students when None). Rows are kept."""
        if not self.is_materialized(task):
            return DeactivationResult(
                task_id=task.id,
                deactivated_count=0,
                message=(
                    f"Task uses {task.assignment_strategy.value} assignment; "
                    "there are no materialized assignments to deactivate"
                ),
            )
        count = await self.assignment_repo.deactivate(
            task.id,
            list(student_ids) if student_ids is not None else None,
            deactivated_by=actor.user_id,
            reason=reason or DEFAULT_DEACTIVATION_REASON,
        )
        logger.info("Deactivated %d assignments for task %s", count, task.id)
        return DeactivationResult(
            task_id=task.id,
            deactivated_count=count,
            message=f"Deactivated {count} assignments",
        )
