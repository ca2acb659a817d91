"""Task operations: authoring CRUD plus assign/unassign for specific tasks."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from app.application.dtos.actor import Actor
from app.application.dtos.task import Page, TaskCreate, TaskFilters, TaskResult, TaskUpdate
from app.application.dtos.task_assignment import (
    AssignmentContext,
    BulkAssignResult,
    DeactivationResult,
    ItemFailure,
    MaterializationResult,
    TaskAssignmentResult,
)
from app.application.interfaces.repositories import (
    ITaskAssignmentRepository,
    ITaskRepository,
)
from app.application.use_cases.tasks.assignment_materializer import (
    AssignmentMaterializer,
)
from app.application.use_cases.tasks.validation import require_id, require_student_ids
from app.domain.enums import ActorRole, AssignmentSource, TaskCategory, TaskStatus
from app.domain.exceptions import (
    ImmutableFieldException,
    ResourceNotFoundException,
    TaskVisibilityException,
    ValidationException,
)

logger = logging.getLogger(__name__)

_ROLE_SOURCES: dict[str, AssignmentSource] = {
    ActorRole.PARENT.value: AssignmentSource.PARENT,
    ActorRole.TEACHER.value: AssignmentSource.TEACHER,
    ActorRole.SCHOOL_ADMIN.value: AssignmentSource.SCHOOL,
    ActorRole.SYSTEM.value: AssignmentSource.SYSTEM,
}

_PLAIN_UPDATE_FIELDS = (
    "title",
    "description",
    "category",
    "sub_category",
    "point_value",
    "due_date",
    "status",
    "metadata",
)


def source_for(actor: Actor) -> AssignmentSource:
    """Assignment source implied by the actor's primary role."""
    return _ROLE_SOURCES.get(actor.role, AssignmentSource.ADMIN)


def _validate_category(category: str) -> None:
    if category not in TaskCategory.values():
        raise ValidationException(
            f"category must be one of: {', '.join(TaskCategory.values())}",
            field="category",
        )


def _validate_status(status: str) -> None:
    if status not in TaskStatus.values():
        raise ValidationException(
            f"status must be one of: {', '.join(TaskStatus.values())}",
            field="status",
        )


class TaskService:
    """Create, read, update, and soft-delete tasks; manage specific-task recipients.

    Targeting changes on specific tasks keep target_criteria.specific_user_ids
    and the materialized rows in step.
    """

    def __init__(
        self,
        task_repo: ITaskRepository,
        assignment_repo: ITaskAssignmentRepository,
        materializer: AssignmentMaterializer | None = None,
    ) -> None:
        self.task_repo = task_repo
        self.assignment_repo = assignment_repo
        self.materializer = materializer or AssignmentMaterializer(assignment_repo)

    async def create_task(
        self,
        data: TaskCreate,
        actor: Actor,
        context: AssignmentContext | None = None,
    ) -> tuple[TaskResult, MaterializationResult]:
        """Persist a task and materialize its assignments when the strategy requires it."""
        if not data.title or not data.title.strip():
            raise ValidationException("title is required", field="title")
        _validate_category(data.category)
        _validate_status(data.status)
        if data.point_value < 0:
            raise ValidationException("point_value must be >= 0", field="point_value")

        task = await self.task_repo.create_task(data, actor)
        logger.info(
            "Task %s created by %s (strategy=%s)",
            task.id,
            actor.user_id,
            task.assignment_strategy.value,
        )
        materialization = await self.materializer.materialize(
            task, actor, context or AssignmentContext(source=source_for(actor))
        )
        return task, materialization

    async def get_task(self, task_id: str) -> TaskResult:
        """Return a non-deleted task or raise ResourceNotFoundException."""
        require_id(task_id, "task_id")
        task = await self.task_repo.get_by_id(task_id)
        if task is None or task.is_deleted:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def list_tasks(self, filters: TaskFilters, page: Page) -> list[TaskResult]:
        """Return tasks matching filters, newest first."""
        return await self.task_repo.list_tasks(filters, skip=page.skip, limit=page.limit)

    async def update_task(
        self, task_id: str, update: TaskUpdate, actor: Actor
    ) -> TaskResult:
        """Apply a partial update. assignment_strategy cannot change."""
        task = await self.get_task(task_id)
        if (
            update.assignment_strategy is not None
            and update.assignment_strategy != task.assignment_strategy
        ):
            raise ImmutableFieldException("assignment_strategy")

        values: dict[str, Any] = {}
        for name in _PLAIN_UPDATE_FIELDS:
            value = getattr(update, name)
            if value is not None:
                values[name] = value
        if "title" in values and not str(values["title"]).strip():
            raise ValidationException("title must not be empty", field="title")
        if "category" in values:
            _validate_category(values["category"])
        if "status" in values:
            _validate_status(values["status"])
        if update.target_criteria is not None:
            values["target_criteria"] = update.target_criteria.to_dict()
        if update.default_visibility is not None:
            values["default_visibility"] = update.default_visibility.to_dict()
        if not values:
            return task

        updated = await self.task_repo.update_task(task_id, values)
        if updated is None:
            raise ResourceNotFoundException("task", task_id)

        if update.target_criteria is not None and self.materializer.is_materialized(updated):
            await self._sync_specific_recipients(task, updated, actor)
        return updated

    async def _sync_specific_recipients(
        self, before: TaskResult, after: TaskResult, actor: Actor
    ) -> None:
        previous = set(before.target_criteria.specific_user_ids)
        current = after.target_criteria.specific_user_ids
        removed = [sid for sid in before.target_criteria.specific_user_ids if sid not in current]
        added = [sid for sid in current if sid not in previous]
        if removed:
            await self.materializer.unassign(
                after, removed, actor, reason="Removed from task targeting"
            )
        if added:
            await self.materializer.materialize(
                after,
                actor,
                AssignmentContext(source=source_for(actor)),
                student_ids=added,
            )

    async def delete_task(self, task_id: str, actor: Actor) -> None:
        """Soft-delete a task and deactivate its assignment rows."""
        task = await self.get_task(task_id)
        if not await self.task_repo.soft_delete(task_id, actor.user_id):
            raise ResourceNotFoundException("task", task_id)
        if self.materializer.is_materialized(task):
            await self.materializer.unassign(task, None, actor, reason="Task deleted")
        logger.info("Task %s deleted by %s", task_id, actor.user_id)

    async def assign_students(
        self,
        task_id: str,
        student_ids: Sequence[str],
        actor: Actor,
        context: AssignmentContext | None = None,
    ) -> MaterializationResult:
        """Add students to a specific task. Other strategies return a no-op result."""
        ids = require_student_ids(student_ids)
        task = await self.get_task(task_id)
        if not self.materializer.is_materialized(task):
            return await self.materializer.materialize(task, actor)

        result = await self.materializer.materialize(
            task,
            actor,
            context or AssignmentContext(source=source_for(actor)),
            student_ids=ids,
        )
        if result.assignments:
            await self.task_repo.edit_specific_users(
                task.id, add=[a.student_id for a in result.assignments]
            )
        return result

    async def unassign_students(
        self,
        task_id: str,
        student_ids: Sequence[str],
        actor: Actor,
        reason: str | None = None,
    ) -> DeactivationResult:
        """Remove students from a specific task. Other strategies return a no-op result."""
        ids = require_student_ids(student_ids)
        task = await self.get_task(task_id)
        result = await self.materializer.unassign(task, ids, actor, reason)
        if self.materializer.is_materialized(task):
            await self.task_repo.edit_specific_users(task.id, remove=ids)
        return result

    async def bulk_assign(
        self,
        task_ids: Sequence[str],
        student_ids: Sequence[str],
        actor: Actor,
        context: AssignmentContext | None = None,
    ) -> BulkAssignResult:
        """Assign the same students to several tasks; per-task errors are collected."""
        ids = require_student_ids(student_ids)
        if not task_ids:
            raise ValidationException("task_ids array is required", field="task_ids")
        context = context or AssignmentContext(source=AssignmentSource.BULK)
        succeeded: list[MaterializationResult] = []
        failures: list[ItemFailure] = []
        for task_id in dict.fromkeys(task_ids):
            try:
                succeeded.append(
                    await self.assign_students(task_id, ids, actor, context)
                )
            except TaskVisibilityException as e:
                failures.append(ItemFailure(item_id=task_id, error=e.message))
        return BulkAssignResult(succeeded=succeeded, failures=failures)

    async def list_task_assignments(
        self,
        task_id: str,
        include_inactive: bool = False,
        school_id: str | None = None,
        class_id: str | None = None,
    ) -> list[TaskAssignmentResult]:
        """Return materialized rows of a task (empty for dynamic strategies)."""
        await self.get_task(task_id)
        return await self.assignment_repo.list_for_task(
            task_id,
            include_inactive=include_inactive,
            school_id=school_id,
            class_id=class_id,
        )

    async def list_student_assignments(
        self, student_id: str, include_inactive: bool = False
    ) -> list[TaskAssignmentResult]:
        """Return materialized rows of a student across tasks."""
        require_id(student_id, "student_id")
        return await self.assignment_repo.list_for_student(
            student_id, include_inactive=include_inactive
        )
