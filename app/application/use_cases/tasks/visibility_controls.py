"""Visibility control operations: set and list overrides per controller."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from app.application.dtos.actor import Actor
from app.application.dtos.task_assignment import ItemFailure
from app.application.dtos.visibility import (
    BulkVisibilityItem,
    BulkVisibilityResult,
    ControlWithTask,
    SetControlResult,
    VisibilityControlResult,
)
from app.application.interfaces.repositories import (
    ITaskRepository,
    IVisibilityControlRepository,
)
from app.application.use_cases.tasks.validation import (
    parse_controller_type,
    require_id,
    require_student_ids,
)
from app.domain.enums import ControllerType
from app.domain.exceptions import (
    ResourceNotFoundException,
    TaskVisibilityException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class VisibilityControlService:
    """Write and read TaskVisibilityControl rows.

    One row per (task, controller type, controller id); setting a control
    replaces the row's student set and visibility in a single upsert.
    """

    def __init__(
        self,
        control_repo: IVisibilityControlRepository,
        task_repo: ITaskRepository,
    ) -> None:
        self.control_repo = control_repo
        self.task_repo = task_repo

    async def _require_task(self, task_id: str) -> None:
        task = await self.task_repo.get_by_id(task_id)
        if task is None or task.is_deleted:
            raise ResourceNotFoundException("task", task_id)

    async def set_control(
        self,
        task_id: str,
        controller_type: str | ControllerType,
        controller_id: str,
        student_ids: Sequence[str],
        actor: Actor,
        is_visible: bool = True,
        reason: str | None = None,
    ) -> SetControlResult:
        """Create or replace a controller's override for a task.

        Args:
            task_id: Task being controlled.
            controller_type: 'parent', 'school', or 'class'.
            controller_id: Id of the parent, school, or class.
            student_ids: Students the override applies to (replaces the stored set).
            actor: Caller recorded as changed_by.
            is_visible: False hides the task from the listed students.
            reason: Optional free-text reason. When omitted on an update the
                stored reason is kept.

        Returns:
            SetControlResult with the stored row and whether it was created.

        Raises:
            ValidationException: On malformed input (before any read).
            ResourceNotFoundException: If the task is missing or deleted.
        """
        ctype = parse_controller_type(controller_type)
        require_id(task_id, "task_id")
        require_id(controller_id, "controller_id")
        ids = require_student_ids(student_ids)
        await self._require_task(task_id)

        result = await self.control_repo.upsert(
            task_id=task_id,
            controller_type=ctype,
            controller_id=controller_id,
            student_ids=ids,
            is_visible=is_visible,
            changed_by=actor.user_id,
            changed_by_role=actor.role,
            reason=reason,
        )
        logger.info(
            "Visibility control %s on task %s by %s %s: visible=%s students=%d",
            "created" if result.created else "updated",
            task_id,
            ctype.value,
            controller_id,
            is_visible,
            len(ids),
        )
        return result

    async def bulk_set_control(
        self,
        task_ids: Sequence[str],
        controller_type: str | ControllerType,
        controller_id: str,
        student_ids: Sequence[str],
        actor: Actor,
        is_visible: bool = True,
        reason: str | None = None,
    ) -> BulkVisibilityResult:
        """Apply the same override to several tasks; per-task errors are collected."""
        ctype = parse_controller_type(controller_type)
        require_id(controller_id, "controller_id")
        ids = require_student_ids(student_ids)
        if not task_ids:
            raise ValidationException("task_ids array is required", field="task_ids")

        succeeded: list[BulkVisibilityItem] = []
        failures: list[ItemFailure] = []
        for task_id in dict.fromkeys(task_ids):
            try:
                result = await self.set_control(
                    task_id, ctype, controller_id, ids, actor, is_visible, reason
                )
            except TaskVisibilityException as e:
                failures.append(ItemFailure(item_id=task_id, error=e.message))
                continue
            succeeded.append(
                BulkVisibilityItem(
                    task_id=task_id,
                    created=result.created,
                    control_id=result.control.id,
                )
            )
        return BulkVisibilityResult(succeeded=succeeded, failures=failures)

    async def list_for_task(
        self,
        task_id: str,
        controller_type: str | ControllerType | None = None,
        controller_id: str | None = None,
    ) -> list[VisibilityControlResult]:
        """Return controls on a task, optionally for one controller."""
        require_id(task_id, "task_id")
        ctype = parse_controller_type(controller_type) if controller_type else None
        if controller_id is not None:
            require_id(controller_id, "controller_id")
        await self._require_task(task_id)
        return await self.control_repo.list_for_task(task_id, ctype, controller_id)

    async def list_for_controller(
        self,
        controller_type: str | ControllerType,
        controller_id: str,
        task_id: str | None = None,
        include_task_details: bool = False,
    ) -> list[ControlWithTask]:
        """Return a controller's controls, optionally joined with their tasks."""
        ctype = parse_controller_type(controller_type)
        require_id(controller_id, "controller_id")
        if task_id is not None:
            require_id(task_id, "task_id")
        controls = await self.control_repo.list_for_controller(ctype, controller_id, task_id)
        if not include_task_details or not controls:
            return [ControlWithTask(control=c) for c in controls]
        tasks = await self.task_repo.get_many([c.task_id for c in controls])
        return [ControlWithTask(control=c, task=tasks.get(c.task_id)) for c in controls]
