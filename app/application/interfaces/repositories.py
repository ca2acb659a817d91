"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.actor import Actor
    from app.application.dtos.directory import StudentDirectoryRecord
    from app.application.dtos.task import TaskCreate, TaskFilters, TaskResult
    from app.application.dtos.task_assignment import (
        AssignmentContext,
        AssignmentOutcome,
        TaskAssignmentResult,
    )
    from app.application.dtos.visibility import (
        SetControlResult,
        VisibilityControlResult,
    )
    from app.domain.enums import ControllerType


class ITaskRepository(Protocol):
    """Protocol for task persistence and candidate queries (DIP)."""

    async def create_task(self, data: TaskCreate, actor: Actor) -> TaskResult:
        """Persist a new task authored by actor."""

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        """Return task by ID, including soft-deleted tasks (callers check is_deleted)."""

    async def get_many(self, task_ids: Sequence[str]) -> dict[str, TaskResult]:
        """Return non-deleted tasks keyed by ID; unknown IDs are absent."""

    async def list_tasks(
        self, filters: TaskFilters, skip: int = 0, limit: int = 20
    ) -> list[TaskResult]:
        """Return tasks matching filters, newest first."""

    async def update_task(
        self, task_id: str, values: Mapping[str, Any]
    ) -> TaskResult | None:
        """Apply column values to a non-deleted task; None if it does not exist."""

    async def edit_specific_users(
        self,
        task_id: str,
        add: Sequence[str] = (),
        remove: Sequence[str] = (),
    ) -> TaskResult | None:
        """Add and remove specific_user_ids on the locked row; None if the task is gone."""

    async def soft_delete(self, task_id: str, deleted_by: str) -> bool:
        """Mark task deleted. Returns False when missing or already deleted."""

    async def list_candidates_for_student(
        self,
        student: StudentDirectoryRecord,
        status: str | None = None,
        category: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> list[TaskResult]:
        """Return non-deleted tasks whose targeting could include the student (one query)."""

    async def list_controllable(
        self,
        controller_type: ControllerType,
        controller_id: str,
        status: str | None = None,
        category: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> list[TaskResult]:
        """Return non-deleted tasks the controller may manage."""


class ITaskAssignmentRepository(Protocol):
    """Protocol for materialized assignment rows (specific strategy only)."""

    async def ensure_active(
        self,
        task_id: str,
        student_id: str,
        actor: Actor,
        context: AssignmentContext,
    ) -> tuple[TaskAssignmentResult, AssignmentOutcome]:
        """Create, reuse, or reactivate the row for (task_id, student_id)."""

    async def deactivate(
        self,
        task_id: str,
        student_ids: Sequence[str] | None,
        deactivated_by: str,
        reason: str,
    ) -> int:
        """Flip matching active rows to inactive; None means all rows of the task. Returns count."""

    async def list_for_task(
        self,
        task_id: str,
        include_inactive: bool = False,
        school_id: str | None = None,
        class_id: str | None = None,
    ) -> list[TaskAssignmentResult]:
        """Return assignment rows for a task, newest first."""

    async def list_for_student(
        self, student_id: str, include_inactive: bool = False
    ) -> list[TaskAssignmentResult]:
        """Return assignment rows for a student, newest first."""


class IVisibilityControlRepository(Protocol):
    """Protocol for override rows keyed by (task, controller type, controller id)."""

    async def upsert(
        self,
        task_id: str,
        controller_type: ControllerType,
        controller_id: str,
        student_ids: Sequence[str],
        is_visible: bool,
        changed_by: str,
        changed_by_role: str,
        reason: str | None,
    ) -> SetControlResult:
        """Insert or replace the control for the triple in one atomic statement."""

    async def find_applicable(
        self,
        task_ids: Sequence[str],
        student_id: str,
        controllers: Mapping[ControllerType, str],
    ) -> list[VisibilityControlResult]:
        """Return controls on task_ids owned by the given controllers that list student_id."""

    async def list_for_task(
        self,
        task_id: str,
        controller_type: ControllerType | None = None,
        controller_id: str | None = None,
    ) -> list[VisibilityControlResult]:
        """Return controls on a task, optionally for one controller."""

    async def list_for_controller(
        self,
        controller_type: ControllerType,
        controller_id: str,
        task_id: str | None = None,
    ) -> list[VisibilityControlResult]:
        """Return a controller's controls, newest first."""
