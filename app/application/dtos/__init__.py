"""Application DTOs (no ORM dependency)."""

from app.application.dtos.actor import SYSTEM_ACTOR, Actor
from app.application.dtos.directory import StudentDirectoryRecord
from app.application.dtos.task import (
    Page,
    TaskCreate,
    TaskFilters,
    TaskResult,
    TaskUpdate,
)
from app.application.dtos.task_assignment import (
    AssignmentContext,
    AssignmentOutcome,
    BulkAssignResult,
    DeactivationResult,
    ItemFailure,
    MaterializationResult,
    TaskAssignmentResult,
)
from app.application.dtos.visibility import (
    BulkVisibilityItem,
    BulkVisibilityResult,
    ChildTasksResult,
    ControlCheck,
    ControlWithTask,
    SetControlResult,
    VisibilityControlResult,
    VisibilityVerdict,
    VisibleTask,
    VisibleTasksResult,
)

__all__ = [
    "Actor",
    "AssignmentContext",
    "AssignmentOutcome",
    "BulkAssignResult",
    "BulkVisibilityItem",
    "BulkVisibilityResult",
    "ChildTasksResult",
    "ControlCheck",
    "ControlWithTask",
    "DeactivationResult",
    "ItemFailure",
    "MaterializationResult",
    "Page",
    "SYSTEM_ACTOR",
    "SetControlResult",
    "StudentDirectoryRecord",
    "TaskAssignmentResult",
    "TaskCreate",
    "TaskFilters",
    "TaskResult",
    "TaskUpdate",
    "VisibilityControlResult",
    "VisibilityVerdict",
    "VisibleTask",
    "VisibleTasksResult",
]
