"""DTOs for materialized task assignments (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from app.domain.enums import AssignmentSource


class AssignmentOutcome(str, Enum):
    """What ensure_active did for one (task, student) pair."""

    CREATED = "created"
    REUSED = "reused"
    REACTIVATED = "reactivated"


@dataclass(frozen=True)
class TaskAssignmentResult:
    """One materialized assignment row."""

    id: str
    task_id: str
    student_id: str
    assigned_by: str
    assigned_by_role: str
    source: str
    school_id: str | None
    class_id: str | None
    is_active: bool
    assigned_at: datetime
    deactivated_at: datetime | None
    deactivated_by: str | None
    deactivation_reason: str | None


@dataclass(frozen=True)
class AssignmentContext:
    """Where an assignment came from (recorded on the row)."""

    source: AssignmentSource = AssignmentSource.ADMIN
    school_id: str | None = None
    class_id: str | None = None


@dataclass(frozen=True)
class ItemFailure:
    """A single failed item inside a bulk operation."""

    item_id: str
    error: str


@dataclass(frozen=True)
class MaterializationResult:
    """Outcome of materializing a task's assignments.

    assignment_type is "specific" when rows were touched and
    "strategy-based" when the strategy resolves dynamically.
    """

    task_id: str
    assignment_type: str
    message: str
    assignments: list[TaskAssignmentResult] = field(default_factory=list)
    created_count: int = 0
    reused_count: int = 0
    reactivated_count: int = 0
    failures: list[ItemFailure] = field(default_factory=list)

    @property
    def assigned_count(self) -> int:
        return len(self.assignments)


@dataclass(frozen=True)
class BulkAssignResult:
    """Per-task materialization results of a bulk assign, plus failed task ids."""

    succeeded: list[MaterializationResult]
    failures: list[ItemFailure]


@dataclass(frozen=True)
class DeactivationResult:
    """Outcome of unassigning students from a task."""

    task_id: str
    deactivated_count: int
    message: str
