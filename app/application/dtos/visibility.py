"""DTOs for visibility controls and resolution verdicts (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.application.dtos.task import TaskResult
from app.application.dtos.task_assignment import ItemFailure
from app.domain.enums import ControllerType


@dataclass(frozen=True)
class VisibilityControlResult:
    """One override row: a controller's verdict for a set of students on a task."""

    id: str
    task_id: str
    controller_type: ControllerType
    controller_id: str
    is_visible: bool
    controlled_student_ids: tuple[str, ...]
    changed_by: str
    changed_by_role: str
    reason: str | None
    metadata: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    def applies_to(self, student_id: str) -> bool:
        return student_id in self.controlled_student_ids


@dataclass(frozen=True)
class SetControlResult:
    """Row after an upsert and whether the upsert inserted it."""

    control: VisibilityControlResult
    created: bool


@dataclass(frozen=True)
class ControlCheck:
    """How one controller type was consulted during a resolution."""

    controller_type: ControllerType
    controller_id: str | None
    has_control: bool
    is_visible: bool | None = None
    control_id: str | None = None

    @property
    def hides(self) -> bool:
        return self.has_control and self.is_visible is False


@dataclass(frozen=True)
class VisibilityVerdict:
    """Final answer for one (task, student) pair, with the controls consulted."""

    can_see: bool
    reason: str
    controls: dict[ControllerType, ControlCheck] = field(default_factory=dict)


@dataclass(frozen=True)
class VisibleTask:
    """A task that resolved visible for a student."""

    task: TaskResult
    verdict: VisibilityVerdict


@dataclass(frozen=True)
class VisibleTasksResult:
    """One page of candidate tasks filtered down to the visible ones."""

    student_id: str
    tasks: list[VisibleTask]
    page: int
    limit: int
    candidate_count: int


@dataclass(frozen=True)
class ChildTasksResult:
    """Visible tasks for one child of a parent."""

    student_id: str
    result: VisibleTasksResult


@dataclass(frozen=True)
class ControlWithTask:
    """Control row optionally joined with its task for dashboards."""

    control: VisibilityControlResult
    task: TaskResult | None = None


@dataclass(frozen=True)
class BulkVisibilityItem:
    """Per-task outcome of a bulk visibility update."""

    task_id: str
    created: bool
    control_id: str


@dataclass(frozen=True)
class BulkVisibilityResult:
    """Successes and failures of a bulk visibility update."""

    succeeded: list[BulkVisibilityItem]
    failures: list[ItemFailure]
