"""DTOs for task authoring and targeting (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.enums import AssignmentStrategy
from app.domain.value_objects.core import DefaultVisibility, TargetCriteria


@dataclass(frozen=True)
class TaskResult:
    """Task read-model used by the evaluator, resolver, and API."""

    id: str
    title: str
    description: str | None
    category: str
    sub_category: str | None
    point_value: int
    status: str
    created_by: str
    creator_role: str
    assignment_strategy: AssignmentStrategy
    target_criteria: TargetCriteria
    default_visibility: DefaultVisibility
    due_date: datetime | None
    is_deleted: bool
    deleted_at: datetime | None
    deleted_by: str | None
    metadata: dict[str, Any]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TaskCreate:
    """Input for creating a task. Strategy is fixed from here on."""

    title: str
    category: str
    assignment_strategy: AssignmentStrategy
    target_criteria: TargetCriteria
    default_visibility: DefaultVisibility = field(default_factory=DefaultVisibility)
    description: str | None = None
    sub_category: str | None = None
    point_value: int = 0
    due_date: datetime | None = None
    status: str = "pending"
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TaskUpdate:
    """Partial update; None means leave unchanged."""

    title: str | None = None
    description: str | None = None
    category: str | None = None
    sub_category: str | None = None
    point_value: int | None = None
    due_date: datetime | None = None
    status: str | None = None
    target_criteria: TargetCriteria | None = None
    default_visibility: DefaultVisibility | None = None
    metadata: dict[str, Any] | None = None
    assignment_strategy: AssignmentStrategy | None = None


@dataclass(frozen=True)
class TaskFilters:
    """Filters for listing tasks."""

    status: str | None = None
    category: str | None = None
    assignment_strategy: AssignmentStrategy | None = None
    created_by: str | None = None
    include_deleted: bool = False


@dataclass(frozen=True)
class Page:
    """Offset pagination derived from a 1-based page number."""

    page: int = 1
    limit: int = 20

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit
