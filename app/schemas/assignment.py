"""Task assignment API schemas (materialized rows for specific tasks)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import ItemFailureResponse
from app.schemas.task import TaskResponse


class AssignStudentsRequest(BaseModel):
    """Request body for POST /tasks/{task_id}/assign."""

    student_ids: list[str] = Field(default_factory=list)
    school_id: str | None = Field(default=None, max_length=64)
    class_id: str | None = Field(default=None, max_length=64)


class UnassignStudentsRequest(BaseModel):
    """Request body for POST /tasks/{task_id}/unassign."""

    student_ids: list[str] = Field(default_factory=list)
    reason: str | None = Field(default=None, max_length=1000)


class BulkAssignRequest(BaseModel):
    """Request body for POST /bulk/assign."""

    task_ids: list[str] = Field(default_factory=list)
    student_ids: list[str] = Field(default_factory=list)
    school_id: str | None = Field(default=None, max_length=64)
    class_id: str | None = Field(default=None, max_length=64)


class TaskAssignmentResponse(BaseModel):
    """One materialized assignment row."""

    model_config = ConfigDict(from_attributes=True)

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


class MaterializationResponse(BaseModel):
    """Outcome of materializing assignments ("specific" or "strategy-based")."""

    model_config = ConfigDict(from_attributes=True)

    task_id: str
    assignment_type: str
    message: str
    assigned_count: int
    created_count: int
    reused_count: int
    reactivated_count: int
    assignments: list[TaskAssignmentResponse]
    failures: list[ItemFailureResponse]


class TaskCreateResponse(BaseModel):
    """Created task plus the materialization outcome."""

    task: TaskResponse
    assignment: MaterializationResponse


class DeactivationResponse(BaseModel):
    """Outcome of unassigning students."""

    model_config = ConfigDict(from_attributes=True)

    task_id: str
    deactivated_count: int
    message: str


class BulkAssignResponse(BaseModel):
    """Per-task outcomes of a bulk assign."""

    model_config = ConfigDict(from_attributes=True)

    succeeded: list[MaterializationResponse]
    failures: list[ItemFailureResponse]
