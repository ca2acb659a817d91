"""Visibility control and resolution API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.visibility import ChildTasksResult, VisibilityVerdict, VisibleTasksResult
from app.domain.enums import ControllerType
from app.schemas.common import ItemFailureResponse
from app.schemas.task import TaskResponse


class SetVisibilityRequest(BaseModel):
    """Request body for PUT /tasks/{task_id}/visibility.

    controller_type is validated by the use case so a bad value is a 400
    with a readable message.
    """

    controller_type: str
    controller_id: str
    student_ids: list[str] = Field(default_factory=list)
    is_visible: bool = True
    reason: str | None = Field(default=None, max_length=1000)


class BulkVisibilityRequest(SetVisibilityRequest):
    """Request body for POST /bulk/visibility: one controller over many tasks."""

    task_ids: list[str] = Field(default_factory=list)


class VisibilityControlResponse(BaseModel):
    """One controller override row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    task_id: str
    controller_type: ControllerType
    controller_id: str
    is_visible: bool
    controlled_student_ids: list[str]
    changed_by: str
    changed_by_role: str
    reason: str | None
    metadata: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class SetVisibilityResponse(BaseModel):
    """Stored control and whether this request created it."""

    model_config = ConfigDict(from_attributes=True)

    control: VisibilityControlResponse
    created: bool


class ControlWithTaskResponse(BaseModel):
    """Dashboard row: control plus its task when requested."""

    model_config = ConfigDict(from_attributes=True)

    control: VisibilityControlResponse
    task: TaskResponse | None = None


class BulkVisibilityItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    task_id: str
    created: bool
    control_id: str


class BulkVisibilityResponse(BaseModel):
    """Per-task outcomes of a bulk visibility update."""

    model_config = ConfigDict(from_attributes=True)

    succeeded: list[BulkVisibilityItemResponse]
    failures: list[ItemFailureResponse]


class ControlCheckResponse(BaseModel):
    """How one controller type was consulted."""

    model_config = ConfigDict(from_attributes=True)

    controller_type: ControllerType
    controller_id: str | None
    has_control: bool
    is_visible: bool | None = None
    control_id: str | None = None


class VisibilityVerdictResponse(BaseModel):
    """Answer to "can this student see this task"."""

    task_id: str
    student_id: str
    can_see: bool
    reason: str
    controls: dict[str, ControlCheckResponse]

    @classmethod
    def from_verdict(
        cls, task_id: str, student_id: str, verdict: VisibilityVerdict
    ) -> "VisibilityVerdictResponse":
        return cls(
            task_id=task_id,
            student_id=student_id,
            can_see=verdict.can_see,
            reason=verdict.reason,
            controls={
                ctype.value: ControlCheckResponse.model_validate(check)
                for ctype, check in verdict.controls.items()
            },
        )


class VisibleTaskResponse(BaseModel):
    """A visible task and why it is visible."""

    task: TaskResponse
    reason: str


class StudentTasksResponse(BaseModel):
    """One page of a student's candidate tasks, filtered to the visible ones."""

    student_id: str
    tasks: list[VisibleTaskResponse]
    page: int
    limit: int
    candidate_count: int

    @classmethod
    def from_result(cls, result: VisibleTasksResult) -> "StudentTasksResponse":
        return cls(
            student_id=result.student_id,
            tasks=[
                VisibleTaskResponse(
                    task=TaskResponse.model_validate(item.task),
                    reason=item.verdict.reason,
                )
                for item in result.tasks
            ],
            page=result.page,
            limit=result.limit,
            candidate_count=result.candidate_count,
        )


class ChildTasksResponse(BaseModel):
    """Visible tasks of one child, resolved with the parent as context."""

    student_id: str
    result: StudentTasksResponse

    @classmethod
    def from_result(cls, item: ChildTasksResult) -> "ChildTasksResponse":
        return cls(student_id=item.student_id, result=StudentTasksResponse.from_result(item.result))
