"""Task API schemas (authoring, targeting, default visibility)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.task import TaskCreate, TaskUpdate
from app.domain.enums import AssignmentStrategy
from app.domain.exceptions import ValidationException
from app.domain.value_objects.core import DefaultVisibility, TargetCriteria


class TargetCriteriaSchema(BaseModel):
    """Who a task is for; only the fields of the task's strategy are consulted."""

    model_config = ConfigDict(from_attributes=True)

    roles: list[str] = Field(default_factory=list)
    school_ids: list[str] = Field(default_factory=list)
    class_ids: list[str] = Field(default_factory=list)
    grade_level: str | None = None
    specific_user_ids: list[str] = Field(default_factory=list)
    exclude_user_ids: list[str] = Field(default_factory=list)

    def to_value_object(self) -> TargetCriteria:
        """Convert to TargetCriteria; malformed ids raise ValidationException (400)."""
        try:
            return TargetCriteria.from_dict(self.model_dump())
        except ValueError as e:
            raise ValidationException(str(e), field="target_criteria") from e


class DefaultVisibilitySchema(BaseModel):
    """Default policy applied when no controller override hides the task."""

    model_config = ConfigDict(from_attributes=True)

    for_parents: bool = True
    for_schools: bool = True
    for_students: bool = False

    def to_value_object(self) -> DefaultVisibility:
        return DefaultVisibility(**self.model_dump())


class TaskCreateRequest(BaseModel):
    """Request body for creating a task. school_id/class_id are recorded on assignments."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=10_000)
    category: str = Field(..., min_length=1, max_length=32)
    sub_category: str | None = Field(default=None, max_length=100)
    point_value: int = Field(default=0, ge=0)
    assignment_strategy: AssignmentStrategy
    target_criteria: TargetCriteriaSchema = Field(default_factory=TargetCriteriaSchema)
    default_visibility: DefaultVisibilitySchema = Field(
        default_factory=DefaultVisibilitySchema
    )
    due_date: datetime | None = None
    status: str = Field(default="pending", max_length=32)
    metadata: dict[str, Any] = Field(default_factory=dict)
    school_id: str | None = Field(default=None, max_length=64)
    class_id: str | None = Field(default=None, max_length=64)

    def to_dto(self) -> TaskCreate:
        return TaskCreate(
            title=self.title,
            category=self.category,
            assignment_strategy=self.assignment_strategy,
            target_criteria=self.target_criteria.to_value_object(),
            default_visibility=self.default_visibility.to_value_object(),
            description=self.description,
            sub_category=self.sub_category,
            point_value=self.point_value,
            due_date=self.due_date,
            status=self.status,
            metadata=self.metadata,
        )


class TaskUpdateRequest(BaseModel):
    """Partial update. assignment_strategy is accepted only if unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=10_000)
    category: str | None = Field(default=None, max_length=32)
    sub_category: str | None = Field(default=None, max_length=100)
    point_value: int | None = Field(default=None, ge=0)
    due_date: datetime | None = None
    status: str | None = Field(default=None, max_length=32)
    target_criteria: TargetCriteriaSchema | None = None
    default_visibility: DefaultVisibilitySchema | None = None
    metadata: dict[str, Any] | None = None
    assignment_strategy: AssignmentStrategy | None = None

    def to_dto(self) -> TaskUpdate:
        return TaskUpdate(
            title=self.title,
            description=self.description,
            category=self.category,
            sub_category=self.sub_category,
            point_value=self.point_value,
            due_date=self.due_date,
            status=self.status,
            target_criteria=(
                self.target_criteria.to_value_object() if self.target_criteria else None
            ),
            default_visibility=(
                self.default_visibility.to_value_object()
                if self.default_visibility
                else None
            ),
            metadata=self.metadata,
            assignment_strategy=self.assignment_strategy,
        )


class TaskResponse(BaseModel):
    """Task as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

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
    target_criteria: TargetCriteriaSchema
    default_visibility: DefaultVisibilitySchema
    due_date: datetime | None
    metadata: dict[str, Any]
    created_at: datetime
    updated_at: datetime
