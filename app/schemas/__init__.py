"""Pydantic request/response schemas for the API."""

from app.schemas.assignment import (
    AssignStudentsRequest,
    BulkAssignRequest,
    BulkAssignResponse,
    DeactivationResponse,
    MaterializationResponse,
    TaskAssignmentResponse,
    TaskCreateResponse,
    UnassignStudentsRequest,
)
from app.schemas.common import ErrorResponse, ItemFailureResponse
from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.task import (
    DefaultVisibilitySchema,
    TargetCriteriaSchema,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
)
from app.schemas.visibility import (
    BulkVisibilityRequest,
    BulkVisibilityResponse,
    ChildTasksResponse,
    ControlWithTaskResponse,
    SetVisibilityRequest,
    SetVisibilityResponse,
    StudentTasksResponse,
    VisibilityControlResponse,
    VisibilityVerdictResponse,
)

__all__ = [
    "AssignStudentsRequest",
    "BulkAssignRequest",
    "BulkAssignResponse",
    "BulkVisibilityRequest",
    "BulkVisibilityResponse",
    "ChildTasksResponse",
    "ControlWithTaskResponse",
    "DeactivationResponse",
    "DefaultVisibilitySchema",
    "ErrorResponse",
    "HealthResponse",
    "ItemFailureResponse",
    "MaterializationResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "SetVisibilityRequest",
    "SetVisibilityResponse",
    "StudentTasksResponse",
    "TargetCriteriaSchema",
    "TaskAssignmentResponse",
    "TaskCreateRequest",
    "TaskCreateResponse",
    "TaskResponse",
    "TaskUpdateRequest",
    "UnassignStudentsRequest",
    "VisibilityControlResponse",
    "VisibilityVerdictResponse",
]
