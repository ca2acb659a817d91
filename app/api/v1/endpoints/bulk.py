"""Bulk API: one request over many tasks, with per-task failures reported."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    CONTROLLER_ROLES,
    TASK_AUTHOR_ROLES,
    get_task_service,
    get_visibility_control_service,
    require_roles,
)
from app.application.dtos.actor import Actor
from app.application.dtos.task_assignment import AssignmentContext
from app.application.use_cases.tasks import TaskService, VisibilityControlService
from app.core.config import get_settings
from app.core.limiter import limit_writes
from app.domain.enums import AssignmentSource
from app.domain.exceptions import ValidationException
from app.schemas.assignment import BulkAssignRequest, BulkAssignResponse
from app.schemas.visibility import BulkVisibilityRequest, BulkVisibilityResponse

router = APIRouter()


def _check_size(task_ids: list[str], student_ids: list[str]) -> None:
    max_items = get_settings().bulk_max_items
    if len(task_ids) * max(len(student_ids), 1) > max_items:
        raise ValidationException(
            f"Bulk request exceeds {max_items} task x student items", field="task_ids"
        )


@router.post("/assign", response_model=BulkAssignResponse)
@limit_writes
async def bulk_assign(
    request: Request,
    body: BulkAssignRequest,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    actor: Annotated[Actor, Depends(require_roles(*TASK_AUTHOR_ROLES))],
):
    """Assign the same students to several specific tasks."""
    _check_size(body.task_ids, body.student_ids)
    result = await task_svc.bulk_assign(
        body.task_ids,
        body.student_ids,
        actor,
        AssignmentContext(
            source=AssignmentSource.BULK, school_id=body.school_id, class_id=body.class_id
        ),
    )
    return BulkAssignResponse.model_validate(result)


@router.post("/visibility", response_model=BulkVisibilityResponse)
@limit_writes
async def bulk_set_visibility(
    request: Request,
    body: BulkVisibilityRequest,
    control_svc: Annotated[VisibilityControlService, Depends(get_visibility_control_service)],
    actor: Annotated[Actor, Depends(require_roles(*CONTROLLER_ROLES))],
):
    """Apply one controller's override to several tasks."""
    _check_size(body.task_ids, body.student_ids)
    result = await control_svc.bulk_set_control(
        body.task_ids,
        body.controller_type,
        body.controller_id,
        body.student_ids,
        actor,
        is_visible=body.is_visible,
        reason=body.reason,
    )
    return BulkVisibilityResponse.model_validate(result)
