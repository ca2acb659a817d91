"""Task API: authoring, recipients, visibility controls, and single resolutions.

Thin routes delegating to TaskService, VisibilityControlService and
VisibilityResolutionService.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import (
    CONTROLLER_ROLES,
    TASK_AUTHOR_ROLES,
    get_current_actor,
    get_page,
    get_task_query_service,
    get_task_service,
    get_visibility_control_query_service,
    get_visibility_control_service,
    get_visibility_resolution_service,
    require_roles,
)
from app.application.dtos.actor import Actor
from app.application.dtos.task import Page, TaskFilters
from app.application.dtos.task_assignment import AssignmentContext
from app.application.use_cases.tasks import (
    TaskService,
    VisibilityControlService,
    VisibilityResolutionService,
)
from app.application.use_cases.tasks.task_operations import source_for
from app.application.use_cases.tasks.validation import build_context
from app.core.limiter import limit_writes
from app.domain.enums import AssignmentStrategy
from app.schemas.assignment import (
    AssignStudentsRequest,
    DeactivationResponse,
    MaterializationResponse,
    TaskAssignmentResponse,
    TaskCreateResponse,
    UnassignStudentsRequest,
)
from app.schemas.task import TaskCreateRequest, TaskResponse, TaskUpdateRequest
from app.schemas.visibility import (
    SetVisibilityRequest,
    SetVisibilityResponse,
    VisibilityControlResponse,
    VisibilityVerdictResponse,
)

router = APIRouter()


def _context(actor: Actor, school_id: str | None, class_id: str | None) -> AssignmentContext:
    return AssignmentContext(source=source_for(actor), school_id=school_id, class_id=class_id)


@router.post("", response_model=TaskCreateResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request,
    body: TaskCreateRequest,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    actor: Annotated[Actor, Depends(require_roles(*TASK_AUTHOR_ROLES))],
):
    """Create a task and materialize its assignments (specific strategy only)."""
    task, materialization = await task_svc.create_task(
        body.to_dto(), actor, _context(actor, body.school_id, body.class_id)
    )
    return TaskCreateResponse(
        task=TaskResponse.model_validate(task),
        assignment=MaterializationResponse.model_validate(materialization),
    )


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    task_svc: Annotated[TaskService, Depends(get_task_query_service)],
    page: Annotated[Page, Depends(get_page)],
    _: Annotated[Actor, Depends(get_current_actor)],
    status: str | None = None,
    category: str | None = None,
    assignment_strategy: AssignmentStrategy | None = None,
    created_by: str | None = None,
):
    """List non-deleted tasks, newest first."""
    filters = TaskFilters(
        status=status,
        category=category,
        assignment_strategy=assignment_strategy,
        created_by=created_by,
    )
    tasks = await task_svc.list_tasks(filters, page)
    return [TaskResponse.model_validate(t) for t in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_query_service)],
    _: Annotated[Actor, Depends(get_current_actor)],
):
    """Return a task (404 when missing or deleted)."""
    return TaskResponse.model_validate(await task_svc.get_task(task_id))


@router.patch("/{task_id}", response_model=TaskResponse)
@limit_writes
async def update_task(
    request: Request,
    task_id: str,
    body: TaskUpdateRequest,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    actor: Annotated[Actor, Depends(require_roles(*TASK_AUTHOR_ROLES))],
):
    """Partially update a task. Changing assignment_strategy is rejected."""
    updated = await task_svc.update_task(task_id, body.to_dto(), actor)
    return TaskResponse.model_validate(updated)


@router.delete("/{task_id}", status_code=204)
@limit_writes
async def delete_task(
    request: Request,
    task_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    actor: Annotated[Actor, Depends(require_roles(*TASK_AUTHOR_ROLES))],
) -> Response:
    """Soft-delete a task; its assignment rows are deactivated."""
    await task_svc.delete_task(task_id, actor)
    return Response(status_code=204)


@router.post("/{task_id}/assign", response_model=MaterializationResponse)
@limit_writes
async def assign_students(
    request: Request,
    task_id: str,
    body: AssignStudentsRequest,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    actor: Annotated[Actor, Depends(require_roles(*TASK_AUTHOR_ROLES))],
):
    """Add students to a specific task (no-op message for dynamic strategies)."""
    result = await task_svc.assign_students(
        task_id, body.student_ids, actor, _context(actor, body.school_id, body.class_id)
    )
    return MaterializationResponse.model_validate(result)


@router.post("/{task_id}/unassign", response_model=DeactivationResponse)
@limit_writes
async def unassign_students(
    request: Request,
    task_id: str,
    body: UnassignStudentsRequest,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    actor: Annotated[Actor, Depends(require_roles(*TASK_AUTHOR_ROLES))],
):
    """Deactivate students' assignment rows (never deletes)."""
    result = await task_svc.unassign_students(task_id, body.student_ids, actor, body.reason)
    return DeactivationResponse.model_validate(result)


@router.get("/{task_id}/assignments", response_model=list[TaskAssignmentResponse])
async def list_task_assignments(
    task_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_query_service)],
    _: Annotated[Actor, Depends(get_current_actor)],
    include_inactive: bool = False,
    school_id: str | None = None,
    class_id: str | None = None,
):
    """List materialized assignment rows of a task."""
    rows = await task_svc.list_task_assignments(
        task_id, include_inactive=include_inactive, school_id=school_id, class_id=class_id
    )
    return [TaskAssignmentResponse.model_validate(r) for r in rows]


@router.put("/{task_id}/visibility", response_model=SetVisibilityResponse)
@limit_writes
async def set_visibility(
    request: Request,
    response: Response,
    task_id: str,
    body: SetVisibilityRequest,
    control_svc: Annotated[VisibilityControlService, Depends(get_visibility_control_service)],
    actor: Annotated[Actor, Depends(require_roles(*CONTROLLER_ROLES))],
):
    """Create or replace a controller's override (201 when created, 200 when replaced)."""
    result = await control_svc.set_control(
        task_id,
        body.controller_type,
        body.controller_id,
        body.student_ids,
        actor,
        is_visible=body.is_visible,
        reason=body.reason,
    )
    response.status_code = 201 if result.created else 200
    return SetVisibilityResponse.model_validate(result)


@router.get("/{task_id}/visibility", response_model=list[VisibilityControlResponse])
async def list_visibility_controls(
    task_id: str,
    control_svc: Annotated[
        VisibilityControlService, Depends(get_visibility_control_query_service)
    ],
    _: Annotated[Actor, Depends(get_current_actor)],
    controller_type: str | None = None,
    controller_id: str | None = None,
):
    """List the overrides set on a task, optionally for one controller."""
    controls = await control_svc.list_for_task(task_id, controller_type, controller_id)
    return [VisibilityControlResponse.model_validate(c) for c in controls]


@router.get("/{task_id}/visibility/{student_id}", response_model=VisibilityVerdictResponse)
async def resolve_visibility(
    task_id: str,
    student_id: str,
    resolution_svc: Annotated[
        VisibilityResolutionService, Depends(get_visibility_resolution_service)
    ],
    _: Annotated[Actor, Depends(get_current_actor)],
    parent_id: Annotated[str | None, Query(max_length=64)] = None,
    school_id: Annotated[str | None, Query(max_length=64)] = None,
    class_id: Annotated[str | None, Query(max_length=64)] = None,
):
    """Return whether the student can see the task, with the reason and controls consulted."""
    verdict = await resolution_svc.resolve(
        task_id, student_id, build_context(parent_id, school_id, class_id)
    )
    return VisibilityVerdictResponse.from_verdict(task_id, student_id, verdict)
