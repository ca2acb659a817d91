"""Controller API: tasks a parent/school/class may manage and its override dashboard."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import (
    get_current_actor,
    get_page,
    get_visibility_control_query_service,
    get_visibility_resolution_service,
)
from app.application.dtos.actor import Actor
from app.application.dtos.task import Page
from app.application.use_cases.tasks import (
    VisibilityControlService,
    VisibilityResolutionService,
)
from app.schemas.task import TaskResponse
from app.schemas.visibility import ControlWithTaskResponse

router = APIRouter()


@router.get("/{controller_type}/{controller_id}/tasks", response_model=list[TaskResponse])
async def list_controllable_tasks(
    controller_type: str,
    controller_id: str,
    resolution_svc: Annotated[
        VisibilityResolutionService, Depends(get_visibility_resolution_service)
    ],
    page: Annotated[Page, Depends(get_page)],
    _: Annotated[Actor, Depends(get_current_actor)],
    status: str | None = None,
    category: str | None = None,
):
    """List tasks whose targeting or default policy the controller may manage."""
    tasks = await resolution_svc.controllable_tasks_for(
        controller_type, controller_id, status=status, category=category, page=page
    )
    return [TaskResponse.model_validate(t) for t in tasks]


@router.get(
    "/{controller_type}/{controller_id}/visibility-controls",
    response_model=list[ControlWithTaskResponse],
)
async def list_controller_visibility_controls(
    controller_type: str,
    controller_id: str,
    control_svc: Annotated[
        VisibilityControlService, Depends(get_visibility_control_query_service)
    ],
    _: Annotated[Actor, Depends(get_current_actor)],
    task_id: str | None = None,
    include_task_details: bool = False,
):
    """List the controller's overrides, optionally with their tasks."""
    rows = await control_svc.list_for_controller(
        controller_type,
        controller_id,
        task_id=task_id,
        include_task_details=include_task_details,
    )
    return [ControlWithTaskResponse.model_validate(r) for r in rows]
