"""Parent API: visible tasks of each child."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import (
    get_current_actor,
    get_page,
    get_visibility_resolution_service,
)
from app.application.dtos.actor import Actor
from app.application.dtos.task import Page
from app.application.use_cases.tasks import VisibilityResolutionService
from app.schemas.visibility import ChildTasksResponse

router = APIRouter()


@router.get("/{parent_id}/children/tasks", response_model=list[ChildTasksResponse])
async def list_children_tasks(
    parent_id: str,
    resolution_svc: Annotated[
        VisibilityResolutionService, Depends(get_visibility_resolution_service)
    ],
    page: Annotated[Page, Depends(get_page)],
    _: Annotated[Actor, Depends(get_current_actor)],
    status: str | None = None,
    category: str | None = None,
):
    """Resolve each child's visible tasks with the parent as context."""
    results = await resolution_svc.tasks_for_parent_children(
        parent_id, status=status, category=category, page=page
    )
    return [ChildTasksResponse.from_result(r) for r in results]
