"""Student API: visible tasks and materialized assignments of one student."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import (
    get_current_actor,
    get_page,
    get_task_query_service,
    get_visibility_resolution_service,
)
from app.application.dtos.actor import Actor
from app.application.dtos.task import Page
from app.application.use_cases.tasks import TaskService, VisibilityResolutionService
from app.application.use_cases.tasks.validation import build_context
from app.schemas.assignment import TaskAssignmentResponse
from app.schemas.visibility import StudentTasksResponse

router = APIRouter()


@router.get("/{student_id}/tasks", response_model=StudentTasksResponse)
async def list_visible_tasks(
    student_id: str,
    resolution_svc: Annotated[
        VisibilityResolutionService, Depends(get_visibility_resolution_service)
    ],
    page: Annotated[Page, Depends(get_page)],
    _: Annotated[Actor, Depends(get_current_actor)],
    status: str | None = None,
    category: str | None = None,
    parent_id: Annotated[str | None, Query(max_length=64)] = None,
    school_id: Annotated[str | None, Query(max_length=64)] = None,
    class_id: Annotated[str | None, Query(max_length=64)] = None,
):
    """Return the visible tasks among one page of the student's candidate tasks."""
    result = await resolution_svc.visible_tasks_for_student(
        student_id,
        build_context(parent_id, school_id, class_id),
        status=status,
        category=category,
        page=page,
    )
    return StudentTasksResponse.from_result(result)


@router.get("/{student_id}/assignments", response_model=list[TaskAssignmentResponse])
async def list_student_assignments(
    student_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_query_service)],
    _: Annotated[Actor, Depends(get_current_actor)],
    include_inactive: bool = False,
):
    """List a student's materialized assignment rows across tasks."""
    rows = await task_svc.list_student_assignments(student_id, include_inactive=include_inactive)
    return [TaskAssignmentResponse.model_validate(r) for r in rows]
