"""Visibility resolution use cases: single verdicts and the bulk task queries.

Loads tasks, directory data, and controls, then hands the decision to the
pure resolver in app.application.services.visibility_resolver.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from app.application.dtos.directory import StudentDirectoryRecord
from app.application.dtos.task import Page, TaskResult
from app.application.dtos.visibility import (
    ChildTasksResult,
    VisibilityControlResult,
    VisibilityVerdict,
    VisibleTask,
    VisibleTasksResult,
)
from app.application.interfaces.repositories import (
    ITaskRepository,
    IVisibilityControlRepository,
)
from app.application.interfaces.services import IStudentDirectory
from app.application.services.visibility_resolver import (
    REASON_NOT_FOUND,
    controller_ids_for,
    resolve_visibility,
)
from app.application.use_cases.tasks.validation import parse_controller_type, require_id
from app.domain.enums import ControllerType
from app.domain.value_objects.core import VisibilityContext
from app.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)


class VisibilityResolutionService:
    """Answer "can student S see task T" and "which tasks can S see".

    Directory lookups go through the injected IStudentDirectory, which the
    composition root memoizes per request. Directory failures propagate as
    UpstreamServiceException.
    """

    def __init__(
        self,
        task_repo: ITaskRepository,
        control_repo: IVisibilityControlRepository,
        directory: IStudentDirectory,
    ) -> None:
        self.task_repo = task_repo
        self.control_repo = control_repo
        self.directory = directory

    async def _controls_for(
        self,
        tasks: list[TaskResult],
        student_id: str,
        student: StudentDirectoryRecord,
        context: VisibilityContext,
    ) -> dict[str, list[VisibilityControlResult]]:
        controllers = controller_ids_for(student, context)
        by_task: dict[str, list[VisibilityControlResult]] = defaultdict(list)
        if not tasks or not controllers:
            return by_task
        controls = await self.control_repo.find_applicable(
            [t.id for t in tasks], student_id, controllers
        )
        for control in controls:
            by_task[control.task_id].append(control)
        return by_task

    @traced("visibility.resolve")
    async def resolve(
        self,
        task_id: str,
        student_id: str,
        context: VisibilityContext | None = None,
        student: StudentDirectoryRecord | None = None,
    ) -> VisibilityVerdict:
        """Return the visibility verdict for one task and student.

        A missing or deleted task is a "not visible" verdict, not an error.

        Args:
            task_id: Task to resolve.
            student_id: Student asking.
            context: Optional parent/school/class ids from the request.
            student: Directory record when the caller already has it.

        Returns:
            VisibilityVerdict with reason and consulted controls.
        """
        require_id(task_id, "task_id")
        require_id(student_id, "student_id")
        context = context or VisibilityContext()

        task = await self.task_repo.get_by_id(task_id)
        if task is None or task.is_deleted:
            return VisibilityVerdict(False, REASON_NOT_FOUND)

        if student is None:
            student = await self.directory.get_student(student_id)
        controls = await self._controls_for([task], student_id, student, context)
        verdict = resolve_visibility(
            task, student_id, student, context, controls.get(task.id, [])
        )
        add_span_attributes(
            **{"visibility.can_see": verdict.can_see, "visibility.reason": verdict.reason}
        )
        logger.debug(
            "Resolved task %s for student %s: %s (%s)",
            task_id,
            student_id,
            verdict.can_see,
            verdict.reason,
        )
        return verdict

    @traced("visibility.visible_tasks_for_student")
    async def visible_tasks_for_student(
        self,
        student_id: str,
        context: VisibilityContext | None = None,
        status: str | None = None,
        category: str | None = None,
        page: Page | None = None,
        student: StudentDirectoryRecord | None = None,
    ) -> VisibleTasksResult:
        """Return the visible tasks among one page of candidates.

        Candidates come from a single query over all targeting strategies;
        controls for every candidate are fetched in one more query.
        """
        require_id(student_id, "student_id")
        context = context or VisibilityContext()
        page = page or Page()
        if student is None:
            student = await self.directory.get_student(student_id)

        candidates = await self.task_repo.list_candidates_for_student(
            student, status=status, category=category, skip=page.skip, limit=page.limit
        )
        controls = await self._controls_for(candidates, student_id, student, context)
        visible: list[VisibleTask] = []
        for task in candidates:
            verdict = resolve_visibility(
                task, student_id, student, context, controls.get(task.id, [])
            )
            if verdict.can_see:
                visible.append(VisibleTask(task=task, verdict=verdict))
        add_span_attributes(
            **{
                "visibility.candidates": len(candidates),
                "visibility.visible": len(visible),
            }
        )
        return VisibleTasksResult(
            student_id=student_id,
            tasks=visible,
            page=page.page,
            limit=page.limit,
            candidate_count=len(candidates),
        )

    @traced("visibility.controllable_tasks_for")
    async def controllable_tasks_for(
        self,
        controller_type: str | ControllerType,
        controller_id: str,
        status: str | None = None,
        category: str | None = None,
        page: Page | None = None,
    ) -> list[TaskResult]:
        """Return tasks a controller may manage (no per-student decision)."""
        ctype = parse_controller_type(controller_type)
        require_id(controller_id, "controller_id")
        page = page or Page()
        return await self.task_repo.list_controllable(
            ctype,
            controller_id,
            status=status,
            category=category,
            skip=page.skip,
            limit=page.limit,
        )

    @traced("visibility.tasks_for_parent_children")
    async def tasks_for_parent_children(
        self,
        parent_id: str,
        status: str | None = None,
        category: str | None = None,
        page: Page | None = None,
    ) -> list[ChildTasksResult]:
        """Return each child's visible tasks, resolved with the parent as context."""
        require_id(parent_id, "parent_id")
        context = VisibilityContext(parent_id=parent_id)
        results: list[ChildTasksResult] = []
        for child_id in await self.directory.get_children(parent_id):
            visible = await self.visible_tasks_for_student(
                child_id, context, status=status, category=category, page=page
            )
            results.append(ChildTasksResult(student_id=child_id, result=visible))
        return results
