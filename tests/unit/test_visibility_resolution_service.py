"""VisibilityResolutionService unit tests with mocked repositories and directory."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.task import Page
from app.application.use_cases.tasks import VisibilityResolutionService
from app.domain.enums import AssignmentStrategy, ControllerType
from app.domain.exceptions import UpstreamServiceException, ValidationException
from app.domain.value_objects.core import VisibilityContext


@pytest.fixture
def mocks(make_task, student):
    task_repo = AsyncMock()
    control_repo = AsyncMock()
    directory = AsyncMock()
    task_repo.get_by_id = AsyncMock(return_value=make_task())
    control_repo.find_applicable = AsyncMock(return_value=[])
    directory.get_student = AsyncMock(return_value=student)
    svc = VisibilityResolutionService(task_repo, control_repo, directory)
    return svc, task_repo, control_repo, directory


async def test_resolve_visible_by_default(mocks) -> None:
    svc, _, control_repo, _ = mocks
    verdict = await svc.resolve("task-1", "stu-1")
    assert verdict.can_see is True
    task_ids, student_id, controllers = control_repo.find_applicable.await_args.args
    assert task_ids == ["task-1"]
    assert student_id == "stu-1"
    assert controllers == {ControllerType.PARENT: "par-1", ControllerType.SCHOOL: "sch-1"}


async def test_resolve_missing_task_is_verdict_not_error(mocks) -> None:
    svc, task_repo, _, directory = mocks
    task_repo.get_by_id.return_value = None
    verdict = await svc.resolve("task-1", "stu-1")
    assert verdict.can_see is False
    assert verdict.reason == "Task not found or deleted"
    directory.get_student.assert_not_called()


async def test_resolve_applies_parent_hide(mocks, make_control) -> None:
    svc, _, control_repo, _ = mocks
    control_repo.find_applicable.return_value = [
        make_control(ControllerType.PARENT, "par-1", ("stu-1",), False)
    ]
    verdict = await svc.resolve("task-1", "stu-1")
    assert verdict.reason == "Hidden by parent"


async def test_resolve_propagates_directory_failure(mocks) -> None:
    svc, _, _, directory = mocks
    directory.get_student.side_effect = UpstreamServiceException("student-directory")
    with pytest.raises(UpstreamServiceException):
        await svc.resolve("task-1", "stu-1")


async def test_resolve_rejects_malformed_student_id(mocks) -> None:
    svc, task_repo, _, _ = mocks
    with pytest.raises(ValidationException):
        await svc.resolve("task-1", "stu 1")
    task_repo.get_by_id.assert_not_called()


async def test_visible_tasks_filters_candidates(mocks, make_task, make_control) -> None:
    svc, task_repo, control_repo, _ = mocks
    open_task = make_task(task_id="task-1")
    hidden_task = make_task(task_id="task-2")
    untargeted = make_task(
        task_id="task-3",
        strategy=AssignmentStrategy.SCHOOL_BASED,
        criteria={"school_ids": ["sch-9"]},
    )
    task_repo.list_candidates_for_student = AsyncMock(
        return_value=[open_task, hidden_task, untargeted]
    )
    control_repo.find_applicable.return_value = [
        make_control(ControllerType.PARENT, "par-1", ("stu-1",), False, task_id="task-2")
    ]
    result = await svc.visible_tasks_for_student("stu-1", page=Page(page=2, limit=3))
    assert [item.task.id for item in result.tasks] == ["task-1"]
    assert result.candidate_count == 3
    assert (result.page, result.limit) == (2, 3)
    kwargs = task_repo.list_candidates_for_student.await_args.kwargs
    assert (kwargs["skip"], kwargs["limit"]) == (3, 3)
    control_repo.find_applicable.assert_awaited_once()


async def test_visible_tasks_without_candidates_skips_control_query(mocks) -> None:
    svc, task_repo, control_repo, _ = mocks
    task_repo.list_candidates_for_student = AsyncMock(return_value=[])
    result = await svc.visible_tasks_for_student("stu-1")
    assert result.tasks == []
    control_repo.find_applicable.assert_not_called()


async def test_controllable_tasks_validates_controller_type(mocks) -> None:
    svc, task_repo, _, _ = mocks
    with pytest.raises(ValidationException):
        await svc.controllable_tasks_for("district", "d-1")
    task_repo.list_controllable.assert_not_called()


async def test_controllable_tasks_passes_filters(mocks, make_task) -> None:
    svc, task_repo, _, _ = mocks
    task_repo.list_controllable = AsyncMock(return_value=[make_task()])
    tasks = await svc.controllable_tasks_for("class", "cls-1", status="active")
    assert len(tasks) == 1
    args = task_repo.list_controllable.await_args
    assert args.args == (ControllerType.CLASS, "cls-1")
    assert args.kwargs["status"] == "active"


async def test_parent_children_use_parent_context(mocks, make_task) -> None:
    svc, task_repo, _, directory = mocks
    directory.get_children = AsyncMock(return_value=["stu-1", "stu-2"])
    task_repo.list_candidates_for_student = AsyncMock(return_value=[make_task()])
    results = await svc.tasks_for_parent_children("par-7")
    assert [r.student_id for r in results] == ["stu-1", "stu-2"]
    assert directory.get_student.await_count == 2


async def test_resolve_uses_context_class(mocks) -> None:
    svc, _, control_repo, _ = mocks
    await svc.resolve("task-1", "stu-1", VisibilityContext(class_id="cls-1"))
    controllers = control_repo.find_applicable.await_args.args[2]
    assert controllers[ControllerType.CLASS] == "cls-1"
