"""VisibilityControlService unit tests with mocked repositories."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.actor import Actor
from app.application.dtos.visibility import SetControlResult
from app.application.use_cases.tasks import VisibilityControlService
from app.domain.enums import ControllerType
from app.domain.exceptions import ResourceNotFoundException, ValidationException

PARENT = Actor(user_id="user-9", roles=("parent",), profile_ids={"parent": "par-1"})


@pytest.fixture
def mocks(make_task, make_control):
    control_repo = AsyncMock()
    task_repo = AsyncMock()
    task_repo.get_by_id = AsyncMock(return_value=make_task())
    control_repo.upsert = AsyncMock(
        return_value=SetControlResult(
            control=make_control(ControllerType.PARENT, "par-1", ("stu-1",), False),
            created=True,
        )
    )
    return VisibilityControlService(control_repo, task_repo), control_repo, task_repo


async def test_set_control_upserts_with_actor(mocks) -> None:
    svc, control_repo, _ = mocks
    result = await svc.set_control(
        "task-1", "parent", "par-1", ["stu-1", "stu-1"], PARENT, is_visible=False
    )
    assert result.created is True
    kwargs = control_repo.upsert.await_args.kwargs
    assert kwargs["controller_type"] == ControllerType.PARENT
    assert kwargs["student_ids"] == ["stu-1"]
    assert kwargs["changed_by"] == "user-9"
    assert kwargs["changed_by_role"] == "parent"
    assert kwargs["reason"] is None


async def test_set_control_rejects_unknown_controller_type(mocks) -> None:
    svc, control_repo, task_repo = mocks
    with pytest.raises(ValidationException) as exc_info:
        await svc.set_control("task-1", "district", "d-1", ["stu-1"], PARENT)
    assert exc_info.value.details["field"] == "controller_type"
    task_repo.get_by_id.assert_not_called()
    control_repo.upsert.assert_not_called()


async def test_set_control_requires_student_ids(mocks) -> None:
    svc, control_repo, _ = mocks
    with pytest.raises(ValidationException, match="student_ids array is required"):
        await svc.set_control("task-1", "parent", "par-1", [], PARENT)
    control_repo.upsert.assert_not_called()


async def test_set_control_on_deleted_task_is_not_found(mocks, make_task) -> None:
    svc, control_repo, task_repo = mocks
    task_repo.get_by_id.return_value = make_task(is_deleted=True)
    with pytest.raises(ResourceNotFoundException):
        await svc.set_control("task-1", "parent", "par-1", ["stu-1"], PARENT)
    control_repo.upsert.assert_not_called()


async def test_bulk_set_control_reports_missing_tasks(mocks, make_task) -> None:
    svc, _, task_repo = mocks

    async def get_by_id(task_id):
        return None if task_id == "task-gone" else make_task(task_id=task_id)

    task_repo.get_by_id = AsyncMock(side_effect=get_by_id)
    result = await svc.bulk_set_control(
        ["task-1", "task-gone"], "parent", "par-1", ["stu-1"], PARENT, is_visible=False
    )
    assert [item.task_id for item in result.succeeded] == ["task-1"]
    assert result.succeeded[0].control_id == "ctl-1"
    assert [f.item_id for f in result.failures] == ["task-gone"]


async def test_list_for_controller_joins_tasks(mocks, make_task, make_control) -> None:
    svc, control_repo, task_repo = mocks
    control = make_control(ControllerType.SCHOOL, "sch-1", ("stu-1",), False)
    control_repo.list_for_controller = AsyncMock(return_value=[control])
    task_repo.get_many = AsyncMock(return_value={"task-1": make_task()})

    plain = await svc.list_for_controller("school", "sch-1")
    assert plain[0].task is None
    task_repo.get_many.assert_not_called()

    joined = await svc.list_for_controller("school", "sch-1", include_task_details=True)
    assert joined[0].task.id == "task-1"
    task_repo.get_many.assert_awaited_once_with(["task-1"])
