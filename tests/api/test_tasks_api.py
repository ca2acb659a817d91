"""Task endpoint tests with use cases replaced through dependency_overrides (no DB)."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import (
    get_task_query_service,
    get_task_service,
    get_visibility_control_query_service,
    get_visibility_control_service,
    get_visibility_resolution_service,
)
from app.application.dtos.task_assignment import DeactivationResult, MaterializationResult
from app.application.dtos.visibility import ControlCheck, SetControlResult, VisibilityVerdict
from app.domain.enums import AssignmentStrategy, ControllerType
from app.domain.exceptions import (
    ImmutableFieldException,
    ResourceNotFoundException,
    UpstreamServiceException,
)
from app.main import app

TASK_BODY = {
    "title": "Read chapter 3",
    "category": "academic",
    "assignment_strategy": "specific",
    "target_criteria": {"specific_user_ids": ["stu-1", "stu-2"]},
}


@pytest.fixture
def task_svc(make_task) -> AsyncMock:
    svc = AsyncMock()
    svc.create_task = AsyncMock(
        return_value=(
            make_task(strategy=AssignmentStrategy.SPECIFIC),
            MaterializationResult(
                task_id="task-1",
                assignment_type="specific",
                message="Task assigned to 0 students",
            ),
        )
    )
    svc.get_task = AsyncMock(return_value=make_task())
    svc.list_tasks = AsyncMock(return_value=[make_task(), make_task(task_id="task-2")])
    app.dependency_overrides[get_task_service] = lambda: svc
    app.dependency_overrides[get_task_query_service] = lambda: svc
    return svc


@pytest.fixture
def control_svc(make_control) -> AsyncMock:
    svc = AsyncMock()
    control = make_control(ControllerType.PARENT, "par-1", ("stu-1",), False)
    svc.set_control = AsyncMock(
        side_effect=[
            SetControlResult(control=control, created=True),
            SetControlResult(control=control, created=False),
        ]
    )
    svc.list_for_task = AsyncMock(return_value=[control])
    app.dependency_overrides[get_visibility_control_service] = lambda: svc
    app.dependency_overrides[get_visibility_control_query_service] = lambda: svc
    return svc


@pytest.fixture
def resolution_svc() -> AsyncMock:
    svc = AsyncMock()
    app.dependency_overrides[get_visibility_resolution_service] = lambda: svc
    return svc


async def test_create_task_requires_token(client: AsyncClient, task_svc) -> None:
    response = await client.post("/api/v1/tasks", json=TASK_BODY)
    assert response.status_code == 401
    assert response.headers.get("WWW-Authenticate") == "Bearer"
    assert response.json()["error"] == "AUTHENTICATION_ERROR"


async def test_create_task_rejects_invalid_token(client: AsyncClient, task_svc) -> None:
    response = await client.post(
        "/api/v1/tasks", json=TASK_BODY, headers={"Authorization": "Bearer nope"}
    )
    assert response.status_code == 401


async def test_student_cannot_create_task(client: AsyncClient, task_svc, auth) -> None:
    response = await client.post(
        "/api/v1/tasks", json=TASK_BODY, headers=auth("stu-1", "student")
    )
    assert response.status_code == 403
    assert response.json()["error"] == "PERMISSION_DENIED"
    task_svc.create_task.assert_not_called()


async def test_teacher_creates_task(client: AsyncClient, task_svc, auth) -> None:
    response = await client.post(
        "/api/v1/tasks", json=TASK_BODY, headers=auth("teacher-1", "teacher")
    )
    assert response.status_code == 201
    data = response.json()
    assert data["task"]["id"] == "task-1"
    assert data["task"]["assignment_strategy"] == "specific"
    assert data["assignment"]["assignment_type"] == "specific"
    data_in, actor, _ = task_svc.create_task.await_args.args
    assert data_in.target_criteria.specific_user_ids == ("stu-1", "stu-2")
    assert actor.user_id == "teacher-1"


async def test_create_task_missing_title_is_422(client: AsyncClient, task_svc, auth) -> None:
    body = {k: v for k, v in TASK_BODY.items() if k != "title"}
    response = await client.post("/api/v1/tasks", json=body, headers=auth("t-1", "teacher"))
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_create_task_malformed_criteria_id_is_400(
    client: AsyncClient, task_svc, auth
) -> None:
    body = {**TASK_BODY, "target_criteria": {"specific_user_ids": ["stu 1"]}}
    response = await client.post("/api/v1/tasks", json=body, headers=auth("t-1", "teacher"))
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "target_criteria"


async def test_list_tasks_passes_filters_and_page(client: AsyncClient, task_svc, auth) -> None:
    response = await client.get(
        "/api/v1/tasks?status=active&page=2&limit=5", headers=auth("t-1", "teacher")
    )
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == ["task-1", "task-2"]
    filters, page = task_svc.list_tasks.await_args.args
    assert filters.status == "active"
    assert (page.page, page.limit, page.skip) == (2, 5, 5)


async def test_list_tasks_limit_over_max_is_400(client: AsyncClient, task_svc, auth) -> None:
    response = await client.get("/api/v1/tasks?limit=1000", headers=auth("t-1", "teacher"))
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "limit"


async def test_get_missing_task_is_404(client: AsyncClient, task_svc, auth) -> None:
    task_svc.get_task.side_effect = ResourceNotFoundException("task", "task-9")
    response = await client.get("/api/v1/tasks/task-9", headers=auth("t-1", "teacher"))
    assert response.status_code == 404
    assert response.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_patch_strategy_change_is_400(client: AsyncClient, task_svc, auth) -> None:
    task_svc.update_task.side_effect = ImmutableFieldException("assignment_strategy")
    response = await client.patch(
        "/api/v1/tasks/task-1",
        json={"assignment_strategy": "global"},
        headers=auth("t-1", "teacher"),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "IMMUTABLE_FIELD"


async def test_delete_task_returns_204(client: AsyncClient, task_svc, auth) -> None:
    response = await client.delete("/api/v1/tasks/task-1", headers=auth("a-1", "school_admin"))
    assert response.status_code == 204
    task_svc.delete_task.assert_awaited_once()


async def test_unassign_returns_count(client: AsyncClient, task_svc, auth) -> None:
    task_svc.unassign_students.return_value = DeactivationResult(
        task_id="task-1", deactivated_count=2, message="Deactivated 2 assignments"
    )
    response = await client.post(
        "/api/v1/tasks/task-1/unassign",
        json={"student_ids": ["stu-1", "stu-2"], "reason": "moved class"},
        headers=auth("t-1", "teacher"),
    )
    assert response.status_code == 200
    assert response.json()["deactivated_count"] == 2
    assert task_svc.unassign_students.await_args.args[3] == "moved class"


async def test_set_visibility_created_then_replaced(
    client: AsyncClient, control_svc, auth
) -> None:
    body = {
        "controller_type": "parent",
        "controller_id": "par-1",
        "student_ids": ["stu-1"],
        "is_visible": False,
    }
    headers = auth("user-9", "parent", parent="par-1")
    first = await client.put("/api/v1/tasks/task-1/visibility", json=body, headers=headers)
    second = await client.put("/api/v1/tasks/task-1/visibility", json=body, headers=headers)
    assert first.status_code == 201
    assert first.json()["created"] is True
    assert second.status_code == 200
    assert second.json()["control"]["controlled_student_ids"] == ["stu-1"]


async def test_student_cannot_set_visibility(client: AsyncClient, control_svc, auth) -> None:
    response = await client.put(
        "/api/v1/tasks/task-1/visibility",
        json={"controller_type": "parent", "controller_id": "par-1", "student_ids": ["stu-1"]},
        headers=auth("stu-1", "student"),
    )
    assert response.status_code == 403


async def test_list_visibility_controls(client: AsyncClient, control_svc, auth) -> None:
    response = await client.get(
        "/api/v1/tasks/task-1/visibility?controller_type=parent",
        headers=auth("t-1", "teacher"),
    )
    assert response.status_code == 200
    assert response.json()[0]["controller_type"] == "parent"


async def test_resolve_visibility_returns_verdict(
    client: AsyncClient, resolution_svc, auth
) -> None:
    resolution_svc.resolve.return_value = VisibilityVerdict(
        can_see=False,
        reason="Hidden by parent",
        controls={
            ControllerType.PARENT: ControlCheck(
                ControllerType.PARENT, "par-1", True, is_visible=False, control_id="ctl-1"
            )
        },
    )
    response = await client.get(
        "/api/v1/tasks/task-1/visibility/stu-1?class_id=cls-1",
        headers=auth("stu-1", "student"),
    )
    assert response.status_code == 200
    data = response.json()
    assert data == {
        "task_id": "task-1",
        "student_id": "stu-1",
        "can_see": False,
        "reason": "Hidden by parent",
        "controls": {
            "parent": {
                "controller_type": "parent",
                "controller_id": "par-1",
                "has_control": True,
                "is_visible": False,
                "control_id": "ctl-1",
            }
        },
    }
    context = resolution_svc.resolve.await_args.args[2]
    assert context.class_id == "cls-1"


async def test_resolve_malformed_context_is_400(
    client: AsyncClient, resolution_svc, auth
) -> None:
    response = await client.get(
        "/api/v1/tasks/task-1/visibility/stu-1?parent_id=par%201",
        headers=auth("stu-1", "student"),
    )
    assert response.status_code == 400
    resolution_svc.resolve.assert_not_called()


async def test_directory_outage_is_502(client: AsyncClient, resolution_svc, auth) -> None:
    resolution_svc.resolve.side_effect = UpstreamServiceException("student-directory")
    response = await client.get(
        "/api/v1/tasks/task-1/visibility/stu-1", headers=auth("stu-1", "student")
    )
    assert response.status_code == 502
    assert response.json()["details"]["service"] == "student-directory"
