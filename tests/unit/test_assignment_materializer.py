"""AssignmentMaterializer unit tests with a mocked assignment repository."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.actor import Actor
from app.application.dtos.task_assignment import (
    AssignmentOutcome,
    TaskAssignmentResult,
)
from app.application.services.criteria_evaluator import meets_criteria
from app.application.use_cases.tasks import AssignmentMaterializer
from app.domain.enums import AssignmentStrategy

ACTOR = Actor(user_id="teacher-1", roles=("teacher",))


def _row(task_id: str, student_id: str) -> TaskAssignmentResult:
    return TaskAssignmentResult(
        id=f"asg-{student_id}",
        task_id=task_id,
        student_id=student_id,
        assigned_by="teacher-1",
        assigned_by_role="teacher",
        source="teacher",
        school_id=None,
        class_id=None,
        is_active=True,
        assigned_at=datetime(2025, 1, 15, tzinfo=timezone.utc),
        deactivated_at=None,
        deactivated_by=None,
        deactivation_reason=None,
    )


@pytest.fixture
def repo() -> AsyncMock:
    repo = AsyncMock()
    outcomes = {
        "stu-1": AssignmentOutcome.CREATED,
        "stu-2": AssignmentOutcome.REUSED,
        "stu-3": AssignmentOutcome.REACTIVATED,
    }

    async def ensure_active(task_id, student_id, actor, context):
        if student_id == "stu-bad":
            raise RuntimeError("constraint violated")
        return _row(task_id, student_id), outcomes.get(student_id, AssignmentOutcome.CREATED)

    repo.ensure_active = AsyncMock(side_effect=ensure_active)
    repo.deactivate = AsyncMock(return_value=2)
    return repo


async def test_dynamic_strategy_writes_nothing(repo, make_task) -> None:
    task = make_task(strategy=AssignmentStrategy.GLOBAL)
    result = await AssignmentMaterializer(repo).materialize(task, ACTOR)
    assert result.assignment_type == "strategy-based"
    assert "global" in result.message
    assert result.assigned_count == 0
    repo.ensure_active.assert_not_called()


async def test_specific_counts_each_outcome(repo, make_task) -> None:
    task = make_task(
        strategy=AssignmentStrategy.SPECIFIC,
        criteria={"specific_user_ids": ["stu-1", "stu-2", "stu-3"]},
    )
    result = await AssignmentMaterializer(repo).materialize(task, ACTOR)
    assert result.assignment_type == "specific"
    assert result.assigned_count == 3
    assert (result.created_count, result.reused_count, result.reactivated_count) == (1, 1, 1)
    assert result.message == "Task assigned to 3 students"


async def test_exclusions_do_not_apply_to_listed_students(repo, make_task, student) -> None:
    """A listed student gets a row and passes the criteria gate even when excluded."""
    task = make_task(
        strategy=AssignmentStrategy.SPECIFIC,
        criteria={"specific_user_ids": ["stu-1"], "exclude_user_ids": ["stu-1"]},
    )
    result = await AssignmentMaterializer(repo).materialize(task, ACTOR)
    assert [a.student_id for a in result.assignments] == ["stu-1"]
    assert meets_criteria(task, "stu-1", student) is True


async def test_one_failure_does_not_stop_the_rest(repo, make_task) -> None:
    task = make_task(
        strategy=AssignmentStrategy.SPECIFIC,
        criteria={"specific_user_ids": ["stu-1", "stu-bad", "stu-3"]},
    )
    result = await AssignmentMaterializer(repo).materialize(task, ACTOR)
    assert result.assigned_count == 2
    assert len(result.failures) == 1
    assert result.failures[0].item_id == "stu-bad"


async def test_explicit_student_ids_override_criteria(repo, make_task) -> None:
    task = make_task(
        strategy=AssignmentStrategy.SPECIFIC, criteria={"specific_user_ids": ["stu-1"]}
    )
    result = await AssignmentMaterializer(repo).materialize(task, ACTOR, student_ids=["stu-3"])
    assert [a.student_id for a in result.assignments] == ["stu-3"]


async def test_unassign_deactivates_with_default_reason(repo, make_task) -> None:
    task = make_task(strategy=AssignmentStrategy.SPECIFIC)
    result = await AssignmentMaterializer(repo).unassign(task, ["stu-1", "stu-2"], ACTOR)
    assert result.deactivated_count == 2
    repo.deactivate.assert_awaited_once_with(
        "task-1",
        ["stu-1", "stu-2"],
        deactivated_by="teacher-1",
        reason="Manual deactivation",
    )


async def test_unassign_on_dynamic_task_is_a_noop(repo, make_task) -> None:
    task = make_task(strategy=AssignmentStrategy.ROLE_BASED)
    result = await AssignmentMaterializer(repo).unassign(task, ["stu-1"], ACTOR)
    assert result.deactivated_count == 0
    repo.deactivate.assert_not_called()
