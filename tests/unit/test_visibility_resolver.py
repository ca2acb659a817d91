"""Tests for resolve_visibility: targeting, override precedence, default policy."""

from app.application.dtos.directory import StudentDirectoryRecord
from app.application.services.visibility_resolver import (
    REASON_APPROVED_BY_PARENT,
    REASON_APPROVED_BY_SCHOOL,
    REASON_CRITERIA_NOT_MET,
    REASON_DIRECT,
    REASON_NO_APPROVAL,
    REASON_NOT_FOUND,
    controller_ids_for,
    resolve_visibility,
)
from app.domain.enums import AssignmentStrategy, ControllerType
from app.domain.value_objects.core import VisibilityContext

NO_DEFAULTS = {"for_parents": False, "for_schools": False, "for_students": False}


def test_missing_task_is_not_visible(student) -> None:
    verdict = resolve_visibility(None, "stu-1", student, VisibilityContext(), [])
    assert verdict.can_see is False
    assert verdict.reason == REASON_NOT_FOUND


def test_deleted_task_is_not_visible(make_task, student) -> None:
    task = make_task(is_deleted=True)
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [])
    assert verdict.reason == REASON_NOT_FOUND


def test_untargeted_student_never_sees_task(make_task, make_control, student) -> None:
    """A visible override cannot grant a task to a student outside its targeting."""
    task = make_task(
        strategy=AssignmentStrategy.SPECIFIC, criteria={"specific_user_ids": ["stu-2"]}
    )
    approve = make_control(ControllerType.PARENT, "par-1", ("stu-1",), True)
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [approve])
    assert verdict.can_see is False
    assert verdict.reason == REASON_CRITERIA_NOT_MET


def test_default_policy_approves_through_parent(make_task, student) -> None:
    task = make_task()
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [])
    assert verdict.can_see is True
    assert verdict.reason == REASON_APPROVED_BY_PARENT


def test_default_policy_falls_back_to_school(make_task, student) -> None:
    task = make_task(visibility={"for_parents": False, "for_schools": True})
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [])
    assert verdict.can_see is True
    assert verdict.reason == REASON_APPROVED_BY_SCHOOL


def test_no_default_and_no_controls_hides(make_task, student) -> None:
    task = make_task(visibility=NO_DEFAULTS)
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [])
    assert verdict.can_see is False
    assert verdict.reason == REASON_NO_APPROVAL


def test_direct_visibility_when_for_students(make_task, student) -> None:
    task = make_task(visibility={**NO_DEFAULTS, "for_students": True})
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [])
    assert verdict.can_see is True
    assert verdict.reason == REASON_DIRECT


def test_parent_hide_beats_school_show(make_task, make_control, student) -> None:
    task = make_task()
    controls = [
        make_control(ControllerType.PARENT, "par-1", ("stu-1",), False, control_id="c1"),
        make_control(ControllerType.SCHOOL, "sch-1", ("stu-1",), True, control_id="c2"),
    ]
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), controls)
    assert verdict.can_see is False
    assert verdict.reason == "Hidden by parent"
    assert verdict.controls[ControllerType.PARENT].control_id == "c1"


def test_parent_hide_beats_direct_visibility(make_task, make_control, student) -> None:
    task = make_task(visibility={"for_students": True})
    hide = make_control(ControllerType.PARENT, "par-1", ("stu-1",), False)
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [hide])
    assert verdict.can_see is False


def test_school_hide_applies_after_parent_show(make_task, make_control, student) -> None:
    task = make_task()
    controls = [
        make_control(ControllerType.PARENT, "par-1", ("stu-1",), True, control_id="c1"),
        make_control(ControllerType.SCHOOL, "sch-1", ("stu-1",), False, control_id="c2"),
    ]
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), controls)
    assert verdict.can_see is False
    assert verdict.reason == "Hidden by school"


def test_class_hide_needs_class_in_context(make_task, make_control, student) -> None:
    task = make_task()
    hide = make_control(ControllerType.CLASS, "cls-1", ("stu-1",), False)
    without = resolve_visibility(task, "stu-1", student, VisibilityContext(), [hide])
    assert without.can_see is True
    with_class = resolve_visibility(
        task, "stu-1", student, VisibilityContext(class_id="cls-1"), [hide]
    )
    assert with_class.can_see is False
    assert with_class.reason == "Hidden by class/teacher"


def test_class_show_is_not_an_approval(make_task, make_control, student) -> None:
    """Class controls only hide; a visible class control does not approve."""
    task = make_task(visibility=NO_DEFAULTS)
    show = make_control(ControllerType.CLASS, "cls-1", ("stu-1",), True)
    verdict = resolve_visibility(
        task, "stu-1", student, VisibilityContext(class_id="cls-1"), [show]
    )
    assert verdict.can_see is False
    assert verdict.reason == REASON_NO_APPROVAL


def test_explicit_parent_approval_overrides_default(make_task, make_control, student) -> None:
    task = make_task(visibility=NO_DEFAULTS)
    show = make_control(ControllerType.PARENT, "par-1", ("stu-1",), True)
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [show])
    assert verdict.can_see is True
    assert verdict.reason == REASON_APPROVED_BY_PARENT


def test_control_for_other_students_is_ignored(make_task, make_control, student) -> None:
    task = make_task()
    hide = make_control(ControllerType.PARENT, "par-1", ("stu-2",), False)
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [hide])
    assert verdict.can_see is True
    assert verdict.controls[ControllerType.PARENT].has_control is False


def test_control_of_another_parent_is_ignored(make_task, make_control, student) -> None:
    task = make_task()
    hide = make_control(ControllerType.PARENT, "par-2", ("stu-1",), False)
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [hide])
    assert verdict.can_see is True


def test_context_parent_replaces_directory_parent(make_task, make_control, student) -> None:
    task = make_task()
    hide = make_control(ControllerType.PARENT, "par-2", ("stu-1",), False)
    verdict = resolve_visibility(
        task, "stu-1", student, VisibilityContext(parent_id="par-2"), [hide]
    )
    assert verdict.reason == "Hidden by parent"


def test_control_on_another_task_is_ignored(make_task, make_control, student) -> None:
    task = make_task(task_id="task-1")
    hide = make_control(ControllerType.PARENT, "par-1", ("stu-1",), False, task_id="task-2")
    verdict = resolve_visibility(task, "stu-1", student, VisibilityContext(), [hide])
    assert verdict.can_see is True


def test_controller_ids_fall_back_to_directory(student) -> None:
    assert controller_ids_for(student, VisibilityContext()) == {
        ControllerType.PARENT: "par-1",
        ControllerType.SCHOOL: "sch-1",
    }
    bare = StudentDirectoryRecord(student_id="stu-9")
    assert controller_ids_for(bare, VisibilityContext(class_id="cls-3")) == {
        ControllerType.CLASS: "cls-3"
    }
