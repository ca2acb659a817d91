"""Visibility resolution: combine targeting, overrides, and default policy.

Pure decision logic. The caller loads the task, the student's directory
record, and the candidate control rows; this module decides. Override
authorities are consulted in OVERRIDE_PRECEDENCE order through one generic
check, and the first explicit hide wins.
"""

from __future__ import annotations

from collections.abc import Iterable

from app.application.dtos.directory import StudentDirectoryRecord
from app.application.dtos.task import TaskResult
from app.application.dtos.visibility import (
    ControlCheck,
    VisibilityControlResult,
    VisibilityVerdict,
)
from app.application.services.criteria_evaluator import meets_criteria
from app.domain.enums import OVERRIDE_PRECEDENCE, ControllerType
from app.domain.value_objects.core import DefaultVisibility, VisibilityContext

REASON_NOT_FOUND = "Task not found or deleted"
REASON_CRITERIA_NOT_MET = "Student does not meet assignment criteria"
REASON_DIRECT = "Direct visibility enabled"
REASON_APPROVED_BY_PARENT = "Approved by parent"
REASON_APPROVED_BY_SCHOOL = "Approved by school"
REASON_NO_APPROVAL = "No parent or school approval"

HIDE_REASONS: dict[ControllerType, str] = {
    ControllerType.PARENT: "Hidden by parent",
    ControllerType.SCHOOL: "Hidden by school",
    ControllerType.CLASS: "Hidden by class/teacher",
}


def controller_ids_for(
    student: StudentDirectoryRecord, context: VisibilityContext
) -> dict[ControllerType, str]:
    """Return the controller id to consult per controller type.

    Parent and school fall back to the directory record; class comes only
    from the request context. Types with no id are omitted.
    """
    candidates = {
        ControllerType.PARENT: context.parent_id or student.primary_parent_id,
        ControllerType.SCHOOL: context.school_id or student.school_id,
        ControllerType.CLASS: context.class_id,
    }
    return {ct: cid for ct, cid in candidates.items() if cid}


def check_override(
    controller_type: ControllerType,
    controller_id: str | None,
    student_id: str,
    controls: Iterable[VisibilityControlResult],
) -> ControlCheck:
    """Look up the one control owned by (controller_type, controller_id) that lists the student."""
    if controller_id is None:
        return ControlCheck(controller_type, None, has_control=False)
    for control in controls:
        if (
            control.controller_type == controller_type
            and control.controller_id == controller_id
            and control.applies_to(student_id)
        ):
            return ControlCheck(
                controller_type,
                controller_id,
                has_control=True,
                is_visible=control.is_visible,
                control_id=control.id,
            )
    return ControlCheck(controller_type, controller_id, has_control=False)


def _approval(check: ControlCheck, default: bool) -> bool:
    if check.has_control:
        return bool(check.is_visible)
    return default


def apply_default_policy(
    policy: DefaultVisibility, consulted: dict[ControllerType, ControlCheck]
) -> VisibilityVerdict:
    """Decide visibility once no override has hidden the task.

    Class controls are not an approval channel here; they can only hide.
    """
    if policy.for_students:
        return VisibilityVerdict(True, REASON_DIRECT, consulted)
    parent_check = consulted.get(ControllerType.PARENT) or ControlCheck(
        ControllerType.PARENT, None, has_control=False
    )
    school_check = consulted.get(ControllerType.SCHOOL) or ControlCheck(
        ControllerType.SCHOOL, None, has_control=False
    )
    if _approval(parent_check, policy.for_parents):
        return VisibilityVerdict(True, REASON_APPROVED_BY_PARENT, consulted)
    if _approval(school_check, policy.for_schools):
        return VisibilityVerdict(True, REASON_APPROVED_BY_SCHOOL, consulted)
    return VisibilityVerdict(False, REASON_NO_APPROVAL, consulted)


def resolve_visibility(
    task: TaskResult | None,
    student_id: str,
    student: StudentDirectoryRecord,
    context: VisibilityContext,
    controls: Iterable[VisibilityControlResult],
) -> VisibilityVerdict:
    """Return the verdict for one (task, student) pair.

    Args:
        task: Task to resolve; None when it does not exist.
        student_id: Student asking.
        student: Directory record of the student.
        context: Controller ids supplied with the request.
        controls: Control rows on this task (others are ignored by the match).

    Returns:
        VisibilityVerdict with the reason and the controls consulted so far.
    """
    if task is None or task.is_deleted:
        return VisibilityVerdict(False, REASON_NOT_FOUND)
    if not meets_criteria(task, student_id, student):
        return VisibilityVerdict(False, REASON_CRITERIA_NOT_MET)

    task_controls = [c for c in controls if c.task_id == task.id]
    controller_ids = controller_ids_for(student, context)
    consulted: dict[ControllerType, ControlCheck] = {}
    for controller_type in OVERRIDE_PRECEDENCE:
        check = check_override(
            controller_type,
            controller_ids.get(controller_type),
            student_id,
            task_controls,
        )
        consulted[controller_type] = check
        if check.hides:
            return VisibilityVerdict(False, HIDE_REASONS[controller_type], consulted)
    return apply_default_policy(task.default_visibility, consulted)
