"""Assignment-criteria evaluation: does a task's targeting include a student?

Pure functions over a task and the student's directory record. Used at read
time for every strategy; materialized assignment rows are never consulted
here.
"""

from __future__ import annotations

from collections.abc import Callable

from app.application.dtos.directory import StudentDirectoryRecord
from app.application.dtos.task import TaskResult
from app.domain.enums import ActorRole, AssignmentStrategy
from app.domain.value_objects.core import TargetCriteria

_Predicate = Callable[[TargetCriteria, str, StudentDirectoryRecord], bool]


def _global(criteria: TargetCriteria, student_id: str, student: StudentDirectoryRecord) -> bool:
    return True


def _role_based(
    criteria: TargetCriteria, student_id: str, student: StudentDirectoryRecord
) -> bool:
    # exclude_user_ids is not consulted; only the materializer honors it.
    return ActorRole.STUDENT.value in criteria.roles


def _school_based(
    criteria: TargetCriteria, student_id: str, student: StudentDirectoryRecord
) -> bool:
    """First populated field decides; later fields are not fallbacks for a miss."""
    if criteria.school_ids:
        return student.school_id is not None and student.school_id in criteria.school_ids
    if criteria.class_ids:
        return not set(criteria.class_ids).isdisjoint(student.class_ids)
    if criteria.grade_level is not None:
        return student.grade is not None and student.grade == criteria.grade_level
    return False


def _specific(
    criteria: TargetCriteria, student_id: str, student: StudentDirectoryRecord
) -> bool:
    return student_id in criteria.specific_user_ids


_PREDICATES: dict[AssignmentStrategy, _Predicate] = {
    AssignmentStrategy.GLOBAL: _global,
    AssignmentStrategy.ROLE_BASED: _role_based,
    AssignmentStrategy.SCHOOL_BASED: _school_based,
    AssignmentStrategy.SPECIFIC: _specific,
}


def meets_criteria(
    task: TaskResult, student_id: str, student: StudentDirectoryRecord
) -> bool:
    """Return True if the task's targeting includes the student.

    Only the criteria fields that belong to the task's strategy are read.

    Args:
        task: Task being evaluated.
        student_id: Student to test.
        student: Directory record for the student.

    Returns:
        True when the student is targeted.
    """
    predicate = _PREDICATES.get(task.assignment_strategy)
    if predicate is None:
        return False
    return predicate(task.target_criteria, student_id, student)
