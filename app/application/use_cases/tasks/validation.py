"""Input checks shared by task use cases. Raise ValidationException before any I/O."""

from __future__ import annotations

from collections.abc import Iterable

from app.domain.enums import ControllerType
from app.domain.exceptions import ValidationException
from app.domain.value_objects.core import (
    StudentIdSet,
    VisibilityContext,
    validate_entity_id,
)


def require_id(value: str | None, field: str) -> str:
    try:
        return validate_entity_id(value, field)
    except ValueError as e:
        raise ValidationException(str(e), field=field) from e


def require_student_ids(values: Iterable[str] | None) -> list[str]:
    try:
        return list(StudentIdSet(tuple(values or ())))
    except ValueError as e:
        raise ValidationException(str(e), field="student_ids") from e


def parse_controller_type(value: str | ControllerType | None) -> ControllerType:
    try:
        return ControllerType(value)
    except ValueError as e:
        raise ValidationException(
            "controller_type must be 'parent', 'school', or 'class'",
            field="controller_type",
        ) from e


def build_context(
    parent_id: str | None = None,
    school_id: str | None = None,
    class_id: str | None = None,
) -> VisibilityContext:
    try:
        return VisibilityContext(parent_id=parent_id, school_id=school_id, class_id=class_id)
    except ValueError as e:
        raise ValidationException(str(e), field="context") from e
