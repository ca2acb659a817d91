"""Domain value objects for task targeting and visibility.

Value objects are immutable and validate themselves on construction
(ValueError on failure). They have no identity, only value.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

# Ids issued by this service (cuid2) and by the directory share this shape.
ENTITY_ID_MAX_LENGTH = 64
_ENTITY_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1," + str(ENTITY_ID_MAX_LENGTH) + r"}$")


def validate_entity_id(value: Any, field_name: str = "id") -> str:
    """Return value if it is a well-formed entity id; raise ValueError otherwise."""
    if not isinstance(value, str) or not _ENTITY_ID_RE.fullmatch(value):
        raise ValueError(
            f"{field_name} must be 1-{ENTITY_ID_MAX_LENGTH} characters of "
            "letters, digits, '-' or '_'"
        )
    return value


def _id_tuple(values: Iterable[Any] | None, field_name: str) -> tuple[str, ...]:
    """Validate ids and de-duplicate while keeping first-seen order."""
    if values is None:
        return ()
    if isinstance(values, str):
        raise ValueError(f"{field_name} must be a list of ids")
    seen: dict[str, None] = {}
    for value in values:
        seen[validate_entity_id(value, field_name)] = None
    return tuple(seen)


def _str_tuple(values: Iterable[Any] | None, field_name: str) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        raise ValueError(f"{field_name} must be a list of strings")
    return tuple(dict.fromkeys(str(v).strip() for v in values if str(v).strip()))


@dataclass(frozen=True)
class TargetCriteria:
    """Who a task is for. Which fields count depends on the assignment strategy.

    Fields outside the active strategy may be populated; they are ignored
    by the evaluator rather than rejected.
    """

    roles: tuple[str, ...] = ()
    school_ids: tuple[str, ...] = ()
    class_ids: tuple[str, ...] = ()
    grade_level: str | None = None
    specific_user_ids: tuple[str, ...] = ()
    exclude_user_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", _str_tuple(self.roles, "roles"))
        object.__setattr__(self, "school_ids", _id_tuple(self.school_ids, "school_ids"))
        object.__setattr__(self, "class_ids", _id_tuple(self.class_ids, "class_ids"))
        object.__setattr__(
            self,
            "specific_user_ids",
            _id_tuple(self.specific_user_ids, "specific_user_ids"),
        )
        object.__setattr__(
            self,
            "exclude_user_ids",
            _id_tuple(self.exclude_user_ids, "exclude_user_ids"),
        )
        if self.grade_level is not None:
            grade = str(self.grade_level).strip()
            object.__setattr__(self, "grade_level", grade or None)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "TargetCriteria":
        """Build from a stored or request mapping; unknown keys are ignored."""
        data = data or {}
        return cls(
            roles=data.get("roles") or (),
            school_ids=data.get("school_ids") or (),
            class_ids=data.get("class_ids") or (),
            grade_level=data.get("grade_level"),
            specific_user_ids=data.get("specific_user_ids") or (),
            exclude_user_ids=data.get("exclude_user_ids") or (),
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible form (lists, not tuples) for storage."""
        return {
            "roles": list(self.roles),
            "school_ids": list(self.school_ids),
            "class_ids": list(self.class_ids),
            "grade_level": self.grade_level,
            "specific_user_ids": list(self.specific_user_ids),
            "exclude_user_ids": list(self.exclude_user_ids),
        }

    def with_specific_users(self, user_ids: Iterable[str]) -> "TargetCriteria":
        """Return a copy whose specific_user_ids is replaced by user_ids."""
        return TargetCriteria(
            roles=self.roles,
            school_ids=self.school_ids,
            class_ids=self.class_ids,
            grade_level=self.grade_level,
            specific_user_ids=tuple(user_ids),
            exclude_user_ids=self.exclude_user_ids,
        )


@dataclass(frozen=True)
class DefaultVisibility:
    """Per-task policy consulted when no controller override hides the task."""

    for_parents: bool = True
    for_schools: bool = True
    for_students: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "DefaultVisibility":
        data = data or {}
        default = cls()
        return cls(
            for_parents=bool(data.get("for_parents", default.for_parents)),
            for_schools=bool(data.get("for_schools", default.for_schools)),
            for_students=bool(data.get("for_students", default.for_students)),
        )

    def to_dict(self) -> dict[str, bool]:
        return {
            "for_parents": self.for_parents,
            "for_schools": self.for_schools,
            "for_students": self.for_students,
        }


@dataclass(frozen=True)
class VisibilityContext:
    """Optional controller ids supplied by the caller for one resolution.

    When absent, parent and school ids fall back to the student's
    directory record; the class id has no fallback.
    """

    parent_id: str | None = None
    school_id: str | None = None
    class_id: str | None = None

    def __post_init__(self) -> None:
        for name in ("parent_id", "school_id", "class_id"):
            value = getattr(self, name)
            if value is not None:
                validate_entity_id(value, name)


@dataclass(frozen=True)
class StudentIdSet:
    """Non-empty, de-duplicated list of student ids for a bulk mutation."""

    values: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        ids = _id_tuple(self.values, "student_ids")
        if not ids:
            raise ValueError("student_ids array is required")
        object.__setattr__(self, "values", ids)

    def __iter__(self):
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)
