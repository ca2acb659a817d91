"""Domain enumerations for task targeting and visibility control.

Enums represent fixed sets of domain values (e.g. assignment strategy).
"""

from enum import Enum


class _ValuesMixin:
    """Adds values() to str-backed enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [member.value for member in cls]  # type: ignore[attr-defined]


class AssignmentStrategy(_ValuesMixin, str, Enum):
    """How a task selects the students it is for.

    Immutable once the task is created. Only ``SPECIFIC`` produces
    materialized assignment rows; the others are evaluated at read time.
    """

    SPECIFIC = "specific"
    ROLE_BASED = "role_based"
    SCHOOL_BASED = "school_based"
    GLOBAL = "global"


class ControllerType(_ValuesMixin, str, Enum):
    """Authority that may override a student's visibility of a task."""

    PARENT = "parent"
    SCHOOL = "school"
    CLASS = "class"


# Order in which override authorities are consulted during resolution.
OVERRIDE_PRECEDENCE: tuple[ControllerType, ...] = (
    ControllerType.PARENT,
    ControllerType.SCHOOL,
    ControllerType.CLASS,
)


class TaskStatus(_ValuesMixin, str, Enum):
    """Authoring lifecycle of a task."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TaskCategory(_ValuesMixin, str, Enum):
    """Primary task category."""

    ACADEMIC = "academic"
    HOME = "home"
    BEHAVIOR = "behavior"
    EXTRACURRICULAR = "extracurricular"
    ATTENDANCE = "attendance"
    SYSTEM = "system"
    CUSTOM = "custom"


class ActorRole(_ValuesMixin, str, Enum):
    """Platform roles carried by a verified caller."""

    STUDENT = "student"
    PARENT = "parent"
    TEACHER = "teacher"
    SCHOOL_ADMIN = "school_admin"
    SOCIAL_WORKER = "social_worker"
    PLATFORM_ADMIN = "platform_admin"
    SUB_ADMIN = "sub_admin"
    SYSTEM = "system"


class AssignmentSource(_ValuesMixin, str, Enum):
    """Channel through which a materialized assignment was created."""

    ADMIN = "admin"
    PARENT = "parent"
    SCHOOL = "school"
    TEACHER = "teacher"
    SYSTEM = "system"
    BULK = "bulk"
