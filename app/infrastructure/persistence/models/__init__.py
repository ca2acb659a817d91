"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.mixins import (
    AuditedModel,
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.models.task_assignment import TaskAssignment
from app.infrastructure.persistence.models.task_visibility_control import (
    TaskVisibilityControl,
)

__all__ = [
    "AuditedModel",
    "CuidMixin",
    "SoftDeleteMixin",
    "Task",
    "TaskAssignment",
    "TaskVisibilityControl",
    "TimestampMixin",
]
