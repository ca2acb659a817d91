"""Repository implementations (SQLAlchemy, async)."""

from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.task_assignment_repo import (
    TaskAssignmentRepository,
)
from app.infrastructure.persistence.repositories.task_repo import TaskRepository
from app.infrastructure.persistence.repositories.visibility_control_repo import (
    VisibilityControlRepository,
)

__all__ = [
    "BaseRepository",
    "TaskAssignmentRepository",
    "TaskRepository",
    "VisibilityControlRepository",
]
